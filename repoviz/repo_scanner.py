"""Local repository source: walks a checkout and reads files for analysis."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from .analyzers.languages import classify, is_manifest
from .config import CONFIG_FILENAME, ConfigError, RepovizConfig, load_config
from .logging import get_logger
from .models import SourceFile

logger = get_logger("scanner")

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".idea",
    ".repoviz",
    "target",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

_MAX_FILE_BYTES = 1_000_000


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .repoviz.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return self.directory_only and rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


@dataclass
class ScanResult:
    """Files read from a repository, ready for the analysis pipeline."""

    root: Path
    sources: List[SourceFile] = field(default_factory=list)
    truncated: bool = False


def _build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = _build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _load_ignore_rules(root: Path, exclude_paths: Sequence[str]) -> List[IgnoreRule]:
    rules = _parse_gitignore(root / ".gitignore")
    for pattern in exclude_paths:
        rule = _build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _iter_files(root: Path, rules: Sequence[IgnoreRule]) -> Iterator[tuple[str, Path]]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept_dirs = []
        for name in sorted(dirnames):
            if name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if _should_ignore(rel_path, True, rules):
                continue
            kept_dirs.append(name)
        dirnames[:] = kept_dirs

        for filename in sorted(filenames):
            if filename in _EXCLUDED_FILES or filename == CONFIG_FILENAME:
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _should_ignore(rel_path, False, rules):
                continue
            yield rel_path, current_dir / filename


def _read_text(path: Path) -> Optional[str]:
    try:
        if path.stat().st_size > _MAX_FILE_BYTES:
            logger.debug("Skipping %s: larger than %d bytes", path, _MAX_FILE_BYTES)
            return None
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        logger.debug("Skipping %s: not valid UTF-8", path)
    except OSError as exc:
        logger.debug("Skipping %s: %s", path, exc)
    return None


class RepoScanner:
    """Walks a repository and collects classified source files and manifests."""

    def scan(self, root: str, config: RepovizConfig | None = None) -> ScanResult:
        """Read every analysable file under ``root``.

        Manifests are always included. Other files count towards
        ``analysis.max_files`` and the walk stops collecting them once the cap
        is reached.
        """
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Repository path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Repository path is not a directory: {root}")

        if config is None:
            try:
                config = load_config(root_path)
            except ConfigError as exc:
                logger.warning("Ignoring %s: %s", CONFIG_FILENAME, exc)
                config = RepovizConfig(root=root_path)

        rules = _load_ignore_rules(root_path, config.exclude_paths)
        limit = config.analysis.max_files
        result = ScanResult(root=root_path)
        counted = 0

        for rel_path, path in _iter_files(root_path, rules):
            manifest = is_manifest(rel_path)
            if not manifest and classify(rel_path) is None:
                continue
            if not manifest and counted >= limit:
                result.truncated = True
                continue
            content = _read_text(path)
            if content is None:
                continue
            result.sources.append(
                SourceFile(path=rel_path, content=content, size=path.stat().st_size)
            )
            if not manifest:
                counted += 1

        if result.truncated:
            logger.info("File cap of %d reached; remaining files were skipped", limit)
        logger.debug("Collected %d files from %s", len(result.sources), root_path)
        return result


__all__ = ["IgnoreRule", "RepoScanner", "ScanResult"]
