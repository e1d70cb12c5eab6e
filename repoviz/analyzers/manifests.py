"""Parsers for dependency manifests.

Every parser returns a neutral value (``None`` or an empty mapping) on input it
cannot read; no parse error escapes to the caller. A declared dependency with no
version constraint is recorded as the ``"*"`` wildcard rather than dropped.
"""

from __future__ import annotations

import json
import posixpath
import re
import tomllib
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from ..logging import get_logger
from ..models import WILDCARD, ManifestDeclarations

logger = get_logger("manifests")

_REQUIREMENT = re.compile(r"^([A-Za-z0-9][A-Za-z0-9\-_.]*)\s*(?:\[[^\]]*\])?\s*([=<>!~].*)?$")
_PEP508_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9\-_.]*)\s*(?:\[[^\]]*\])?\s*(.*)$")
_CARGO_SECTIONS = {
    "[dependencies]": "dependencies",
    "[dev-dependencies]": "dev_dependencies",
}
_INLINE_VERSION = re.compile(r"\bversion\s*=\s*['\"]([^'\"]*)['\"]")
_QUOTED_VALUE = re.compile(r"^(['\"])(.*?)\1")


@dataclass(frozen=True)
class PackageJsonInfo:
    """Fields of interest from a package.json document."""

    name: Optional[str] = None
    version: Optional[str] = None
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)
    scripts: Dict[str, str] = field(default_factory=dict)
    author: Any = None
    license: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class CargoInfo:
    """Runtime and development dependencies from a Cargo.toml document."""

    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)


def parse_package_json(content: str) -> Optional[PackageJsonInfo]:
    """Parse package.json strictly; return None on any decode problem."""
    try:
        data = json.loads(content)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None

    return PackageJsonInfo(
        name=_opt_str(data.get("name")),
        version=_opt_str(data.get("version")),
        dependencies=_version_map(data.get("dependencies")),
        dev_dependencies=_version_map(data.get("devDependencies")),
        scripts=_version_map(data.get("scripts")),
        author=data.get("author"),
        license=_opt_str(data.get("license")),
        description=_opt_str(data.get("description")),
    )


def parse_requirements_txt(content: str) -> Dict[str, str]:
    """Map requirement names to their version specifier or the wildcard."""
    dependencies: Dict[str, str] = {}
    for line in (content or "").split("\n"):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        # drop inline comments and environment markers
        trimmed = trimmed.split(" #", 1)[0].split(";", 1)[0].strip()
        match = _REQUIREMENT.match(trimmed)
        if not match:
            continue
        spec = (match.group(2) or "").strip()
        dependencies[match.group(1)] = spec or WILDCARD
    return dependencies


def parse_cargo_toml(content: Optional[str]) -> Optional[CargoInfo]:
    """Read ``[dependencies]`` and ``[dev-dependencies]`` from a Cargo manifest.

    Only single-line ``key = value`` entries are understood. Dotted table
    headers such as ``[dependencies.serde]``, arrays and multi-line values are
    ignored. Inline tables keep their key, using their ``version`` field or
    the wildcard.
    """
    if not isinstance(content, str):
        return None

    sections: Dict[str, Dict[str, str]] = {"dependencies": {}, "dev_dependencies": {}}
    current: Optional[str] = None
    for line in content.split("\n"):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        if trimmed.startswith("["):
            current = _CARGO_SECTIONS.get(trimmed)
            continue
        if current is None or "=" not in trimmed:
            continue
        name, value = (part.strip() for part in trimmed.split("=", 1))
        if not name or not value or value.startswith("["):
            continue
        if value.startswith("{"):
            match = _INLINE_VERSION.search(value)
            version = match.group(1) if match else WILDCARD
        else:
            quoted = _QUOTED_VALUE.match(value)
            version = quoted.group(2) if quoted else value.split("#", 1)[0].strip()
        sections[current][name.strip("'\"")] = version or WILDCARD

    return CargoInfo(
        dependencies=sections["dependencies"],
        dev_dependencies=sections["dev_dependencies"],
    )


def parse_pyproject_toml(content: str) -> Optional[Dict[str, Dict[str, str]]]:
    """Collect PEP 621 and Poetry dependencies from pyproject.toml."""
    try:
        data = tomllib.loads(content)
    except (TypeError, tomllib.TOMLDecodeError) as exc:
        logger.debug("pyproject.toml could not be parsed: %s", exc)
        return None

    runtime: Dict[str, str] = {}
    dev: Dict[str, str] = {}

    project = data.get("project")
    if isinstance(project, dict):
        runtime.update(_pep508_map(project.get("dependencies") or []))
        optional = project.get("optional-dependencies") or {}
        if isinstance(optional, dict):
            for values in optional.values():
                dev.update(_pep508_map(values or []))

    tool = data.get("tool")
    poetry = tool.get("poetry") if isinstance(tool, dict) else None
    if isinstance(poetry, dict):
        runtime.update(_poetry_map(poetry.get("dependencies")))
        dev.update(_poetry_map(poetry.get("dev-dependencies")))
        groups = poetry.get("group")
        if isinstance(groups, dict):
            for group in groups.values():
                if isinstance(group, dict):
                    dev.update(_poetry_map(group.get("dependencies")))

    return {"dependencies": runtime, "dev_dependencies": dev}


def parse_manifest(path: str, content: str) -> Optional[ManifestDeclarations]:
    """Parse any supported manifest into a uniform declaration record."""
    basename = posixpath.basename(path.replace("\\", "/"))
    if basename == "package.json":
        info = parse_package_json(content)
        if info is None:
            return None
        return ManifestDeclarations(
            path=path,
            ecosystem="npm",
            name=info.name,
            dependencies=info.dependencies,
            dev_dependencies=info.dev_dependencies,
        )
    if basename == "requirements.txt":
        return ManifestDeclarations(
            path=path, ecosystem="pypi", dependencies=parse_requirements_txt(content)
        )
    if basename == "pyproject.toml":
        parsed = parse_pyproject_toml(content)
        if parsed is None:
            return None
        return ManifestDeclarations(
            path=path,
            ecosystem="pypi",
            dependencies=parsed["dependencies"],
            dev_dependencies=parsed["dev_dependencies"],
        )
    if basename == "Cargo.toml":
        cargo = parse_cargo_toml(content)
        if cargo is None:
            return None
        return ManifestDeclarations(
            path=path,
            ecosystem="cargo",
            dependencies=cargo.dependencies,
            dev_dependencies=cargo.dev_dependencies,
        )
    return None


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _version_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): str(item) if item is not None else WILDCARD for key, item in value.items()}


def _pep508_map(entries: Iterable[Any]) -> Dict[str, str]:
    result: Dict[str, str] = {}
    for entry in entries:
        if not isinstance(entry, str):
            continue
        match = _PEP508_NAME.match(entry.split(";", 1)[0])
        if match:
            result[match.group(1)] = match.group(2).strip() or WILDCARD
    return result


def _poetry_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    result: Dict[str, str] = {}
    for name, spec in value.items():
        if str(name).lower() == "python":
            continue
        if isinstance(spec, str):
            result[str(name)] = spec or WILDCARD
        elif isinstance(spec, dict) and isinstance(spec.get("version"), str):
            result[str(name)] = spec["version"]
        else:
            result[str(name)] = WILDCARD
    return result


__all__ = [
    "CargoInfo",
    "PackageJsonInfo",
    "parse_cargo_toml",
    "parse_manifest",
    "parse_package_json",
    "parse_pyproject_toml",
    "parse_requirements_txt",
]
