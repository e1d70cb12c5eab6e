"""Configuration loading for repoviz (.repoviz.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .analyzers.complexity import ComplexityThresholds

CONFIG_FILENAME = ".repoviz.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class AnalysisConfig:
    """Batch limits for a repository analysis run."""

    max_files: int = 50
    workers: int = 4
    max_cycles: int = 1000


@dataclass
class CacheConfig:
    """Where per-file analysis results are memoised."""

    enabled: bool = True
    path: str = ".repoviz/cache.json"


@dataclass
class RepovizConfig:
    """Represents the settings defined in .repoviz.yml."""

    root: Path
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    complexity: ComplexityThresholds = field(default_factory=ComplexityThresholds)
    cache: CacheConfig = field(default_factory=CacheConfig)
    exclude_paths: List[str] = field(default_factory=list)

    @property
    def cache_path(self) -> Optional[Path]:
        if not self.cache.enabled:
            return None
        return self.root / self.cache.path


def load_config(config_path: Path) -> RepovizConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return RepovizConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    defaults = AnalysisConfig()
    analysis_data = _as_dict(data.get("analysis"))
    analysis = AnalysisConfig(
        max_files=_positive(_as_int(analysis_data.get("max_files")), defaults.max_files),
        workers=_positive(_as_int(analysis_data.get("workers")), defaults.workers),
        max_cycles=_positive(_as_int(analysis_data.get("max_cycles")), defaults.max_cycles),
    )

    base = ComplexityThresholds()
    complexity_data = _as_dict(data.get("complexity"))
    complexity = ComplexityThresholds(
        low=_positive(_as_int(complexity_data.get("low")), base.low),
        medium=_positive(_as_int(complexity_data.get("medium")), base.medium),
        high=_positive(_as_int(complexity_data.get("high")), base.high),
    )
    if not complexity.low <= complexity.medium <= complexity.high:
        raise ConfigError("complexity thresholds must satisfy low <= medium <= high")

    cache_data = _as_dict(data.get("cache"))
    cache = CacheConfig()
    enabled = _as_bool(cache_data.get("enabled"))
    if enabled is not None:
        cache.enabled = enabled
    cache.path = _as_str(cache_data.get("path")) or cache.path

    return RepovizConfig(
        root=root,
        analysis=analysis,
        complexity=complexity,
        cache=cache,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _positive(value: Optional[int], default: int) -> int:
    if value is None or value < 1:
        return default
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "AnalysisConfig",
    "CacheConfig",
    "ConfigError",
    "RepovizConfig",
    "load_config",
]
