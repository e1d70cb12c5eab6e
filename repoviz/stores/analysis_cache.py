"""Persistent cache for per-file analysis results."""

from __future__ import annotations

import hashlib
import json
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Dict, Iterable, Optional

from ..logging import get_logger
from ..models import FileMetadata, file_metadata_from_dict, file_metadata_to_dict

_CACHE_VERSION = 1

logger = get_logger("cache")


def fingerprint(content: str) -> str:
    """Return the sha256 hex digest of ``content`` encoded as UTF-8."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class AnalysisCache:
    """Stores FileMetadata keyed by path, content fingerprint and analyzer signature."""

    def __init__(self, path: Path | None, *, signature: str) -> None:
        self._path = path
        self._signature = signature
        self._entries: Dict[str, Dict[str, object]] = {}
        self._dirty = False
        self._lock = threading.Lock()
        if self._path is not None:
            self._load(self._path)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str, *, fingerprint: str) -> Optional[FileMetadata]:
        with self._lock:
            entry = self._entries.get(key)
        if not entry:
            return None
        if entry.get("signature") != self._signature:
            return None
        if entry.get("fingerprint") != fingerprint:
            return None
        return file_metadata_from_dict(entry.get("metadata"))

    def store(self, key: str, *, fingerprint: str, metadata: FileMetadata) -> None:
        entry = {
            "signature": self._signature,
            "fingerprint": fingerprint,
            "metadata": file_metadata_to_dict(metadata),
            "updated_at": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        }
        with self._lock:
            self._entries[key] = entry
            self._dirty = True

    def prune(self, keys_to_keep: Iterable[str]) -> None:
        keep = set(keys_to_keep)
        with self._lock:
            removed = [key for key in self._entries if key not in keep]
            for key in removed:
                self._entries.pop(key, None)
            if removed:
                self._dirty = True

    def persist(self) -> None:
        if not self._dirty or self._path is None:
            return
        payload = {"version": _CACHE_VERSION, "entries": self._entries}
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not write analysis cache %s: %s", self._path, exc)
            return
        self._dirty = False

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._dirty = True

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError) as exc:
            logger.debug("Ignoring unreadable analysis cache %s: %s", path, exc)
            return
        if not isinstance(data, dict) or data.get("version") != _CACHE_VERSION:
            return
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return
        self._entries = {
            key: raw
            for key, raw in entries.items()
            if isinstance(key, str)
            and isinstance(raw, dict)
            and {"signature", "fingerprint", "metadata"} <= raw.keys()
        }


__all__ = ["AnalysisCache", "fingerprint"]
