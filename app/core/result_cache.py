from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from app.schemas.analysis import AnalysisRecord

logger = logging.getLogger(__name__)


def cache_key(text: str, file_name: str) -> str:
    digest = hashlib.sha256()
    digest.update((text or "").encode("utf-8", errors="ignore"))
    digest.update(b"\0")
    digest.update((file_name or "").encode("utf-8", errors="ignore"))
    return digest.hexdigest()


class ResultCache:
    """One JSON file per analysed résumé. Entries never expire."""

    def __init__(self, directory: str | Path, enabled: bool = True):
        self.directory = Path(directory)
        self.enabled = enabled

    def key(self, text: str, file_name: str) -> str:
        return cache_key(text, file_name)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> AnalysisRecord | None:
        if not self.enabled:
            return None
        path = self._path(key)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("result_cache_read_failed key=%s: %s", key, exc)
            return None
        try:
            return AnalysisRecord.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("result_cache_entry_invalid key=%s errors=%s", key, exc.error_count())
            return None

    def set(self, key: str, record: AnalysisRecord) -> None:
        if not self.enabled:
            return
        self.directory.mkdir(parents=True, exist_ok=True)
        payload = record.model_dump_json(by_alias=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key[:12]}-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def clear(self) -> int:
        if not self.directory.exists():
            return 0
        removed = 0
        for path in self.directory.glob("*.json"):
            path.unlink(missing_ok=True)
            removed += 1
        return removed

    def stats(self) -> dict[str, int | bool | str]:
        entries = list(self.directory.glob("*.json")) if self.directory.exists() else []
        return {
            "enabled": self.enabled,
            "directory": str(self.directory),
            "entries": len(entries),
            "bytes": sum(path.stat().st_size for path in entries),
        }
