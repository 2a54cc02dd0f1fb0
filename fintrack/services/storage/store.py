"""
Record Store Implementations

JsonFileRecordStore keeps one <key>.json file per logical key in a
data directory. InMemoryRecordStore is a dict, used by tests and when
no data directory is wanted.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

import structlog

from fintrack.services.storage.interface import RecordStore, StorageError


logger = structlog.get_logger(__name__)


class JsonFileRecordStore(RecordStore):
    """
    Record store backed by JSON files.
    
    Writes go to a temporary file in the same directory and are then
    moved over the target, so a crash never leaves a half-written file.
    Malformed files are not repaired; json errors propagate.
    """
    
    def __init__(self, directory: Path):
        self._directory = Path(directory).expanduser()
    
    def _path_for(self, key: str) -> Path:
        return self._directory / f"{key}.json"
    
    def get(self, key: str) -> Optional[Any]:
        path = self._path_for(key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e
        return json.loads(text)
    
    def set(self, key: str, value: Any) -> None:
        path = self._path_for(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._directory,
                prefix=f".{key}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(value, fh, ensure_ascii=False)
            os.replace(tmp_name, path)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e
        logger.debug("record_store_write", key=key, path=str(path))


class InMemoryRecordStore(RecordStore):
    """Dict-backed record store. Values are deep-copied through JSON."""
    
    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)
    
    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None
    
    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)
