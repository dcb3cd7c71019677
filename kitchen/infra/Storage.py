"""Key-value storage port and its implementations (memory, JSON file).

Each concern owns one named slot holding a string value, the same contract a
browser's local storage offers. Repositories depend on the port only.
"""
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a storage slot cannot be read or written."""


class StorageQuotaExceeded(StorageError):
    """Raised when a write would exceed the configured quota."""


class KeyValueStorage:
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    """In-process storage. quota counts characters across all slots (0 = unlimited)."""

    def __init__(self, quota: int = 0):
        self._slots: Dict[str, str] = {}
        self.quota = quota

    def get(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Storage values must be strings, got {type(value).__name__}")
        if self.quota:
            used = sum(len(k) + len(v) for k, v in self._slots.items() if k != key)
            if used + len(key) + len(value) > self.quota:
                raise StorageQuotaExceeded(f"Quota of {self.quota} exceeded writing '{key}'")
        self._slots[key] = value

    def delete(self, key: str) -> None:
        self._slots.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """All slots kept in a single JSON object file, rewritten atomically on each change."""

    def __init__(self, path: Path, quota: int = 0):
        self.path = Path(path)
        self.quota = quota

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError
            logger.warning(f"Unreadable storage file {self.path}: {e}")
            return {}
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            logger.warning(f"Storage file {self.path} does not hold an object; ignoring it")
            return {}
        return data

    def _atomic_write(self, slots: Dict[str, str]) -> None:
        content = json.dumps(slots, indent=2, ensure_ascii=False)
        if self.quota and len(content.encode('utf-8')) > self.quota:
            raise StorageQuotaExceeded(f"Quota of {self.quota} bytes exceeded for {self.path}")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".storage_", suffix=".json")
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as tmp:
                tmp.write(content)
            shutil.move(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Storage values must be strings, got {type(value).__name__}")
        slots = self._read_all()
        slots[key] = value
        self._atomic_write(slots)

    def delete(self, key: str) -> None:
        slots = self._read_all()
        if key not in slots:
            return
        del slots[key]
        self._atomic_write(slots)
