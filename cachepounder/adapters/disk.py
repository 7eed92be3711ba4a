"""
Disk-backed reference cache for the DISK store type.

Each entry is one file under the configured directory. Writes go to a
temporary file first and are moved into place with os.replace so a
concurrent reader sees either the old or the new value, never a partial one.
"""

import hashlib
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Set

from cachepounder.errors import CacheAdapterError, ErrorCode
from cachepounder.interfaces import CacheAdapter

ENTRY_SUFFIX = ".entry"


class DiskCacheAdapter(CacheAdapter):
    """Stores values as individual files below ``base_path``."""

    def __init__(self, config=None, base_path: str = None, fsync: bool = False):
        self.config = config
        self.fsync = fsync
        self.temp_dir = None

        if base_path is None and config is not None:
            base_path = config.disk_store_path

        if not base_path:
            self.temp_dir = tempfile.TemporaryDirectory(prefix="cachepounder_")
            self.base_path = Path(self.temp_dir.name)
        else:
            self.base_path = Path(base_path)
            if self.base_path.exists() and not self.base_path.is_dir():
                raise CacheAdapterError(
                    f"Disk store path {self.base_path} exists but is not a directory",
                    adapter=type(self).__name__,
                    suggestion="Point diskStorePath at a directory",
                    code=ErrorCode.ADAPTER_INIT_FAILED,
                )
            self.base_path.mkdir(parents=True, exist_ok=True)
            # Remove only entries a previous run left behind
            for entry in self.base_path.glob(f"*{ENTRY_SUFFIX}"):
                entry.unlink()

        self._keys: Set[str] = set()
        self._lock = threading.Lock()

    def _get_path(self, key: str) -> Path:
        digest = hashlib.sha1(key.encode('utf-8')).hexdigest()
        return self.base_path / f"{digest}{ENTRY_SUFFIX}"

    def put(self, key: str, value: bytes) -> None:
        path = self._get_path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.base_path, suffix=".tmp")
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(value)
                if self.fsync:
                    f.flush()
                    os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        with self._lock:
            self._keys.add(key)

    def get(self, key: str) -> Optional[bytes]:
        try:
            with open(self._get_path(key), 'rb') as f:
                return f.read()
        except FileNotFoundError:
            return None

    def size(self) -> int:
        with self._lock:
            return len(self._keys)

    def close(self) -> None:
        with self._lock:
            for key in self._keys:
                path = self._get_path(key)
                if path.exists():
                    path.unlink()
            self._keys.clear()
        if self.temp_dir is not None:
            self.temp_dir.cleanup()
            self.temp_dir = None

    def describe(self) -> Dict[str, Any]:
        description = super().describe()
        description.update({'diskStorePath': str(self.base_path), 'fsync': self.fsync})
        return description
