from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple


class CacheError(Exception):
    """I/O fault while reading or writing a cache file."""


class Cache:
    """
    Named byte blobs stored as files under cache_dir.

    read() returns (last modified time, bytes) or None when the file is absent;
    anything beyond absence (permissions, a directory in the way, ...) is a
    CacheError. What the bytes mean is up to the caller.
    """

    def __init__(self, cache_dir: Path) -> None:
        self.cache_dir = Path(cache_dir)

    def _path_for(self, key: str) -> Path:
        return self.cache_dir / key

    def read(self, key: str) -> Optional[Tuple[datetime, bytes]]:
        path = self._path_for(key)
        try:
            data = path.read_bytes()
            mtime = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise CacheError(f"error reading cache file {path}: {e}") from e
        return mtime, data

    def write(self, key: str, data: bytes) -> Path:
        """Write/overwrite the cache file wholesale."""
        path = self._path_for(key)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise CacheError(f"error writing cache file {path}: {e}") from e
        return path
