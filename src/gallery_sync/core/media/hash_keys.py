"""Structural identity keys for media files.

A media object is identified by ``md5(file_name + timestamp)`` where the
timestamp is the file's modification time in UTC, truncated to whole seconds.
Identical bytes under another name, or changed bytes under the same name and
time, are therefore treated as different and identical files respectively.
"""

import hashlib
import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Optional, Set

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Upper bound for collision bumps; a gallery never has this many files with one name
MAX_BUMPS = 100_000


def file_timestamp(file_path: Path) -> datetime:
    """Get the UTC timestamp used for a file's hash key.

    Args:
        file_path: Path to the file

    Returns:
        Timezone-aware UTC datetime without microseconds
    """
    mtime = file_path.stat().st_mtime
    return datetime.fromtimestamp(int(mtime), tz=timezone.utc)


def compute_hash_key(file_name: str, timestamp: datetime) -> str:
    """Compute the hash key for a file name and timestamp.

    Args:
        file_name: File name without directory
        timestamp: UTC timestamp of the file

    Returns:
        Hexadecimal MD5 digest
    """
    stamp = timestamp.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)
    return hashlib.md5(f"{file_name}{stamp}".encode("utf-8")).hexdigest()


def hash_key_for_file(file_path: Path) -> str:
    """Compute the current hash key of a file on disk."""
    return compute_hash_key(file_path.name, file_timestamp(file_path))


class HashKeyRegistry:
    """Tracks every hash key in use for a gallery during one run.

    Seeded with the keys already stored, it hands out keys guaranteed not to
    collide with any of them or with keys assigned earlier in the run.
    """

    def __init__(self, used_keys: Optional[Iterable[str]] = None) -> None:
        """Initialize registry.

        Args:
            used_keys: Keys already in use (typically every stored key)
        """
        self._used: Set[str] = set(used_keys or ())

    def __contains__(self, key: str) -> bool:
        return key in self._used

    def __len__(self) -> int:
        return len(self._used)

    def add(self, key: str) -> None:
        """Mark a key as used."""
        self._used.add(key)

    def get_unique_key(
        self,
        file_path: Path,
        own_key: Optional[str] = None,
        write_back: bool = True,
    ) -> str:
        """Get a unique hash key for a file, bumping its timestamp on collision.

        The timestamp moves forward one second per collision until the key is
        unused. With ``write_back`` the final timestamp is written to the file's
        modification time so the key is reproduced on the next run.

        Args:
            file_path: Path to the file
            own_key: Key currently held by the file's record, which counts as free
            write_back: Whether the bumped timestamp may be written to disk

        Returns:
            A key that is now registered as used
        """
        base = file_timestamp(file_path)
        timestamp = base
        key = compute_hash_key(file_path.name, timestamp)

        bumps = 0
        while key in self._used and key != own_key:
            bumps += 1
            if bumps > MAX_BUMPS:
                raise RuntimeError(f"Could not find a unique hash key for {file_path}")
            timestamp = base + timedelta(seconds=bumps)
            key = compute_hash_key(file_path.name, timestamp)

        if bumps:
            logger.debug(
                "Hash key collision for %s, timestamp bumped by %ss", file_path, bumps
            )
            if write_back:
                self._write_timestamp(file_path, timestamp)

        self._used.add(key)
        return key

    @staticmethod
    def _write_timestamp(file_path: Path, timestamp: datetime) -> None:
        try:
            stat = file_path.stat()
            os.utime(file_path, (stat.st_atime, timestamp.timestamp()))
        except OSError as e:
            logger.warning("Could not update timestamp of %s: %s", file_path, e)
