import logging
import re
from asyncio import get_running_loop
from collections.abc import Awaitable, Callable
from contextlib import suppress
from datetime import timedelta
from inspect import isawaitable
from pathlib import Path, PurePosixPath
from tempfile import NamedTemporaryFile
from time import time

import cython
from sizestr import sizestr

from avatar_privacy.config import AVATAR_CACHE_DIR, AVATAR_CACHE_URL
from avatar_privacy.lib.crypto import get_sub_dir, is_identity_hash
from avatar_privacy.models.types import StorageKey

_TYPE_DIR_RE = re.compile(r'[a-z0-9][a-z0-9_-]*')
_EXTENSION_RE = re.compile(r'[a-z0-9]+')

_FactoryReturn = bytes | None
_Factory = Callable[[], Awaitable[_FactoryReturn] | _FactoryReturn]


def icon_cache_key(
    type_dir: str, identity_hash: str, size: int, extension: str
) -> StorageKey:
    """
    Derive the cache key of an icon.

    The key is a pure function of its components, and distinct components
    always produce distinct keys.

    >>> icon_cache_key('monsterid', 'd41d8cd98f00b204e9800998ecf8427e', 80, 'png')
    'monsterid/d/4/d41d8cd98f00b204e9800998ecf8427e-80.png'
    """
    if _TYPE_DIR_RE.fullmatch(type_dir) is None:
        raise ValueError(f'Invalid icon type directory {type_dir!r}')
    if not is_identity_hash(identity_hash):
        raise ValueError(f'Invalid identity hash {identity_hash!r}')
    if size <= 0:
        raise ValueError(f'Invalid icon size {size!r}')
    if _EXTENSION_RE.fullmatch(extension) is None:
        raise ValueError(f'Invalid file extension {extension!r}')

    return StorageKey(
        f'{type_dir}/{get_sub_dir(identity_hash)}/{identity_hash}-{size}.{extension}'
    )


class FileCache:
    """
    Content-addressed file cache.

    Entries are written once and never modified; a reader either sees no file
    or a fully written one.
    """

    __slots__ = ('_base_dir', '_base_url')

    def __init__(
        self,
        base_dir: Path = AVATAR_CACHE_DIR,
        base_url: str = AVATAR_CACHE_URL,
    ):
        self._base_dir = base_dir
        self._base_url = base_url.rstrip('/')

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def get_path(self, key: str) -> Path:
        """Get the path to a file in the cache."""
        parts = PurePosixPath(key).parts
        if not parts or '..' in parts or parts[0] == '/':
            raise ValueError(f'Invalid cache key {key!r}')
        return self._base_dir.joinpath(*parts)

    def get_url(self, key: StorageKey) -> str:
        """Get the public URL of a file in the cache."""
        return f'{self._base_url}/{key}'

    async def get(self, key: StorageKey) -> bytes | None:
        """
        Get a value from the file cache by key.
        Returns None if the file does not exist.
        """
        path = self.get_path(key)
        loop = get_running_loop()
        try:
            data = await loop.run_in_executor(None, path.read_bytes)
        except OSError:
            logging.debug('Cache miss for %r', key)
            return None

        logging.debug('Cache hit for %r', key)
        return data

    async def set(self, key: StorageKey, data: bytes) -> bool:
        """
        Write a value to the file cache.
        Returns False if the file could not be written.
        """
        path = self.get_path(key)
        loop = get_running_loop()
        try:
            await loop.run_in_executor(None, write_file_atomic, path, data)
        except OSError:
            logging.warning('Failed to write cache file %r', key, exc_info=True)
            return False

        logging.debug('Cache write for %r (%s)', key, sizestr(len(data)))
        return True

    async def get_or_create(self, key: StorageKey, factory: _Factory) -> bytes | None:
        """
        Get a value from the cache.
        If the value is not in the cache, call the factory and store its result.

        Returns None if the factory fails or the result cannot be stored.
        Concurrent misses for the same key may both call the factory; the
        factory is expected to be deterministic so the last writer wins.
        """
        value = await self.get(key)
        if value is not None:
            return value

        value = factory()
        if isawaitable(value):
            value = await value
        if value is None:
            logging.debug('Cache factory failed for %r', key)
            return None

        if not await self.set(key, value):
            return None
        return value

    def invalidate(self, prefix: str = '', pattern: str | None = None) -> int:
        """
        Recursively remove cached files under the key prefix.
        If a pattern is given, only files with a matching name are removed.

        Returns the number of removed files.
        """
        root = self.get_path(prefix) if prefix else self._base_dir
        if root.is_file():
            root.unlink(missing_ok=True)
            return 1

        regex = re.compile(pattern) if pattern is not None else None
        removed: cython.Py_ssize_t = 0

        # reversed order visits children before their parents
        for path in sorted(root.rglob('*'), reverse=True):
            if path.is_dir():
                with suppress(OSError):  # not empty
                    path.rmdir()
            elif regex is None or regex.search(path.name) is not None:
                path.unlink(missing_ok=True)
                removed += 1

        if prefix:
            with suppress(OSError):
                root.rmdir()

        logging.info('Invalidated %d cached files under %r', removed, prefix or '/')
        return removed

    def invalidate_by_age(self, max_age: timedelta) -> int:
        """
        Remove cached files older than max_age.
        Returns the number of removed files.
        """
        threshold = time() - max_age.total_seconds()
        removed: cython.Py_ssize_t = 0
        removed_size: cython.Py_ssize_t = 0

        for path in self._base_dir.rglob('*'):
            try:
                stat = path.stat()
            except OSError:
                continue
            if path.is_file() and stat.st_mtime < threshold:
                path.unlink(missing_ok=True)
                removed += 1
                removed_size += stat.st_size

        logging.info(
            'Invalidated %d cached files older than %s (%s)',
            removed,
            max_age,
            sizestr(removed_size),
        )
        return removed


def write_file_atomic(path: Path, data: bytes) -> None:
    """Write the data to a private temporary file, then publish it by renaming."""
    parent = path.parent
    parent.mkdir(parents=True, exist_ok=True)

    f = NamedTemporaryFile(  # noqa: SIM115
        'wb', dir=parent, prefix=f'.{path.name}.', suffix='.tmp', delete=False
    )
    temp_path = Path(f.name)
    try:
        with f:
            f.write(data)
        temp_path.chmod(0o644)
        temp_path.replace(path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
