import logging
import re
from asyncio import get_running_loop
from datetime import timedelta
from pathlib import Path
from time import time

from msgspec import DecodeError, ValidationError

from avatar_privacy.config import NETWORK_MODE, SITE_ID, TRANSIENTS_DIR
from avatar_privacy.lib.file_cache import write_file_atomic
from avatar_privacy.models.msgspec.transient_entry import TransientEntry
from avatar_privacy.models.transient_scope import TransientScope

PREFIX = 'avatar_privacy_'

_KEY_RE = re.compile(r'[A-Za-z0-9_.-]{1,150}')


class Transients:
    """
    Persistent key/value store with expiration.

    One file per key, scoped either to a single site or to the whole network.
    """

    __slots__ = ('_dir', 'scope')

    def __init__(
        self,
        scope: TransientScope,
        *,
        site_id: int = SITE_ID,
        base_dir: Path = TRANSIENTS_DIR,
    ):
        if scope == TransientScope.network:
            self._dir = base_dir.joinpath('network')
        elif scope == TransientScope.site:
            self._dir = base_dir.joinpath(f'site-{site_id}')
        else:
            raise ValueError(f'Unsupported transient scope {scope!r}')
        self.scope = scope

    async def get(self, key: str) -> str | int | None:
        """
        Get a value by key.
        Returns None if the key is missing or expired.
        """
        path = self._get_path(key)
        loop = get_running_loop()
        try:
            entry_bytes = await loop.run_in_executor(None, path.read_bytes)
        except OSError:
            return None

        try:
            entry = TransientEntry.from_bytes(entry_bytes)
        except (DecodeError, ValidationError):
            logging.warning('Discarding corrupted transient %r', key)
            path.unlink(missing_ok=True)
            return None

        if entry.expires_at is not None and entry.expires_at <= time():
            logging.debug('Transient %r expired', key)
            path.unlink(missing_ok=True)
            return None

        return entry.value

    async def set(self, key: str, value: str | int, ttl: timedelta | None) -> bool:
        """
        Set a value with an optional time-to-live.
        Returns False if the value could not be stored.
        """
        path = self._get_path(key)
        expires_at = int(time() + ttl.total_seconds()) if ttl is not None else None
        entry_bytes = TransientEntry(value, expires_at).to_bytes()

        loop = get_running_loop()
        try:
            await loop.run_in_executor(None, write_file_atomic, path, entry_bytes)
        except OSError:
            logging.warning('Failed to store transient %r', key, exc_info=True)
            return False
        return True

    async def delete(self, key: str) -> None:
        """Delete a key from the store."""
        self._get_path(key).unlink(missing_ok=True)

    def get_keys_from_database(self) -> list[str]:
        """Get all stored keys (without the prefix), including expired ones."""
        if not self._dir.is_dir():
            return []
        return sorted(
            path.name.removeprefix(PREFIX)
            for path in self._dir.iterdir()
            if path.name.startswith(PREFIX) and path.is_file()
        )

    def _get_path(self, key: str) -> Path:
        if _KEY_RE.fullmatch(key) is None:
            raise ValueError(f'Invalid transient key {key!r}')
        return self._dir.joinpath(PREFIX + key)


def transients_for_topology(
    network_mode: bool = NETWORK_MODE,
    *,
    site_id: int = SITE_ID,
    base_dir: Path = TRANSIENTS_DIR,
) -> Transients:
    """Select the transient scope for the deployment topology."""
    scope = TransientScope.network if network_mode else TransientScope.site
    logging.debug('Using %s-scoped transients', scope)
    return Transients(scope, site_id=site_id, base_dir=base_dir)
