import logging
from asyncio import get_running_loop
from datetime import timedelta

from avatar_privacy.config import ICON_CACHE_MAX_AGE
from avatar_privacy.lib.file_cache import FileCache
from avatar_privacy.lib.transients import Transients


class CacheMaintenanceService:
    """Bulk removal of cached icons and validation results."""

    __slots__ = ('_file_cache',)

    def __init__(self, file_cache: FileCache):
        self._file_cache = file_cache

    async def clear_icon_cache(self, prefix: str = '') -> int:
        """Remove all cached icons under the key prefix."""
        loop = get_running_loop()
        return await loop.run_in_executor(None, self._file_cache.invalidate, prefix)

    async def clear_icon_cache_by_age(
        self, max_age: timedelta = ICON_CACHE_MAX_AGE
    ) -> int:
        """Remove cached icons not regenerated within max_age."""
        loop = get_running_loop()
        return await loop.run_in_executor(
            None, self._file_cache.invalidate_by_age, max_age
        )

    @staticmethod
    async def clear_validation_cache(transients: Transients) -> int:
        """Remove all stored validation results of the transients scope."""
        keys = transients.get_keys_from_database()
        for key in keys:
            await transients.delete(key)
        logging.info('Cleared %d %s-scoped transients', len(keys), transients.scope)
        return len(keys)
