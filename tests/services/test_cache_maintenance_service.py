from datetime import timedelta

from avatar_privacy.lib.file_cache import FileCache, icon_cache_key
from avatar_privacy.lib.transients import Transients
from avatar_privacy.services.cache_maintenance_service import CacheMaintenanceService

_HASH = 'd41d8cd98f00b204e9800998ecf8427e'


async def test_clear_icon_cache(file_cache: FileCache):
    await file_cache.set(icon_cache_key('monsterid', _HASH, 80, 'png'), b'data')
    await file_cache.set(icon_cache_key('geometric', _HASH, 80, 'svg'), b'data')

    service = CacheMaintenanceService(file_cache)
    assert await service.clear_icon_cache('geometric') == 1
    assert await service.clear_icon_cache() == 1
    assert await service.clear_icon_cache() == 0


async def test_clear_icon_cache_by_age(file_cache: FileCache):
    key = icon_cache_key('monsterid', _HASH, 80, 'png')
    await file_cache.set(key, b'data')

    service = CacheMaintenanceService(file_cache)
    assert await service.clear_icon_cache_by_age(timedelta(days=1)) == 0
    assert await service.clear_icon_cache_by_age(timedelta(seconds=-1)) == 1
    assert await file_cache.get(key) is None


async def test_clear_validation_cache(transients: Transients):
    await transients.set(f'check_{_HASH}', 0, None)
    await transients.set('check_0bc83cb571cd1c50ba6f3e8a78ef1346', 'image/png', None)

    assert await CacheMaintenanceService.clear_validation_cache(transients) == 2
    assert transients.get_keys_from_database() == []
