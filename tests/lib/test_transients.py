from datetime import timedelta

import pytest

from avatar_privacy.lib.transients import PREFIX, Transients, transients_for_topology
from avatar_privacy.models.transient_scope import TransientScope


async def test_basic_operations(transients: Transients):
    assert await transients.get('key') is None

    assert await transients.set('key', 'image/png', timedelta(hours=1))
    assert await transients.get('key') == 'image/png'

    await transients.delete('key')
    assert await transients.get('key') is None


async def test_integer_value(transients: Transients):
    assert await transients.set('key', 0, None)
    assert await transients.get('key') == 0


@pytest.mark.parametrize(
    ('ttl', 'is_deleted'),
    [
        (timedelta(hours=1), False),
        (timedelta(seconds=-1), True),
        (None, False),
    ],
)
async def test_ttl_expiration(transients: Transients, ttl, is_deleted):
    await transients.set('expire_key', 'value', ttl)
    result = await transients.get('expire_key')
    if is_deleted:
        assert result is None, f'With TTL {ttl}, entry must be deleted'
        assert transients.get_keys_from_database() == []
    else:
        assert result == 'value', f'With TTL {ttl}, entry must not be deleted'


async def test_corrupted_entry(transients: Transients):
    await transients.set('key', 'value', None)
    path = next(transients._dir.iterdir())  # noqa: SLF001
    path.write_bytes(b'\xc1 not msgpack')
    assert await transients.get('key') is None
    assert not path.exists()


async def test_get_keys_from_database(transients: Transients):
    assert transients.get_keys_from_database() == []
    await transients.set('check_b', 0, None)
    await transients.set('check_a', 'image/png', None)
    assert transients.get_keys_from_database() == ['check_a', 'check_b']


async def test_files_are_prefixed(transients: Transients):
    await transients.set('key', 0, None)
    assert [p.name for p in transients._dir.iterdir()] == [PREFIX + 'key']  # noqa: SLF001


@pytest.mark.parametrize('key', ['', '../key', 'a/b', 'x' * 151])
async def test_invalid_key(transients: Transients, key):
    with pytest.raises(ValueError):
        await transients.get(key)


async def test_scopes_are_isolated(tmp_path):
    site1 = Transients(TransientScope.site, site_id=1, base_dir=tmp_path)
    site2 = Transients(TransientScope.site, site_id=2, base_dir=tmp_path)
    network = Transients(TransientScope.network, base_dir=tmp_path)

    await site1.set('key', 'site1', None)
    await network.set('key', 'network', None)
    assert await site1.get('key') == 'site1'
    assert await site2.get('key') is None
    assert await network.get('key') == 'network'


def test_unsupported_scope(tmp_path):
    with pytest.raises(ValueError, match='Unsupported transient scope'):
        Transients('global', base_dir=tmp_path)  # pyright: ignore[reportArgumentType]


@pytest.mark.parametrize(
    ('network_mode', 'expected'),
    [
        (False, TransientScope.site),
        (True, TransientScope.network),
    ],
)
def test_transients_for_topology(tmp_path, network_mode, expected):
    assert transients_for_topology(network_mode, base_dir=tmp_path).scope == expected
