from collections.abc import Callable
from datetime import timedelta
from time import time

import pytest
from httpx import AsyncClient, ConnectTimeout, MockTransport, Request, Response

from avatar_privacy.lib.transients import Transients
from avatar_privacy.lib.validation_context import validation_context
from avatar_privacy.models.msgspec.transient_entry import TransientEntry
from avatar_privacy.services.gravatar_service import GravatarService

_EMAIL = 'Foo@Bar.com '
_HASH = 'f3ada405ce890b6f8204094deb12d8a8'


def _service(
    transients: Transients, handler: Callable[[Request], Response], **kwargs
) -> tuple[GravatarService, list[Request]]:
    requests: list[Request] = []

    def record(request: Request) -> Response:
        requests.append(request)
        return handler(request)

    http = AsyncClient(transport=MockTransport(record))
    return GravatarService(transients, http=http, **kwargs), requests


def test_get_hash():
    assert GravatarService.get_hash(_EMAIL) == _HASH


@pytest.mark.parametrize(
    ('size', 'rating', 'expected'),
    [
        (80, 'x', f'https://secure.gravatar.com/avatar/{_HASH}?d=404&s=80&r=x'),
        (None, 'g', f'https://secure.gravatar.com/avatar/{_HASH}?d=404&s=&r=g'),
    ],
)
def test_get_url(transients, size, rating, expected):
    service = GravatarService(transients)
    assert service.get_url(_EMAIL, size, rating) == expected
    assert service.get_url(_HASH, size, rating) == expected


@pytest.mark.parametrize(
    ('present', 'age', 'expected'),
    [
        (False, timedelta(), timedelta(minutes=10)),
        (False, timedelta(seconds=3599), timedelta(minutes=10)),
        (False, timedelta(seconds=3600), timedelta(hours=1)),
        (False, timedelta(hours=23), timedelta(hours=1)),
        (False, timedelta(days=1), timedelta(days=1)),
        (False, timedelta(days=6), timedelta(days=1)),
        (False, timedelta(seconds=604800), timedelta(weeks=1)),
        (False, timedelta(days=365), timedelta(weeks=1)),
        (True, timedelta(), timedelta(weeks=1)),
        (True, timedelta(days=365), timedelta(weeks=1)),
    ],
)
def test_calculate_caching_duration(transients, present, age, expected):
    result = 'image/png' if present else 0
    assert GravatarService(transients).calculate_caching_duration(result, age) == expected


def test_calculate_caching_duration_filter(transients):
    calls = []

    def interval_filter(duration: timedelta, present: bool, age: timedelta) -> timedelta:
        calls.append((duration, present, age))
        return timedelta(seconds=42)

    service = GravatarService(transients, interval_filter=interval_filter)
    assert service.calculate_caching_duration(0, timedelta(hours=2)) == timedelta(seconds=42)
    assert calls == [(timedelta(hours=1), False, timedelta(hours=2))]


async def test_validate_found(transients: Transients):
    service, requests = _service(
        transients, lambda _: Response(200, headers={'Content-Type': 'image/png'})
    )
    assert await service.validate(_EMAIL) == 'image/png'
    assert len(requests) == 1
    assert requests[0].method == 'HEAD'
    assert str(requests[0].url) == service.get_url(_HASH)
    assert await transients.get(f'check_{_HASH}') == 'image/png'


async def test_validate_not_found(transients: Transients):
    service, _ = _service(transients, lambda _: Response(404))
    assert await service.validate(_EMAIL) == ''
    assert await transients.get(f'check_{_HASH}') == 0


async def test_validate_server_error(transients: Transients):
    service, requests = _service(transients, lambda _: Response(500))
    assert await service.validate(_EMAIL) == ''
    assert await service.validate(_EMAIL) == ''
    assert len(requests) == 2
    assert transients.get_keys_from_database() == []


async def test_validate_transport_error(transients: Transients):
    def handler(request: Request) -> Response:
        raise ConnectTimeout('timed out', request=request)

    service, _ = _service(transients, handler)
    assert await service.validate(_EMAIL) == ''
    assert transients.get_keys_from_database() == []


async def test_validate_empty_email(transients: Transients):
    service, requests = _service(transients, lambda _: Response(200))
    assert await service.validate('') == ''
    assert requests == []


async def test_validate_persistent_cache(transients: Transients):
    await transients.set(f'check_{_HASH}', 'image/jpeg', timedelta(hours=1))
    service, requests = _service(transients, lambda _: Response(404))
    assert await service.validate(_EMAIL) == 'image/jpeg'
    assert requests == []


async def test_validate_persistent_cache_absent(transients: Transients):
    await transients.set(f'check_{_HASH}', 0, timedelta(hours=1))
    service, requests = _service(transients, lambda _: Response(200))
    assert await service.validate(_EMAIL) == ''
    assert requests == []


@pytest.mark.parametrize(
    ('response', 'age', 'expected_result', 'expected_ttl'),
    [
        (Response(404), timedelta(days=30), 0, timedelta(weeks=1)),
        (Response(404), timedelta(), 0, timedelta(minutes=10)),
        (Response(404), timedelta(hours=5), 0, timedelta(hours=1)),
        (
            Response(200, headers={'Content-Type': 'image/png'}),
            timedelta(),
            'image/png',
            timedelta(weeks=1),
        ),
    ],
)
async def test_validate_ttl(transients: Transients, response, age, expected_result, expected_ttl):
    service, _ = _service(transients, lambda _: response)
    await service.validate(_EMAIL, age)

    path = transients._get_path(f'check_{_HASH}')  # noqa: SLF001
    entry = TransientEntry.from_bytes(path.read_bytes())
    assert entry.value == expected_result
    assert entry.expires_at is not None
    ttl = entry.expires_at - time()
    assert expected_ttl.total_seconds() - 5 <= ttl <= expected_ttl.total_seconds()


async def test_validation_context_memo(transients: Transients):
    service, requests = _service(
        transients, lambda _: Response(200, headers={'Content-Type': 'image/png'})
    )
    with validation_context():
        assert await service.validate_hash(_HASH) == 'image/png'
        # persistent layer is bypassed by the memo
        await transients.delete(f'check_{_HASH}')
        assert await service.validate_hash(_HASH) == 'image/png'
    assert len(requests) == 1

    # outside of the context the next lookup asks again
    assert await service.validate_hash(_HASH) == 'image/png'
    assert len(requests) == 2


async def test_validation_context_warmed_from_store(transients: Transients):
    await transients.set(f'check_{_HASH}', 0, None)
    service, requests = _service(transients, lambda _: Response(200))
    with validation_context():
        assert await service.validate_hash(_HASH) == ''
        await transients.delete(f'check_{_HASH}')
        assert await service.validate_hash(_HASH) == ''
    assert requests == []


async def test_get_image(transients: Transients):
    service, requests = _service(transients, lambda _: Response(200, content=b'image'))
    assert await service.get_image(_EMAIL, 96, 'g') == b'image'
    assert requests[0].method == 'GET'
    assert requests[0].url.params['s'] == '96'


@pytest.mark.parametrize('status_code', [404, 500])
async def test_get_image_failure(transients: Transients, status_code):
    service, _ = _service(transients, lambda _: Response(status_code, content=b'error'))
    assert await service.get_image(_EMAIL) == b''
