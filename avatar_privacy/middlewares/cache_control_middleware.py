from datetime import timedelta
from functools import wraps

import cython
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from avatar_privacy.config import STATIC_CACHE_MAX_AGE, STATIC_CACHE_STALE
from avatar_privacy.middlewares.request_context_middleware import get_request

_REDIRECT_STATUS_CODES = frozenset((301, 302, 307, 308))


class CacheControlMiddleware:
    """
    Add Cache-Control header from @cache_control decorator.

    Icon responses are content-addressed and may be served stale while
    revalidating. Redirects point at the result of a Gravatar validation,
    which expires on its own schedule, so they are never served stale.
    Static files are immutable.
    """

    __slots__ = ('app',)

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope['type'] != 'http':
            return await self.app(scope, receive, send)

        request = get_request()
        if request.method not in {'GET', 'HEAD'}:
            return await self.app(scope, receive, send)

        async def wrapper(message: Message) -> None:
            if message['type'] == 'http.response.start':
                status_code: cython.int = message['status']
                header: str | None = None

                if 200 <= status_code < 300:
                    policy = request.state._state.get('cache_control')  # noqa: SLF001
                    if policy is not None:
                        header = _make_header(*policy)
                    elif request.url.path.startswith('/static'):
                        header = _make_header(
                            STATIC_CACHE_MAX_AGE, STATIC_CACHE_STALE, immutable=True
                        )
                elif status_code in _REDIRECT_STATUS_CODES:
                    policy = request.state._state.get('cache_control')  # noqa: SLF001
                    if policy is not None:
                        header = _make_header(policy[0])

                if header is not None:
                    headers = MutableHeaders(raw=message['headers'])
                    headers.setdefault('Cache-Control', header)

            return await send(message)

        return await self.app(scope, receive, wrapper)


def cache_control(max_age: timedelta, stale: timedelta = timedelta()):
    """Decorator to set the Cache-Control policy for an endpoint."""
    policy = (max_age, stale)

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            state = get_request().state._state  # noqa: SLF001
            state['cache_control'] = policy
            return await func(*args, **kwargs)

        return wrapper

    return decorator


def _make_header(
    max_age: timedelta,
    stale: timedelta = timedelta(),
    *,
    immutable: bool = False,
) -> str:
    """
    >>> _make_header(timedelta(minutes=10))
    'public, max-age=600'
    """
    header = f'public, max-age={int(max_age.total_seconds())}'
    if stale:
        header += f', stale-while-revalidate={int(stale.total_seconds())}'
    if immutable:
        header += ', immutable'
    return header
