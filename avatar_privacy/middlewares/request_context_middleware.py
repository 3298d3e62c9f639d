from contextvars import ContextVar

from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

_CTX = ContextVar[Request]('Request')


def get_request() -> Request:
    """Get the HTTP request."""
    return _CTX.get()


class RequestContextMiddleware:
    """Wrap HTTP requests in request context."""

    __slots__ = ('app',)

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope['type'] != 'http':
            return await self.app(scope, receive, send)

        token = _CTX.set(Request(scope, receive))
        try:
            return await self.app(scope, receive, send)
        finally:
            _CTX.reset(token)
