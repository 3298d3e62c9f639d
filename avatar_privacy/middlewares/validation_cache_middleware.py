from starlette.types import ASGIApp, Receive, Scope, Send

from avatar_privacy.lib.validation_context import validation_context


class ValidationCacheMiddleware:
    """Scope the in-process Gravatar validation cache to a single request."""

    __slots__ = ('app',)

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope['type'] != 'http':
            return await self.app(scope, receive, send)

        with validation_context():
            return await self.app(scope, receive, send)
