import importlib
import logging
import mimetypes
import pathlib
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from starlette.staticfiles import StaticFiles

import avatar_privacy.lib.cython_detect  # DO NOT REMOVE
import avatar_privacy.lib.sentry  # noqa: F401
from avatar_privacy.config import ENV, NAME, STATIC_DIR, VERSION
from avatar_privacy.middlewares.cache_control_middleware import CacheControlMiddleware
from avatar_privacy.middlewares.request_context_middleware import (
    RequestContextMiddleware,
)
from avatar_privacy.middlewares.validation_cache_middleware import (
    ValidationCacheMiddleware,
)
from avatar_privacy.utils import HTTP

# register additional mimetypes
mimetypes.init()
mimetypes.add_type('image/svg+xml', '.svg')

# log when in test environment
if ENV != 'prod':
    logging.info('Running in %s environment', ENV)


@asynccontextmanager
async def lifespan(_):
    async with HTTP:
        yield


main = FastAPI(
    debug=ENV != 'prod',
    title=NAME,
    version=VERSION,
    lifespan=lifespan,
)

main.add_middleware(ValidationCacheMiddleware)
main.add_middleware(CacheControlMiddleware)  # depends on: request context
main.add_middleware(RequestContextMiddleware)

main.mount('/static', StaticFiles(directory=STATIC_DIR), name='static')


def _make_router(path: pathlib.Path, package: str) -> APIRouter:
    """Create a router from all modules in the given path."""
    router = APIRouter()
    router_counter: int = 0
    routes_counter: int = 0
    for p in sorted(path.glob('*.py')):
        module_name = f'{package}.{p.stem}'
        module = importlib.import_module(module_name)
        router_attr: APIRouter | None = getattr(module, 'router', None)
        if not isinstance(router_attr, APIRouter):
            logging.warning('APIRouter not found in %s', module_name)
            continue
        router.include_router(router_attr)
        router_counter += 1
        routes_counter += len(router_attr.routes)
    logging.info(
        'Loaded (%d routers, %d routes) from %s',
        router_counter,
        routes_counter,
        package,
    )
    return router


main.include_router(
    _make_router(
        pathlib.Path(__file__).parent.joinpath('controllers'),
        'avatar_privacy.controllers',
    )
)
