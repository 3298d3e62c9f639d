import re
from mimetypes import guess_type
from typing import Annotated

from fastapi import APIRouter, Path, Response
from starlette import status

from avatar_privacy.config import (
    AVATAR_CACHE_URL_PATH,
    AVATAR_MAX_SIZE,
    ICON_CACHE_MAX_AGE,
    STATIC_CACHE_STALE,
)
from avatar_privacy.handlers import AVATAR_CACHE, DEFAULT_ICONS, ICON_PROVIDERS
from avatar_privacy.lib.crypto import get_sub_dir
from avatar_privacy.lib.file_cache import icon_cache_key
from avatar_privacy.middlewares.cache_control_middleware import cache_control
from avatar_privacy.models.types import IdentityHash

router = APIRouter(prefix=f'/{AVATAR_CACHE_URL_PATH}')

_FILENAME_RE = re.compile(r'(?P<hash>[0-9a-f]{32})-(?P<size>[1-9][0-9]{0,4})\.(?P<ext>[a-z0-9]+)')


@router.get('/{icon_type}/{h0}/{h1}/{filename}')
@cache_control(ICON_CACHE_MAX_AGE, STATIC_CACHE_STALE)
async def cached_icon(
    icon_type: Annotated[str, Path(pattern=r'^[a-z0-9][a-z0-9_-]*$')],
    h0: Annotated[str, Path(pattern=r'^[0-9a-f]$')],
    h1: Annotated[str, Path(pattern=r'^[0-9a-f]$')],
    filename: str,
) -> Response:
    match = _FILENAME_RE.fullmatch(filename)
    if match is None:
        return Response(None, status.HTTP_404_NOT_FOUND)

    identity_hash = IdentityHash(match['hash'])
    size = int(match['size'])
    extension = match['ext']
    if size > AVATAR_MAX_SIZE or f'{h0}/{h1}' != get_sub_dir(identity_hash):
        return Response(None, status.HTTP_404_NOT_FOUND)

    # icons are only stored under the canonical type of their provider
    provider = ICON_PROVIDERS.get(icon_type)
    if provider is None or provider.option_value != icon_type:
        return Response(None, status.HTTP_404_NOT_FOUND)

    key = icon_cache_key(icon_type, identity_hash, size, extension)
    file = await AVATAR_CACHE.get(key)
    if file is None:
        # regenerate icons removed from the cache
        if not await DEFAULT_ICONS.cache_image(
            icon_type, identity_hash, size, f'{h0}/{h1}', extension
        ):
            return Response(None, status.HTTP_404_NOT_FOUND)
        file = await AVATAR_CACHE.get(key)
        if file is None:
            return Response(None, status.HTTP_404_NOT_FOUND)

    media_type = guess_type(filename)[0] or 'application/octet-stream'
    return Response(file, media_type=media_type)
