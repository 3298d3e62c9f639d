from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Query, Response
from starlette import status
from starlette.responses import RedirectResponse

from avatar_privacy.config import (
    AVATAR_DEFAULT_ICON,
    AVATAR_DEFAULT_SIZE,
    AVATAR_MAX_SIZE,
    AVATAR_REDIRECT_CACHE_MAX_AGE,
    STATIC_URL,
)
from avatar_privacy.handlers import DEFAULT_ICONS, GRAVATAR
from avatar_privacy.lib.crypto import is_identity_hash
from avatar_privacy.middlewares.cache_control_middleware import cache_control
from avatar_privacy.models.types import IdentityHash

router = APIRouter(prefix='/avatar')

_FALLBACK_URL = f'{STATIC_URL}/images/mystery.svg'


@router.get('/{identity_hash}')
@cache_control(AVATAR_REDIRECT_CACHE_MAX_AGE)
async def avatar(
    identity_hash: str,
    s: Annotated[int, Query(gt=0, le=AVATAR_MAX_SIZE)] = AVATAR_DEFAULT_SIZE,
    d: Annotated[str, Query(max_length=32)] = AVATAR_DEFAULT_ICON,
    gravatar: bool = False,
    age: Annotated[int, Query(ge=0)] = 0,
) -> Response:
    identity_hash = identity_hash.lower()
    if not is_identity_hash(identity_hash):
        return Response(None, status.HTTP_404_NOT_FOUND)

    hash_ = IdentityHash(identity_hash)
    if gravatar and await GRAVATAR.validate_hash(hash_, timedelta(seconds=age)):
        return RedirectResponse(GRAVATAR.get_url(hash_, s), status.HTTP_302_FOUND)

    url = await DEFAULT_ICONS.get_url(_FALLBACK_URL, hash_, s, {'type': d})
    return RedirectResponse(url, status.HTTP_302_FOUND)
