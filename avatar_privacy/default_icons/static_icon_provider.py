from typing import override

from avatar_privacy.config import STATIC_URL
from avatar_privacy.default_icons.icon_provider import IconProvider
from avatar_privacy.models.types import IdentityHash


class StaticIconProvider(IconProvider):
    """Icon provider serving the same pre-packaged image for every hash."""

    __slots__ = ('_url',)

    def __init__(
        self,
        types: tuple[str, ...],
        name: str,
        filename: str,
        *,
        base_url: str = f'{STATIC_URL}/images',
    ):
        super().__init__(types, name)
        self._url = f'{base_url.rstrip("/")}/{filename}'

    @override
    async def get_icon_url(self, identity_hash: IdentityHash, size: int) -> str:
        return self._url
