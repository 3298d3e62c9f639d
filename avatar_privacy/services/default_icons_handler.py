import logging
from typing import TypedDict

from avatar_privacy.default_icons.icon_provider_registry import IconProviderRegistry
from avatar_privacy.models.types import IdentityHash


class IconArgs(TypedDict, total=False):
    type: str


class DefaultIconsHandler:
    """Resolve default icon requests to the provider of the requested type."""

    __slots__ = ('_registry',)

    def __init__(self, registry: IconProviderRegistry):
        self._registry = registry

    async def get_url(
        self,
        url: str,
        identity_hash: IdentityHash,
        size: int,
        args: IconArgs,
    ) -> str:
        """
        Get the URL of the default icon for the hash.

        Returns the fallback url unchanged if the requested type is not
        supported or the icon is not available.
        """
        icon_type = args.get('type', '')
        provider = self._registry.get(icon_type)
        if provider is None:
            logging.debug('Unsupported icon type %r, using fallback', icon_type)
            return url

        return await provider.get_icon_url(identity_hash, size) or url

    async def cache_image(
        self,
        icon_type: str,
        identity_hash: IdentityHash,
        size: int,
        subdir: str = '',
        extension: str = '',
    ) -> bool:
        """
        Ensure the icon exists in the file cache.
        Returns False if the type is unsupported or the icon is not available.
        """
        provider = self._registry.get(icon_type)
        if provider is None:
            logging.debug('Cannot cache unsupported icon type %r', icon_type)
            return False
        return await provider.cache_icon(identity_hash, size, subdir, extension)

    def avatar_defaults(self, defaults: dict[str, str]) -> dict[str, str]:
        """
        Add the supported icon types to the default avatar choices.
        The remote service's own logo entry is removed, existing entries are kept.
        """
        result = {k: v for k, v in defaults.items() if k != 'gravatar_default'}
        for option_value, name in self._registry.avatar_defaults().items():
            result.setdefault(option_value, name)
        return result
