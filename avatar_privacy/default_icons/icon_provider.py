from abc import ABC, abstractmethod

from avatar_privacy.models.types import IconType, IdentityHash


class IconProvider(ABC):
    """
    Source of default icons for one or more icon types.

    The first provided type is the canonical one, the rest are aliases.
    """

    __slots__ = ('_name', '_provided_types')

    def __init__(self, types: tuple[str, ...], name: str):
        if not types:
            raise ValueError(f'Icon provider {name!r} must provide at least one type')
        self._provided_types = tuple(IconType(t) for t in types)
        self._name = name

    @property
    def provided_types(self) -> tuple[IconType, ...]:
        return self._provided_types

    @property
    def option_value(self) -> IconType:
        """Value of the provider in the default icon settings."""
        return self._provided_types[0]

    @property
    def name(self) -> str:
        """Human-readable name of the provider."""
        return self._name

    @abstractmethod
    async def get_icon_url(self, identity_hash: IdentityHash, size: int) -> str:
        """
        Get the URL of the icon for the hash.
        Returns an empty string if the icon is not available.
        """
        ...

    async def cache_icon(
        self,
        identity_hash: IdentityHash,
        size: int,
        subdir: str = '',
        extension: str = '',
    ) -> bool:
        """
        Ensure the icon for the hash exists on disk.
        Providers without cached files have nothing to do.
        """
        return False
