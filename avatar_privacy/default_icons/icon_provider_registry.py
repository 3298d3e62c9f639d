import logging
from collections.abc import Iterable

from avatar_privacy.default_icons.icon_provider import IconProvider
from avatar_privacy.models.types import IconType


class IconProviderRegistry:
    """
    Mapping of icon types to the providers declaring them.

    The mapping is built once, on first use. When several providers declare
    the same type, the first registered provider wins.
    """

    __slots__ = ('_mapping', '_providers')

    def __init__(self, providers: Iterable[IconProvider]):
        self._providers = tuple(providers)
        self._mapping: dict[IconType, IconProvider] | None = None

    def get(self, icon_type: str) -> IconProvider | None:
        """Get the provider for the icon type, if any."""
        return self._get_mapping().get(icon_type)  # pyright: ignore[reportArgumentType]

    @property
    def types(self) -> tuple[IconType, ...]:
        """All supported icon types, in registration order."""
        return tuple(self._get_mapping())

    def avatar_defaults(self) -> dict[str, str]:
        """Map the option value of each provider to its human-readable name."""
        return {
            provider.option_value: provider.name
            for provider in self._providers
        }

    def _get_mapping(self) -> dict[IconType, IconProvider]:
        mapping = self._mapping
        if mapping is not None:
            return mapping

        mapping = {}
        for provider in self._providers:
            for icon_type in provider.provided_types:
                existing = mapping.setdefault(icon_type, provider)
                if existing is not provider:
                    logging.warning(
                        'Icon type %r of %r is already provided by %r',
                        icon_type,
                        provider.name,
                        existing.name,
                    )

        logging.debug('Registered %d icon types', len(mapping))
        self._mapping = mapping
        return mapping
