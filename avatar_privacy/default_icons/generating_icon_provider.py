import logging
from asyncio import get_running_loop
from typing import override

from avatar_privacy.default_icons.generators.generator import Generator
from avatar_privacy.default_icons.icon_provider import IconProvider
from avatar_privacy.lib.crypto import get_sub_dir
from avatar_privacy.lib.file_cache import FileCache, icon_cache_key
from avatar_privacy.models.types import IdentityHash, StorageKey


class GeneratingIconProvider(IconProvider):
    """Icon provider generating its icons on demand, backed by the file cache."""

    __slots__ = ('_file_cache', '_generator')

    def __init__(
        self,
        generator: Generator,
        file_cache: FileCache,
        types: tuple[str, ...],
        name: str,
    ):
        super().__init__(types, name)
        self._generator = generator
        self._file_cache = file_cache

    def get_cache_key(self, identity_hash: IdentityHash, size: int) -> StorageKey:
        return icon_cache_key(
            self.option_value, identity_hash, size, self._generator.extension
        )

    async def get_icon(self, identity_hash: IdentityHash, size: int) -> bytes | None:
        """
        Get the icon data for the hash, generating it on a cache miss.
        Returns None if the icon could not be generated or stored.
        """
        key = self.get_cache_key(identity_hash, size)
        generator = self._generator

        async def factory() -> bytes | None:
            logging.debug('Generating %r icon for %r', self.option_value, identity_hash)
            loop = get_running_loop()
            return await loop.run_in_executor(
                None, generator.build, identity_hash, size
            )

        return await self._file_cache.get_or_create(key, factory)

    @override
    async def get_icon_url(self, identity_hash: IdentityHash, size: int) -> str:
        if await self.get_icon(identity_hash, size) is None:
            return ''
        return self._file_cache.get_url(self.get_cache_key(identity_hash, size))

    @override
    async def cache_icon(
        self,
        identity_hash: IdentityHash,
        size: int,
        subdir: str = '',
        extension: str = '',
    ) -> bool:
        if subdir and subdir != get_sub_dir(identity_hash):
            logging.debug('Sub-directory %r does not match %r', subdir, identity_hash)
            return False
        if extension and extension != self._generator.extension:
            logging.debug('Extension %r is not served by %r', extension, self.option_value)
            return False
        return await self.get_icon(identity_hash, size) is not None
