from abc import ABC, abstractmethod
from typing import ClassVar


class Generator(ABC):
    """Deterministically builds icon images from a seed."""

    __slots__ = ()

    extension: ClassVar[str]
    mime_type: ClassVar[str]

    @abstractmethod
    def build(self, seed: str, size: int) -> bytes | None:
        """
        Build an icon of size x size pixels for the seed.

        Returns None if the icon cannot be built. The same seed and size always
        produce the same bytes.
        """
        ...
