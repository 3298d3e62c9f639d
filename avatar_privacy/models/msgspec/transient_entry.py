from typing import Self

import msgspec

from avatar_privacy.utils import MSGSPEC_MSGPACK_ENCODER


class TransientEntry(msgspec.Struct, omit_defaults=True):
    value: str | int
    expires_at: int | None

    version: int = 1

    def to_bytes(self) -> bytes:
        """Serialize the transient entry into bytes."""
        return MSGSPEC_MSGPACK_ENCODER.encode(self)

    @classmethod
    def from_bytes(cls, buffer: bytes) -> Self:
        """Parse the given buffer into a transient entry."""
        return _DECODER.decode(buffer)


_DECODER = msgspec.msgpack.Decoder(TransientEntry)
