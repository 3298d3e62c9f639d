import re
from hashlib import md5

from avatar_privacy.models.types import IdentityHash

_IDENTITY_HASH_RE = re.compile(r'[0-9a-f]{32}')


def hash_identity(identity: str) -> IdentityHash:
    """
    Hash the identity (e-mail address) the way Gravatar addresses images.

    The identity is trimmed and lowercased before hashing, so equal addresses
    always produce the same hash. Lone surrogates are encoded as-is, so any
    string can be hashed.

    >>> hash_identity(' Foo@Bar.com ') == hash_identity('foo@bar.com')
    True
    """
    data = identity.strip().lower().encode(errors='surrogatepass')
    return IdentityHash(md5(data).hexdigest())  # noqa: S324


def is_identity_hash(s: str) -> bool:
    """Check whether the string is a well-formed identity hash."""
    return _IDENTITY_HASH_RE.fullmatch(s) is not None


def get_sub_dir(identity_hash: str) -> str:
    """
    Get the sharding sub-directory for the given hash.

    >>> get_sub_dir('d41d8cd98f00b204e9800998ecf8427e')
    'd/4'
    """
    return f'{identity_hash[0]}/{identity_hash[1]}'
