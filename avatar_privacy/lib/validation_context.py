from contextlib import contextmanager
from contextvars import ContextVar

from avatar_privacy.models.types import IdentityHash, ValidationResult

_CTX = ContextVar[dict[IdentityHash, ValidationResult]]('ValidationCache')


@contextmanager
def validation_context():
    """
    Context manager for the in-process validation cache.
    Results memoized inside the context are dropped when it exits.
    """
    token = _CTX.set({})
    try:
        yield
    finally:
        _CTX.reset(token)


def validation_memo() -> dict[IdentityHash, ValidationResult] | None:
    """Get the validation cache of the current context, if any."""
    return _CTX.get(None)
