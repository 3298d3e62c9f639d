import logging
from importlib.machinery import EXTENSION_SUFFIXES
from importlib.util import find_spec

from avatar_privacy.config import ENV

# modules whose loops dominate icon generation
HOT_MODULES = (
    'avatar_privacy.lib.image_editor',
    'avatar_privacy.default_icons.generators.monster_id',
    'avatar_privacy.default_icons.generators.shapes',
    'avatar_privacy.lib.file_cache',
)


def uncompiled_modules(names: tuple[str, ...] = HOT_MODULES) -> list[str]:
    """Get the modules that would be imported from Python source."""
    result: list[str] = []
    for name in names:
        spec = find_spec(name)
        origin = spec.origin if spec is not None else None
        if origin is None or not origin.endswith(tuple(EXTENSION_SUFFIXES)):
            result.append(name)
    return result


_uncompiled = uncompiled_modules()

if not _uncompiled:
    logging.info('Cython modules are compiled')
elif ENV == 'prod':
    # require Cython modules to be compiled in production
    raise ImportError(f'Cython modules are not compiled: {", ".join(_uncompiled)}')
else:
    logging.info('Cython modules are not compiled: %s', ', '.join(_uncompiled))
