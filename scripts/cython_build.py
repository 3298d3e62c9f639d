from pathlib import Path

from Cython.Build import cythonize
from Cython.Compiler import Options
from setuptools import Extension, setup

import avatar_privacy.config  # DO NOT REMOVE  # noqa: F401
from avatar_privacy.lib.pydantic_settings_integration import (
    pydantic_settings_integration,
)
from avatar_privacy.utils import calc_num_workers

CYTHON_MARCH = 'native'
CYTHON_MTUNE = 'native'
CYTHON_FLAGS = ''

pydantic_settings_integration(__name__, globals())

Options.docstrings = False
Options.annotate = True

dirs = (
    'avatar_privacy/default_icons',
    'avatar_privacy/lib',
    'avatar_privacy/middlewares',
    'avatar_privacy/services',
)

extra_paths = [
    Path(p)
    for p in (
        'avatar_privacy/utils.py',
    )
]

blacklist: dict[str, set[str]] = {
    'avatar_privacy/lib': {
        # Reason: inspects the other modules once at import time
        'cython_detect.py',
    },
}

paths = [
    p
    for dir_ in dirs
    for p in (*Path(dir_).rglob('*.py'), *extra_paths)
    if p.name not in blacklist.get(p.parent.as_posix(), set())
]

extra_args: list[str] = [
    '-g',
    '-O3',
    '-flto=auto',
    '-pipe',
    f'-march={CYTHON_MARCH}',
    f'-mtune={CYTHON_MTUNE}',
    '-fno-semantic-interposition',
    '-fno-plt',
    '-fvisibility=hidden',
    *CYTHON_FLAGS.split(),
]

setup(
    ext_modules=cythonize(
        [
            Extension(
                path.with_suffix('').as_posix().replace('/', '.'),
                [str(path)],
                extra_compile_args=extra_args,
                extra_link_args=extra_args,
            )
            for path in dict.fromkeys(paths)
        ],
        nthreads=calc_num_workers(),
        compiler_directives={
            # https://cython.readthedocs.io/en/latest/src/userguide/source_files_and_compilation.html#compiler-directives
            'overflowcheck': True,
            'embedsignature': True,
            'language_level': 3,
        },
    ),
)
