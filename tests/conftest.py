import os
from collections.abc import Collection
from pathlib import Path
from tempfile import mkdtemp

# configure before the settings are loaded
_DATA_DIR = Path(mkdtemp(prefix='avatar-privacy-tests-'))
os.environ.setdefault('ENV', 'test')
os.environ.setdefault('AVATAR_CACHE_DIR', str(_DATA_DIR.joinpath('cache')))
os.environ.setdefault('TRANSIENTS_DIR', str(_DATA_DIR.joinpath('transients')))

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from avatar_privacy.lib.file_cache import FileCache  # noqa: E402
from avatar_privacy.lib.transients import Transients  # noqa: E402
from avatar_privacy.models.transient_scope import TransientScope  # noqa: E402


def pytest_addoption(parser):
    parser.addoption(
        '--extended',
        action='store_true',
        default=False,
        help='run extended tests',
    )


def pytest_collection_modifyitems(config: pytest.Config, items: Collection[pytest.Item]):
    # run all tests in the session in the same event loop
    # https://pytest-asyncio.readthedocs.io/en/latest/how-to-guides/run_session_tests_in_same_loop.html
    session_scope_marker = pytest.mark.asyncio(loop_scope='session')
    for item in items:
        if pytest_asyncio.is_async_test(item):
            item.add_marker(session_scope_marker, append=False)

    # skip extended tests by default
    if not config.getoption('--extended'):
        skip_marker = pytest.mark.skip(reason='need --extended option to run')
        for item in items:
            if 'extended' in item.keywords:
                item.add_marker(skip_marker)


@pytest.fixture(scope='session')
def transport() -> ASGITransport:
    from avatar_privacy.main import main

    return ASGITransport(main)  # pyright: ignore[reportArgumentType]


@pytest.fixture
def client(transport: ASGITransport) -> AsyncClient:
    return AsyncClient(base_url='http://127.0.0.1:8000', transport=transport)


@pytest.fixture
def file_cache(tmp_path: Path) -> FileCache:
    return FileCache(tmp_path.joinpath('cache'), 'http://127.0.0.1:8000/avatar-privacy')


@pytest.fixture
def transients(tmp_path: Path) -> Transients:
    return Transients(TransientScope.site, base_dir=tmp_path.joinpath('transients'))
