from datetime import timedelta
from logging.config import dictConfig
from pathlib import Path
from typing import Annotated, Literal

from githead import githead
from pydantic import BeforeValidator, Field

from avatar_privacy.lib.pydantic_settings_integration import (
    pydantic_settings_integration,
)


def _validate_dir(v) -> Path:
    """Resolve directory to an absolute path and ensure it exists."""
    v = Path(v)
    v.mkdir(parents=True, exist_ok=True)
    return v.resolve(strict=True)


type _MakeDir = Annotated[Path, BeforeValidator(_validate_dir)]


def _strip_validator(chars: str, /) -> BeforeValidator:
    """Create a validator that strips the given characters from the input text."""

    def validate(v):
        return str(v).strip(chars)

    return BeforeValidator(validate)


type _StripSlash = Annotated[str, _strip_validator('/')]

# -------------------- System Configuration --------------------

# Core settings
ENV: Literal['dev', 'test', 'prod'] = 'prod'
LOG_LEVEL: Literal['DEBUG', 'INFO', 'WARNING'] | None = None
APP_URL: _StripSlash = 'http://127.0.0.1:8000'

# Storage paths
AVATAR_CACHE_DIR: _MakeDir = Path('data/avatar-privacy')
TRANSIENTS_DIR: _MakeDir = Path('data/transients')

# Public URL path of the icon cache (relative to APP_URL)
AVATAR_CACHE_URL_PATH: _StripSlash = 'avatar-privacy'

# Deployment topology
# NETWORK_MODE shares validation results between all sites of a network
NETWORK_MODE = False
SITE_ID: int = Field(1, gt=0)

# -------------------- API and Services Integration --------------------

# HTTP settings
HTTP_TIMEOUT = timedelta(seconds=20)

# Gravatar
GRAVATAR_HOST = 'secure.gravatar.com'
GRAVATAR_HTTP_TIMEOUT = timedelta(seconds=5)
GRAVATAR_DEFAULT_RATING: Literal['g', 'pg', 'r', 'x'] = 'x'

# -------------------- Default Icons --------------------

AVATAR_DEFAULT_ICON = 'mystery'
AVATAR_DEFAULT_SIZE: int = Field(96, gt=0)
AVATAR_MAX_SIZE: int = Field(512, gt=0)

# -------------------- Caching and Performance --------------------

ICON_CACHE_MAX_AGE = timedelta(days=30)
AVATAR_REDIRECT_CACHE_MAX_AGE = timedelta(minutes=10)
STATIC_CACHE_MAX_AGE = timedelta(days=30)
STATIC_CACHE_STALE = timedelta(days=30)

pydantic_settings_integration(__name__, globals())

# -------------------- Constant or derived configuration --------------------

try:
    VERSION = 'git#' + githead()[:7]
except FileNotFoundError:
    VERSION = 'dev'  # pyright: ignore [reportConstantRedefinition]

NAME = 'avatar-privacy'
WEBSITE = 'https://github.com/mundschenk-at/avatar-privacy'
USER_AGENT = f'{NAME}/{VERSION} (+{WEBSITE})'

STATIC_DIR = Path(__file__).parent.joinpath('static')
STATIC_URL = f'{APP_URL}/static'
AVATAR_CACHE_URL = f'{APP_URL}/{AVATAR_CACHE_URL_PATH}'

if LOG_LEVEL is None:
    LOG_LEVEL = 'INFO' if ENV == 'prod' else 'DEBUG'  # pyright: ignore[reportConstantRedefinition]

# -------------------- Logging configuration --------------------

dictConfig({
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {
            '()': 'uvicorn.logging.DefaultFormatter',
            'fmt': '%(levelprefix)s | %(asctime)s | %(name)s %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S',
        },
    },
    'handlers': {
        'default': {
            'formatter': 'default',
            'class': 'logging.StreamHandler',
            'stream': 'ext://sys.stderr',
        },
    },
    'loggers': {
        'root': {'handlers': ['default'], 'level': LOG_LEVEL},
        **{
            # reduce logging verbosity of some modules
            module: {'handlers': [], 'level': 'INFO'}
            for module in (
                'hpack',
                'httpx',
                'httpcore',
                'PIL',
            )
        },
    },
})
