import logging
from sys import modules
from urllib.parse import urlsplit

import sentry_sdk
from pydantic import Field
from sentry_sdk.integrations.pure_eval import PureEvalIntegration

from avatar_privacy.config import APP_URL, NETWORK_MODE, SITE_ID, VERSION
from avatar_privacy.lib.pydantic_settings_integration import (
    pydantic_settings_integration,
)

SENTRY_DSN = ''

SENTRY_TRACES_SAMPLE_RATE: float = Field(0.1, ge=0, le=1)

SENTRY_CACHE_CLEAR_MONITOR_SLUG = 'avatar-privacy-cache-clear'

pydantic_settings_integration(
    __name__, globals(), name_filter=lambda name: name.startswith('SENTRY_')
)

if SENTRY_DSN and 'pytest' not in modules:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        release=VERSION,
        environment=urlsplit(APP_URL).hostname,
        integrations=[PureEvalIntegration()],
        keep_alive=True,
        traces_sample_rate=SENTRY_TRACES_SAMPLE_RATE,
        trace_propagation_targets=None,
    )
    # validation results are shared by all sites in network mode
    sentry_sdk.set_tag('transients.scope', 'network' if NETWORK_MODE else f'site-{SITE_ID}')
    logging.debug('Initialized Sentry SDK')

SENTRY_CACHE_CLEAR_MONITOR = sentry_sdk.monitor(
    SENTRY_CACHE_CLEAR_MONITOR_SLUG,
    {
        'schedule': {
            'type': 'interval',
            'value': 24,
            'unit': 'hour',
        },
        'checkin_margin': 60,
        'max_runtime': 60,
        'failure_issue_threshold': 2,  # 2d
        'recovery_threshold': 1,
    },
)
