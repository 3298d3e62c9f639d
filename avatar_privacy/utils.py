import builtins
import logging
from os import process_cpu_count
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import msgspec
from httpx import AsyncClient, Request, Response

from avatar_privacy.config import HTTP_TIMEOUT, USER_AGENT


async def _log_http_request(r: Request) -> None:
    logging.debug('Client HTTP request: %s %s', r.method, r.url)


async def _log_http_response(r: Response) -> None:
    if r.is_success:
        logging.debug('Client HTTP response: %s %s', r.status_code, r.url)
    else:
        logging.info('Client HTTP response: %s %s', r.status_code, r.url)


HTTP = AsyncClient(
    headers={'User-Agent': USER_AGENT},
    timeout=HTTP_TIMEOUT.total_seconds(),
    follow_redirects=True,
    event_hooks={
        'request': [_log_http_request],
        'response': [_log_http_response],
    },
)

MSGSPEC_MSGPACK_ENCODER = msgspec.msgpack.Encoder()


def extend_query_params(uri: str, params: dict[str, str]) -> str:
    """
    Extend the query parameters of a URI.

    >>> extend_query_params('https://example.com', {'foo': 'bar'})
    'https://example.com?foo=bar'
    >>> extend_query_params('https://example.com/?a=1', {'b': '2'})
    'https://example.com/?a=1&b=2'
    """
    if not params:
        return uri
    uri_ = urlsplit(uri)
    query = parse_qsl(uri_.query, keep_blank_values=True)
    query.extend(params.items())
    return urlunsplit(uri_._replace(query=urlencode(query)))


def calc_num_workers(
    target: int | float = 1.0, *, min: int = 1, max: int = 1024
) -> int:
    """
    Calculate the number of workers to use based on the target value.
    If the target is an integer, it will be used as is.
    If the target is a float, it will multiply the number of available CPUs.
    """
    return builtins.min(
        builtins.max(
            (
                int((process_cpu_count() or 1) * target)
                if isinstance(target, float)
                else target
            ),
            min,
        ),
        max,
    )
