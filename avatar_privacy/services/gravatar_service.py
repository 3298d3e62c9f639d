import logging
from collections.abc import Callable
from datetime import timedelta

from httpx import AsyncClient, HTTPError

from avatar_privacy.config import (
    GRAVATAR_DEFAULT_RATING,
    GRAVATAR_HOST,
    GRAVATAR_HTTP_TIMEOUT,
)
from avatar_privacy.lib.crypto import hash_identity, is_identity_hash
from avatar_privacy.lib.transients import Transients
from avatar_privacy.lib.validation_context import validation_memo
from avatar_privacy.models.types import IdentityHash, ValidationResult
from avatar_privacy.utils import HTTP, extend_query_params

IntervalFilter = Callable[[timedelta, bool, timedelta], timedelta]

_PRESENT_DURATION = timedelta(weeks=1)

# (max content age, caching duration) of negative results, checked in order
_ABSENT_DURATIONS: tuple[tuple[timedelta, timedelta], ...] = (
    (timedelta(hours=1), timedelta(minutes=10)),
    (timedelta(days=1), timedelta(hours=1)),
    (timedelta(weeks=1), timedelta(days=1)),
)


class GravatarService:
    """
    Check whether Gravatar has an image for an identity.

    Results are cached in two layers: the validation context of the current
    request and the persistent transients store. Indeterminate results
    (network errors, unexpected responses) are never cached.
    """

    __slots__ = ('_http', '_interval_filter', '_transients')

    def __init__(
        self,
        transients: Transients,
        *,
        http: AsyncClient = HTTP,
        interval_filter: IntervalFilter | None = None,
    ):
        self._transients = transients
        self._http = http
        self._interval_filter = interval_filter

    @staticmethod
    def get_hash(email: str) -> IdentityHash:
        """Get the Gravatar hash of the e-mail address."""
        return hash_identity(email)

    def get_url(
        self,
        email: str,
        size: int | None = 80,
        rating: str = GRAVATAR_DEFAULT_RATING,
    ) -> str:
        """
        Get the Gravatar image URL for the e-mail address (or its hash).
        Gravatar is asked to fail instead of returning its own default image.

        >>> GravatarService(None).get_url('d41d8cd98f00b204e9800998ecf8427e', 80, 'g')
        'https://secure.gravatar.com/avatar/d41d8cd98f00b204e9800998ecf8427e?d=404&s=80&r=g'
        """
        identity_hash = email if is_identity_hash(email) else self.get_hash(email)
        return extend_query_params(
            f'https://{GRAVATAR_HOST}/avatar/{identity_hash}',
            {'d': '404', 's': str(size) if size else '', 'r': rating},
        )

    async def get_image(
        self,
        email: str,
        size: int | None = 80,
        rating: str = GRAVATAR_DEFAULT_RATING,
    ) -> bytes:
        """
        Download the Gravatar image for the e-mail address (or its hash).
        Returns empty bytes if there is no image or the request fails.
        """
        try:
            r = await self._http.get(
                self.get_url(email, size, rating),
                timeout=GRAVATAR_HTTP_TIMEOUT.total_seconds(),
            )
        except HTTPError:
            logging.info('Failed to download Gravatar image', exc_info=True)
            return b''

        if not r.is_success:
            return b''
        return r.content

    async def validate(self, email: str = '', age: timedelta = timedelta()) -> str:
        """
        Check whether Gravatar has an image for the e-mail address.

        Returns the image content type, or an empty string if there is no image
        or it could not be determined.
        """
        if not email:
            return ''
        return await self.validate_hash(self.get_hash(email), age)

    async def validate_hash(
        self, identity_hash: IdentityHash, age: timedelta = timedelta()
    ) -> str:
        """
        Check whether Gravatar has an image for the identity hash.
        Age is the time since the associated content was created.
        """
        memo = validation_memo()
        if memo is not None:
            result = memo.get(identity_hash)
            if result is not None:
                logging.debug('Validation memo hit for %r', identity_hash)
                return result or ''

        key = f'check_{identity_hash}'
        result = await self._transients.get(key)
        if result is not None:
            logging.debug('Validation cache hit for %r', identity_hash)
            if memo is not None:
                memo[identity_hash] = result
            return result or ''  # pyright: ignore[reportReturnType]

        result = await self.ping(identity_hash)
        if result is None:
            # indeterminate results are retried on the next request
            return ''

        await self._transients.set(
            key, result, self.calculate_caching_duration(result, age)
        )
        if memo is not None:
            memo[identity_hash] = result
        return result or ''  # pyright: ignore[reportReturnType]

    async def ping(self, identity_hash: IdentityHash) -> ValidationResult | None:
        """
        Ask Gravatar whether it has an image for the identity hash.

        Returns the content type if it does, 0 if it does not, and None if the
        answer could not be determined.
        """
        try:
            r = await self._http.head(
                self.get_url(identity_hash),
                timeout=GRAVATAR_HTTP_TIMEOUT.total_seconds(),
            )
        except HTTPError as e:
            logging.info('Gravatar probe for %r failed: %s', identity_hash, e)
            return None

        status_code = r.status_code
        if status_code == 200:
            result = r.headers.get('Content-Type', '')
            logging.debug('Gravatar image %r found (%s)', identity_hash, result)
            return result
        if status_code == 404:
            logging.debug('Gravatar image %r not found', identity_hash)
            return 0

        logging.info('Unexpected Gravatar response %d for %r', status_code, identity_hash)
        return None

    def calculate_caching_duration(
        self, result: ValidationResult, age: timedelta
    ) -> timedelta:
        """
        Calculate how long a validation result should be cached.

        Positive results are stable and kept for a week. Negative results are
        re-checked sooner for recent content, since the author may still sign
        up with Gravatar.
        """
        duration = _PRESENT_DURATION
        if not result:
            for max_age, absent_duration in _ABSENT_DURATIONS:
                if age < max_age:
                    duration = absent_duration
                    break

        interval_filter = self._interval_filter
        if interval_filter is not None:
            duration = interval_filter(duration, bool(result), age)
        return duration
