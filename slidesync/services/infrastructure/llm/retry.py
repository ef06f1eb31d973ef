"""
Retry policy and error classification for model calls.

classify_error maps an exception to an ErrorKind; RetryPolicy decides from
the kind and the attempt number whether another attempt is made and how
long to wait before it.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, FrozenSet, Optional

import httpx

from slidesync.config.constants import MAX_MODEL_ATTEMPTS
from slidesync.core.exceptions import ModelInvocationError, UnparseableResponseError


class ErrorKind(str, Enum):
    """Why a model call failed"""
    NETWORK = "network"
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    SERVER_UNAVAILABLE = "server_unavailable"
    AUTH = "auth"
    BAD_REQUEST = "bad_request"
    MALFORMED_OUTPUT = "malformed_output"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    UNKNOWN = "unknown"


RETRYABLE_KINDS: FrozenSet[ErrorKind] = frozenset({
    ErrorKind.NETWORK,
    ErrorKind.TIMEOUT,
    ErrorKind.RATE_LIMITED,
    ErrorKind.SERVER_UNAVAILABLE,
})

RETRYABLE_STATUS_CODES = {502, 503, 504}
AUTH_STATUS_CODES = {401, 403}

ErrorClassifier = Callable[[BaseException], ErrorKind]


def _status_code_of(error: BaseException) -> Optional[int]:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    for attr in ("status_code", "code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    return None


def classify_status_code(status_code: int) -> ErrorKind:
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if status_code in RETRYABLE_STATUS_CODES:
        return ErrorKind.SERVER_UNAVAILABLE
    if status_code in AUTH_STATUS_CODES:
        return ErrorKind.AUTH
    if 400 <= status_code < 500:
        return ErrorKind.BAD_REQUEST
    return ErrorKind.UNKNOWN


def classify_error(error: BaseException) -> ErrorKind:
    """Default classifier for exceptions raised during a model call"""
    if isinstance(error, UnparseableResponseError):
        return ErrorKind.MALFORMED_OUTPUT

    if isinstance(error, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException)):
        return ErrorKind.TIMEOUT

    status_code = _status_code_of(error)
    if status_code is not None:
        return classify_status_code(status_code)

    if isinstance(error, (httpx.TransportError, ConnectionError)):
        return ErrorKind.NETWORK

    if isinstance(error, ModelInvocationError):
        return ErrorKind.UNKNOWN

    if isinstance(error, (ValueError, TypeError)):
        return ErrorKind.BAD_REQUEST

    return ErrorKind.UNKNOWN


def default_retryable(kind: ErrorKind) -> bool:
    return kind in RETRYABLE_KINDS


@dataclass
class RetryPolicy:
    """Attempts per model and the backoff schedule between them"""
    max_attempts: int = MAX_MODEL_ATTEMPTS
    base_delay: float = 1.0
    backoff_factor: float = 2.0
    max_delay: float = 8.0
    retryable: Callable[[ErrorKind], bool] = field(default=default_retryable)

    def should_retry(self, kind: ErrorKind, attempt: int) -> bool:
        """Whether to make another attempt after `attempt` (1-based) failed"""
        return attempt < self.max_attempts and self.retryable(kind)

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number `attempt` (1-based)"""
        return min(self.base_delay * (self.backoff_factor ** (attempt - 1)), self.max_delay)
