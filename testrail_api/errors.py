# SPDX-FileCopyrightText: 2025 Taras Paruta (partarstu@gmail.com)
#
# SPDX-License-Identifier: Apache-2.0

from typing import Optional


class TestRailError(Exception):
    """Base exception for all errors raised by the TestRail client."""

    __test__ = False

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InvalidArgumentError(TestRailError, ValueError):
    """A required identifier is not positive or a required value is missing. Raised before any call."""


class UnauthorizedError(TestRailError):
    """TestRail rejected the credentials."""


class ForbiddenError(UnauthorizedError):
    """The user has no permission for the requested operation."""


class NotFoundError(TestRailError):
    """The referenced resource does not exist."""


class BadRequestError(TestRailError):
    """TestRail rejected the request content (invalid field values, inaccessible references etc.)."""


class RateLimitedError(TestRailError):
    """TestRail kept throttling the request after all retries were used."""

    def __init__(self, message: str, attempts: int, retry_after: Optional[float] = None):
        super().__init__(message, status_code=429)
        self.attempts = attempts
        self.retry_after = retry_after


class ServerError(TestRailError):
    """TestRail failed to process the request on its side."""


class TransportError(TestRailError):
    """The call did not produce a usable response: connection failure, timeout or undecodable body."""

    def __init__(self, message: str, cause: Optional[BaseException] = None, status_code: Optional[int] = None):
        super().__init__(message, status_code=status_code)
        self.cause = cause


class DecodeMismatchError(TestRailError):
    """The response payload does not match the declared response shape or type."""


class RequestCancelledError(TestRailError):
    """The request was cancelled while waiting to be retried."""


def error_for_status(status_code: int, message: str) -> TestRailError:
    """
    Maps a non-success HTTP status of a TestRail response to the matching error.

    Args:
        status_code: The HTTP status code of the response.
        message: The error message, usually taken from the "error" field of the response body.

    Returns:
        An error instance, not raised.
    """
    if status_code == 401:
        return UnauthorizedError(message, status_code=status_code)
    if status_code == 403:
        return ForbiddenError(message, status_code=status_code)
    if status_code == 404:
        return NotFoundError(message, status_code=status_code)
    if status_code == 429:
        return RateLimitedError(message, attempts=1)
    if 400 <= status_code < 500:
        return BadRequestError(message, status_code=status_code)
    if status_code >= 500:
        return ServerError(message, status_code=status_code)
    return TransportError(f"Unexpected HTTP status {status_code}: {message}", status_code=status_code)
