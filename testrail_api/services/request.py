# SPDX-FileCopyrightText: 2025 Taras Paruta (partarstu@gmail.com)
#
# SPDX-License-Identifier: Apache-2.0

import asyncio
import dataclasses
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Generic, Mapping, Optional, Tuple, Type, TypeVar

import dateutil.parser
import httpx
from pydantic import ValidationError

from testrail_api import utils
from testrail_api.errors import (DecodeMismatchError, RateLimitedError, RequestCancelledError, TestRailError,
                                 TransportError, error_for_status)
from testrail_api.models import TrackedModel
from testrail_api.services.testrail_config import TestRailConfig

RATE_LIMIT_STATUS_CODE = 429
RETRY_AFTER_HEADER = "Retry-After"

logger = utils.get_logger(__name__)

T = TypeVar("T")


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"


class ResponseShape(Enum):
    SINGLE = "single"
    LIST = "list"
    NONE = "none"


class RequestState(Enum):
    BUILT = "built"
    SENT = "sent"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class RequestDescriptor:
    """
    Everything needed to perform one TestRail call.

    The path has all identifiers already substituted. The body is a snapshot owned by the descriptor.
    list_key names the array inside TestRail's paginated envelope ({"offset": 0, ..., "cases": [...]}),
    it is only consulted for list responses which arrive as an object.
    """
    method: HttpMethod
    path: str
    shape: ResponseShape
    response_type: Optional[Type[TrackedModel]] = None
    body: Optional[TrackedModel] = None
    params: Mapping[str, Any] = field(default_factory=dict)
    list_key: Optional[str] = None

    def __post_init__(self):
        if self.shape is not ResponseShape.NONE and self.response_type is None:
            raise ValueError(f"A response type is required for the '{self.shape.value}' response shape")
        if self.body is not None and self.method is not HttpMethod.POST:
            raise ValueError("Only POST requests can carry a body")
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """
    Parses a Retry-After header, given either as seconds or as an HTTP date.

    Returns:
        Seconds to wait, or None if the header is missing or unreadable.
    """
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        retry_at = dateutil.parser.parse(value)
    except (ValueError, OverflowError):
        logger.warning(f"Ignoring unreadable {RETRY_AFTER_HEADER} header value '{value}'")
        return None
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    return max(0.0, (retry_at - datetime.now(timezone.utc)).total_seconds())


class Request(Generic[T]):
    """
    A single-use TestRail call.

    The request moves from BUILT to SENT when executed, to RETRYING while it waits after being throttled,
    and ends up either SUCCEEDED or FAILED. Executing it a second time is an error, a new request has
    to be obtained from the factory instead.
    """

    def __init__(self, config: TestRailConfig, descriptor: RequestDescriptor):
        self.config = config
        self.descriptor = descriptor
        self.state = RequestState.BUILT
        self.attempts = 0
        self.retries = 0

    def filter(self, **params: Any) -> "Request[T]":
        """
        Returns a new request with additional query parameters, e.g. `filter(created_by=[1, 2, 3])`.
        """
        if self.state is not RequestState.BUILT:
            raise RuntimeError("Filters can only be added before the request is executed")
        merged = {**self.descriptor.params, **params}
        return Request(self.config, dataclasses.replace(self.descriptor, params=merged))

    @property
    def url(self) -> str:
        query = self.config.codec.encode_query(self.descriptor.params)
        return f"{self.config.api_url(self.descriptor.path)}{query}"

    @property
    def payload(self) -> Optional[Dict[str, Any]]:
        if self.descriptor.body is None:
            return None
        return self.descriptor.body.to_payload()

    def execute(self, client: Optional[httpx.Client] = None, cancel_event: Optional[threading.Event] = None) -> T:
        """
        Performs the call and decodes the response.

        Args:
            client: Optional client to reuse connections. A short-lived client is used when omitted.
            cancel_event: Optional event which aborts the request when it's set during a retry wait.

        Returns:
            The decoded model, a list of models, or None, depending on the response shape.

        Raises:
            TestRailError: A subclass describing the failure.
        """
        self._start()
        if client is None:
            with httpx.Client(timeout=self.config.timeout_seconds) as own_client:
                return self._execute_with(own_client, cancel_event)
        return self._execute_with(client, cancel_event)

    async def execute_async(self, client: Optional[httpx.AsyncClient] = None) -> T:
        """
        Async variant of `execute`. Cancelling the awaiting task during a retry wait prevents the retried call.
        """
        self._start()
        if client is None:
            async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as own_client:
                return await self._execute_with_async(own_client)
        return await self._execute_with_async(client)

    def _execute_with(self, client: httpx.Client, cancel_event: Optional[threading.Event]) -> T:
        url, payload = self._prepare()
        while True:
            self._mark_sent(url)
            try:
                response = client.request(self.descriptor.method.value, url, headers=self.config.headers,
                                          auth=self.config.auth, json=payload)
            except httpx.RequestError as e:
                raise self._failed(TransportError(f"TestRail call to {url} failed: {e}", cause=e)) from e
            if response.status_code != RATE_LIMIT_STATUS_CODE:
                return self._complete(response)
            delay = self._next_delay(response)
            if cancel_event is None:
                time.sleep(delay)
            elif cancel_event.wait(delay):
                raise self._failed(RequestCancelledError(f"Request to {url} was cancelled while waiting for a retry"))

    async def _execute_with_async(self, client: httpx.AsyncClient) -> T:
        url, payload = self._prepare()
        try:
            while True:
                self._mark_sent(url)
                try:
                    response = await client.request(self.descriptor.method.value, url, headers=self.config.headers,
                                                    auth=self.config.auth, json=payload)
                except httpx.RequestError as e:
                    raise self._failed(TransportError(f"TestRail call to {url} failed: {e}", cause=e)) from e
                if response.status_code != RATE_LIMIT_STATUS_CODE:
                    return self._complete(response)
                await asyncio.sleep(self._next_delay(response))
        except asyncio.CancelledError:
            logger.info(f"Request to {url} was cancelled while {self.state.value}")
            self.state = RequestState.FAILED
            raise

    def _start(self):
        if self.state is not RequestState.BUILT:
            raise RuntimeError(f"Request is already {self.state.value}, requests can only be executed once")

    def _prepare(self) -> Tuple[str, Optional[Dict[str, Any]]]:
        try:
            url = self.url
            payload = self.payload
        except TypeError:
            self.state = RequestState.FAILED
            raise
        if payload is not None:
            logger.debug(f"Payload fields for {self.descriptor.path}: {list(payload.keys())}")
        return url, payload

    def _mark_sent(self, url: str):
        self.attempts += 1
        self.state = RequestState.SENT
        logger.info(f"Sending {self.descriptor.method.value} request to {url} (attempt {self.attempts})")

    def _next_delay(self, response: httpx.Response) -> float:
        hint = parse_retry_after(response.headers.get(RETRY_AFTER_HEADER))
        if self.retries >= self.config.max_retries:
            raise self._failed(RateLimitedError(
                f"TestRail is still throttling {self.descriptor.path} after {self.retries} retries",
                attempts=self.attempts, retry_after=hint))
        delay = self.config.retry_policy.delay(self.retries, hint)
        self.retries += 1
        self.state = RequestState.RETRYING
        logger.warning(f"TestRail throttled {self.descriptor.path}, retry {self.retries} of "
                       f"{self.config.max_retries} in {delay:.1f} seconds")
        return delay

    def _complete(self, response: httpx.Response) -> T:
        logger.debug(f"TestRail API response status for {self.descriptor.path}: {response.status_code}")
        if not response.is_success:
            raise self._failed(error_for_status(response.status_code, self._error_message(response)))
        result = self._decode(response)
        self.state = RequestState.SUCCEEDED
        logger.info(f"Request to {self.descriptor.path} succeeded")
        return result

    def _decode(self, response: httpx.Response) -> Any:
        shape = self.descriptor.shape
        if shape is ResponseShape.NONE:
            return None
        if not response.content:
            raise self._failed(DecodeMismatchError(
                f"Expected a {shape.value} response from {self.descriptor.path}, got an empty body",
                status_code=response.status_code))
        try:
            payload = response.json()
        except ValueError as e:
            raise self._failed(TransportError(f"Response of {self.descriptor.path} is not valid JSON: {e}",
                                              cause=e, status_code=response.status_code)) from e

        if shape is ResponseShape.SINGLE:
            return self._hydrate(payload)

        items = payload
        list_key = self.descriptor.list_key
        if isinstance(payload, dict) and list_key and isinstance(payload.get(list_key), list):
            items = payload[list_key]
        if not isinstance(items, list):
            raise self._failed(DecodeMismatchError(
                f"Expected a list response from {self.descriptor.path}, got {type(payload).__name__}",
                status_code=response.status_code))
        logger.debug(f"Decoding {len(items)} items of {self.descriptor.response_type.__name__}")
        return [self._hydrate(item) for item in items]

    def _hydrate(self, item: Any) -> TrackedModel:
        response_type = self.descriptor.response_type
        if not isinstance(item, dict):
            raise self._failed(DecodeMismatchError(
                f"Expected a {response_type.__name__} object from {self.descriptor.path}, "
                f"got {type(item).__name__}"))
        try:
            return response_type.hydrate(item)
        except ValidationError as e:
            raise self._failed(DecodeMismatchError(
                f"Response of {self.descriptor.path} does not match {response_type.__name__}: {e}")) from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return response.text or response.reason_phrase

    def _failed(self, error: TestRailError) -> TestRailError:
        self.state = RequestState.FAILED
        logger.error(f"{self.descriptor.method.value} {self.descriptor.path} failed: {error.message}")
        return error
