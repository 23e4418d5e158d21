# SPDX-FileCopyrightText: 2025 Taras Paruta (partarstu@gmail.com)
#
# SPDX-License-Identifier: Apache-2.0

from typing import List, Union

import httpx
import pytest

from testrail_api.services.testrail_client import TestRail
from testrail_api.services.testrail_config import RetryPolicy, TestRailConfig

BASE_URL = "https://example.testrail.io"
USERNAME = "qa@example.com"
API_KEY = "secret-key"


class FakeTestRail:
    """
    Serves queued responses through httpx.MockTransport and records every request it receives.

    Queue items are httpx.Response objects or httpx exception classes, which are raised. The last item
    is repeated once the queue is down to it.
    """

    def __init__(self, *responses: Union[httpx.Response, type]):
        self.responses: List = list(responses)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, type) and issubclass(response, Exception):
            raise response("simulated failure", request=request)
        # a fresh response per call, httpx binds responses to the request they answer
        return httpx.Response(response.status_code, headers=response.headers, content=response.content)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))

    def async_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def testrail_config() -> TestRailConfig:
    return TestRailConfig(base_url=BASE_URL + "/", username=USERNAME, api_key=API_KEY, max_retries=2,
                          retry_policy=RetryPolicy(default_wait_seconds=0.01, max_wait_seconds=0.05))


@pytest.fixture
def testrail(testrail_config: TestRailConfig) -> TestRail:
    return TestRail(testrail_config)
