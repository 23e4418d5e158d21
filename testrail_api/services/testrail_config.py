# SPDX-FileCopyrightText: 2025 Taras Paruta (partarstu@gmail.com)
#
# SPDX-License-Identifier: Apache-2.0

from typing import Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator

import config
from testrail_api.codec import DateEncoder, ParameterCodec, to_unix_timestamp


class RetryPolicy(BaseModel):
    """
    Wait times between retries of a throttled request.

    A wait hint sent by TestRail (the Retry-After header) wins over the computed backoff. Both are capped
    by max_wait_seconds.
    """
    model_config = ConfigDict(frozen=True)

    default_wait_seconds: float = Field(default=config.TESTRAIL_DEFAULT_RETRY_WAIT_SECONDS, gt=0)
    max_wait_seconds: float = Field(default=config.TESTRAIL_MAX_RETRY_WAIT_SECONDS, gt=0)
    backoff_multiplier: float = Field(default=config.TESTRAIL_RETRY_BACKOFF_MULTIPLIER, ge=1)

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.max_wait_seconds < self.default_wait_seconds:
            raise ValueError("max_wait_seconds must not be lower than default_wait_seconds")
        return self

    def delay(self, attempt: int, hint: Optional[float] = None) -> float:
        """
        Args:
            attempt: Zero-based number of the retry which is about to happen.
            hint: Wait time in seconds requested by the server, if any.

        Returns:
            Seconds to wait before the retry.
        """
        if hint is not None and hint >= 0:
            return min(hint, self.max_wait_seconds)
        return min(self.default_wait_seconds * self.backoff_multiplier ** attempt, self.max_wait_seconds)


class TestRailConfig(BaseModel):
    """
    Connection settings of a TestRail instance. Immutable, shared by all requests of a client.
    """
    __test__ = False

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    base_url: str
    username: str
    api_key: SecretStr = Field(description="API key or password of the user")
    content_type: str = config.TESTRAIL_CONTENT_TYPE
    timeout_seconds: float = Field(default=config.TESTRAIL_CLIENT_TIMEOUT_SECONDS, gt=0)
    max_retries: int = Field(default=config.TESTRAIL_MAX_RETRIES, ge=0)
    retry_policy: RetryPolicy = Field(default_factory=RetryPolicy)
    date_encoder: DateEncoder = Field(default=to_unix_timestamp, exclude=True)

    @field_validator("base_url")
    @classmethod
    def _strip_base_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("base_url cannot be empty")
        return value

    @field_validator("username")
    @classmethod
    def _check_username(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("username cannot be empty")
        return value

    @field_validator("content_type")
    @classmethod
    def _check_content_type(cls, value: str) -> str:
        if value != config.TESTRAIL_CONTENT_TYPE:
            raise ValueError(f"TestRail only accepts '{config.TESTRAIL_CONTENT_TYPE}' content")
        return value

    @classmethod
    def from_env(cls) -> "TestRailConfig":
        """
        Builds the configuration from the TESTRAIL_* environment variables (see config.py).
        """
        base_url = config.TESTRAIL_BASE_URL
        if not base_url:
            raise ValueError("TESTRAIL_BASE_URL is not configured in config.py or environment variables.")
        username = config.TESTRAIL_USERNAME
        if not username:
            raise ValueError("TESTRAIL_USERNAME is not configured in config.py or environment variables.")
        api_key = config.TESTRAIL_API_KEY
        if not api_key:
            raise ValueError("TESTRAIL_API_KEY is not configured in config.py or environment variables.")
        return cls(base_url=base_url, username=username, api_key=api_key)

    def api_url(self, path: str) -> str:
        return f"{self.base_url}/{config.TESTRAIL_API_PATH}{path.lstrip('/')}"

    @property
    def auth(self) -> httpx.BasicAuth:
        return httpx.BasicAuth(self.username, self.api_key.get_secret_value())

    @property
    def headers(self) -> Dict[str, str]:
        return {"Content-Type": self.content_type}

    @property
    def codec(self) -> ParameterCodec:
        return ParameterCodec(self.date_encoder)
