# SPDX-FileCopyrightText: 2025 Taras Paruta (partarstu@gmail.com)
#
# SPDX-License-Identifier: Apache-2.0

"""
Conversion of typed request parameters into the string form expected by the TestRail API.
"""

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import quote

DateEncoder = Callable[[date], str]


def to_unix_timestamp(value: date) -> str:
    """Encodes a date or datetime as Unix seconds. Naive values are treated as UTC."""
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return str(int(value.timestamp()))


class ParameterCodec:
    """
    Encodes query parameter values.

    Absent values and empty lists encode to None, which means that the parameter is left out of the
    query string. Unsupported value types raise TypeError.
    """

    def __init__(self, date_encoder: DateEncoder = to_unix_timestamp):
        self.date_encoder = date_encoder

    def encode(self, value: Any) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            if not value:
                return None
            return ",".join(self._encode_scalar(item) for item in value)
        return self._encode_scalar(value)

    def encode_params(self, params: Mapping[str, Any]) -> Dict[str, str]:
        encoded = {}
        for name, value in params.items():
            encoded_value = self.encode(value)
            if encoded_value is not None:
                encoded[name] = encoded_value
        return encoded

    def encode_query(self, params: Mapping[str, Any]) -> str:
        """
        Renders parameters as "&name=value" pairs.

        TestRail routes requests through the query string ("index.php?/api/v2/get_cases/1"), so
        filters are appended with "&" instead of forming a query string of their own.
        """
        encoded = self.encode_params(params)
        return "".join(f"&{quote(name)}={quote(value, safe=',')}" for name, value in encoded.items())

    def _encode_scalar(self, value: Any) -> str:
        # bool before int, bool is an int subclass
        if isinstance(value, bool):
            return "1" if value else "0"
        if isinstance(value, Enum):
            return self._encode_scalar(value.value)
        if isinstance(value, int):
            return str(value)
        if isinstance(value, str):
            return value.strip()
        if isinstance(value, date):
            return self.date_encoder(value)
        raise TypeError(f"Unsupported parameter value type: {type(value).__name__}")
