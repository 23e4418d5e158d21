# SPDX-FileCopyrightText: 2025 Taras Paruta (partarstu@gmail.com)
#
# SPDX-License-Identifier: Apache-2.0

from typing import Optional

from testrail_api.services.testrail_client import TestRail
from testrail_api.services.testrail_config import TestRailConfig


def get_testrail_client(testrail_config: Optional[TestRailConfig] = None) -> TestRail:
    """Returns a client for the given configuration, or for the TESTRAIL_* environment variables if none is given."""
    if testrail_config is None:
        testrail_config = TestRailConfig.from_env()
    return TestRail(testrail_config)
