# SPDX-FileCopyrightText: 2025 Taras Paruta (partarstu@gmail.com)
#
# SPDX-License-Identifier: Apache-2.0

"""
Centralized configuration defaults for the TestRail client.
"""

from dotenv import load_dotenv
import os

load_dotenv()

# Logging
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
GOOGLE_CLOUD_LOGGING_ENABLED = os.environ.get("GOOGLE_CLOUD_LOGGING_ENABLED", "False").lower() in ("true", "1", "t")

# TestRail instance
TESTRAIL_BASE_URL = os.environ.get("TESTRAIL_BASE_URL")
TESTRAIL_USERNAME = os.environ.get("TESTRAIL_USERNAME")
TESTRAIL_API_KEY = os.environ.get("TESTRAIL_API_KEY")

# Transport
TESTRAIL_API_PATH = "index.php?/api/v2/"
TESTRAIL_CONTENT_TYPE = "application/json"
TESTRAIL_CLIENT_TIMEOUT_SECONDS = float(os.environ.get("TESTRAIL_CLIENT_TIMEOUT_SECONDS", "15"))

# Rate limiting
TESTRAIL_MAX_RETRIES = int(os.environ.get("TESTRAIL_MAX_RETRIES", "3"))
TESTRAIL_DEFAULT_RETRY_WAIT_SECONDS = float(os.environ.get("TESTRAIL_DEFAULT_RETRY_WAIT_SECONDS", "5"))
TESTRAIL_MAX_RETRY_WAIT_SECONDS = float(os.environ.get("TESTRAIL_MAX_RETRY_WAIT_SECONDS", "60"))
TESTRAIL_RETRY_BACKOFF_MULTIPLIER = float(os.environ.get("TESTRAIL_RETRY_BACKOFF_MULTIPLIER", "2"))
