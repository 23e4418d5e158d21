# SPDX-FileCopyrightText: 2025 Taras Paruta (partarstu@gmail.com)
#
# SPDX-License-Identifier: Apache-2.0

import logging

import config

logging_initialized = False


def _initialize_logging():
    global logging_initialized
    if config.GOOGLE_CLOUD_LOGGING_ENABLED:
        import google.cloud.logging
        client = google.cloud.logging.Client()
        client.setup_logging()
    else:
        logging.basicConfig(format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    logging_initialized = True


def get_logger(name):
    if not logging_initialized:
        _initialize_logging()
    log_level = config.LOG_LEVEL
    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    return logger


def format_path(template: str, **ids) -> str:
    """
    Resolves a TestRail API path template, e.g. "get_results_for_case/{run_id}/{case_id}".

    Args:
        template: The path template relative to the API root.
        **ids: Values for every placeholder of the template.

    Returns:
        The resolved path.
    """
    return template.format(**ids)
