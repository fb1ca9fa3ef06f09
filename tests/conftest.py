# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Shared pytest fixtures for Solbuild tests."""

import sys
from collections.abc import Iterator

import pytest
import structlog


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> Iterator[None]:
    """Send structlog output to the current test's stderr.

    The CLI reconfigures structlog globally, binding the stream that is live
    while it runs.  Resetting after each test keeps a later test from writing
    to a capture stream that has already been closed.
    """
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()
