# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
tests/conftest.py

Shared fixtures:
- Logging configuration for the whole run
- The main context, drained after every test
- Serial and thread pool contexts that are closed after use
- InlineContext, a target that runs work on the submitting thread
"""

import logging
from typing import Any, Callable, Generator

import pytest

from pydispatchtimer.interfaces.context import (
    ExecutionContext,
    MainContext,
    SerialContext,
    ThreadPoolContext,
    main_context,
)


class InlineContext(ExecutionContext):
    """Runs work immediately on whichever thread submits it."""

    def __init__(self, label: str = "inline"):
        super().__init__(label)

    def run_async(self, fn: Callable[[], Any]) -> None:
        self._execute(fn)


@pytest.fixture(scope="session", autouse=True)
def configure_logging() -> Generator[None, None, None]:
    """Configure logging for all tests"""
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    yield


@pytest.fixture
def main() -> Generator[MainContext, None, None]:
    """The host main context; leftover work is drained after the test"""
    context = main_context()
    yield context
    context.run_pending()


@pytest.fixture
def serial_context() -> Generator[SerialContext, None, None]:
    context = SerialContext("test.serial")
    yield context
    context.close()
    context.join(1.0)


@pytest.fixture
def pool_context() -> Generator[ThreadPoolContext, None, None]:
    context = ThreadPoolContext(max_workers=4, label="test.pool")
    yield context
    context.close()


@pytest.fixture
def inline_context() -> InlineContext:
    return InlineContext()


def pytest_configure(config: pytest.Config) -> None:
    """Pytest configuration hook"""
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow running"
    )
