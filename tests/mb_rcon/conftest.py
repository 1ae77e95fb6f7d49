"""Shared fixtures: the fake RCON server, a future factory, and an isolated package logger."""

import asyncio
import logging
from collections.abc import Callable, Iterator

import pytest
from fake_server import FakeRconServer


@pytest.fixture
def fake_server() -> type[FakeRconServer]:
    """The fake server class; tests start it inside their own event loop."""
    return FakeRconServer


@pytest.fixture
def make_future() -> Iterator[Callable[[], asyncio.Future[str]]]:
    """Factory for futures bound to a private, non-running event loop."""
    loop = asyncio.new_event_loop()
    yield loop.create_future
    loop.close()


@pytest.fixture
def package_logger() -> Iterator[logging.Logger]:
    """Package logger with handlers and level restored after the test."""
    logger = logging.getLogger("mb_rcon")
    saved_handlers, saved_level = logger.handlers[:], logger.level
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved_handlers
    logger.setLevel(saved_level)
