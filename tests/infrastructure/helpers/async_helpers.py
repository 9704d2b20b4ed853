"""Polling helpers for tests that drive the asyncio loop."""

from __future__ import annotations

import asyncio
from typing import Callable


async def wait_until(predicate: Callable[[], bool], timeout: float = 3.0, poll: float = 0.005) -> None:
    """Yield to the loop until ``predicate`` holds; fail after ``timeout`` seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(poll)
