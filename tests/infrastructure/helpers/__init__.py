"""Test helpers for the fixedcam test suite.

Usage:
    from tests.infrastructure.helpers import wait_until
"""

from .async_helpers import wait_until

__all__ = ["wait_until"]
