"""HTTP surface.

This package provides the FastAPI application factory, the practice
routes and per-client rate limiting.
"""

from speakpractice.api.app import create_app
from speakpractice.api.rate_limit import FixedWindowRateLimiter

__all__ = [
    "create_app",
    "FixedWindowRateLimiter",
]
