"""
Concurrency utilities package

This package bundles:
 - async_utils    : Structured asyncio helpers (retries, TaskHandle/AsyncTaskManager)
"""

from . import async_utils

from .async_utils import (
    AsyncTaskManager,
    TaskHandle,
    retry_async,
)

__all__ = [
    "AsyncTaskManager",
    "TaskHandle",
    "retry_async",
    "async_utils",
]
