"""Async helpers.

The session core is asyncio-based; front-ends without their own event loop
(the CLI, tests) drive it through `run_async`.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable


def run_async(fn: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> Any:
    return asyncio.run(fn(*args, **kwargs))
