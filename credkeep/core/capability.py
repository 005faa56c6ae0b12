"""Uniform invocation of plugin capabilities."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Sequence
from typing import Any


async def invoke_capability(capability: Callable[..., Any], files: Sequence[str]) -> Any:
    """Call *capability* with a copy of *files* and await its result.

    Plain functions and coroutine functions are both accepted; whatever the
    capability returns is awaited when awaitable.
    """
    result = capability(list(files))
    if inspect.isawaitable(result):
        result = await result
    return result
