"""Invoke helpers: call sync or async hooks uniformly.

Controller life-cycle methods and app hooks can be ``def`` or
``async def``. Any code that calls one of them must handle both cases.
This module provides a single helper so the sync/async check lives in
exactly one place.

Usage::

    from vertebrae._internal.invoke import invoke

    allowed = await invoke(app.can_leave_current_controller)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a hook and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync: returns immediately, no await needed
        class Home(Controller):
            def start(self):
                self.container.append("<h1>Home</h1>")

        # async: returns coroutine, awaited automatically
        class Feed(Controller):
            async def start(self, page):
                self.items = await fetch_feed(page)
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
