"""Invoke helper: call sync or async callables uniformly.

Operation handlers and content accessors can be ``def`` or ``async def``.
Everything that calls user code goes through ``invoke()`` so the
sync/async check lives in one place.

Usage::

    from synthfs._internal.invoke import invoke

    data = await invoke(get_data, request)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await its result when it is awaitable.

    Both forms work::

        def version(request):
            return "1.0\\n"

        async def tabs(request):
            return json.dumps(await browser.tabs())
    """
    outcome = func(*args, **kwargs)
    if inspect.isawaitable(outcome):
        return await outcome
    return outcome
