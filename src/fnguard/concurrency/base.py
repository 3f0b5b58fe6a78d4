"""Concurrency primitives: exceptions and the unit-of-work contract."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar, Union

T = TypeVar("T")

# A unit of work may return its value directly or hand back an awaitable.
UnitOfWork = Callable[..., Union[Awaitable[T], T]]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class FnGuardError(Exception):
    """Base class for errors raised by the decorators themselves."""


class InvalidArgument(FnGuardError, TypeError):
    """Raised when a limiter is constructed with a bad callable or capacity."""


class CoalesceKeyError(FnGuardError):
    """Raised when a coalescing key cannot be derived from call arguments."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def resolve(
    fn: UnitOfWork[T], args: tuple[Any, ...], kwargs: dict[str, Any]
) -> T:
    """Invoke *fn* and await its result if it handed back an awaitable.

    Synchronous return values and synchronous raises both surface through
    the returned coroutine, so callers see one uniform pending result.
    """
    result = fn(*args, **kwargs)
    if inspect.isawaitable(result):
        return await result
    return result
