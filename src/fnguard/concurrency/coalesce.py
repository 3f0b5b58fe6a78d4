"""RequestCoalescer — single-flight sharing of identical in-flight calls."""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, Optional, TypeVar

from .base import UnitOfWork, resolve
from .keys import derive_key

logger = logging.getLogger(__name__)

T = TypeVar("T")

KeyGenerator = Callable[..., str]


class RequestCoalescer(Generic[T]):
    """Deduplicate concurrent calls that share a key.

    The first call for a key starts one task running the wrapped callable;
    every call with the same key that arrives before that task settles
    awaits the same task and receives the same result or the same
    exception.  The key is dropped the moment the task settles, so nothing
    is cached: the next call starts a fresh invocation.

    Waiters join through ``asyncio.shield`` so cancelling one caller never
    cancels the invocation the others are waiting on.
    """

    def __init__(
        self, fn: UnitOfWork[T], generate_key: Optional[KeyGenerator] = None
    ) -> None:
        self._fn = fn
        self._generate_key = generate_key
        self._in_flight: dict[str, asyncio.Task[T]] = {}

    @property
    def in_flight(self) -> int:
        """Number of keys with an invocation currently running."""
        return len(self._in_flight)

    def key_for(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
        """Return the key a call with *args* / *kwargs* coalesces under."""
        if self._generate_key is not None:
            return self._generate_key(*args, **kwargs)
        return derive_key(args, kwargs)

    async def __call__(self, *args: Any, **kwargs: Any) -> T:
        key = self.key_for(args, kwargs)

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run(key, args, kwargs))
            self._in_flight[key] = task
        else:
            logger.debug("Coalescing call onto in-flight key %r", key)

        return await asyncio.shield(task)

    async def _run(
        self, key: str, args: tuple[Any, ...], kwargs: dict[str, Any]
    ) -> T:
        try:
            return await resolve(self._fn, args, kwargs)
        except Exception as exc:
            logger.debug("Invocation for key %r failed: %r", key, exc)
            raise
        finally:
            self._in_flight.pop(key, None)


# ---------------------------------------------------------------------------
# Decorator API
# ---------------------------------------------------------------------------


def coalesce(
    fn: UnitOfWork[T], generate_key: Optional[KeyGenerator] = None
) -> Callable[..., Awaitable[T]]:
    """Wrap *fn* so concurrent calls with equal keys share one invocation.

    Args:
        fn: The unit of work.  May return a value or an awaitable.
        generate_key: Optional callable receiving the call's arguments and
            returning a string key.  Without it, keys are derived
            automatically and only ``str``, ``bool`` and safe-integer
            arguments are accepted (see ``derive_key``).

    The returned coroutine function exposes its ``RequestCoalescer`` as
    ``.coalescer``.  Key derivation errors (``CoalesceKeyError``) are
    raised from the call, never from ``coalesce`` itself.
    """
    coalescer: RequestCoalescer[T] = RequestCoalescer(fn, generate_key)

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        return await coalescer(*args, **kwargs)

    wrapper.coalescer = coalescer  # type: ignore[attr-defined]
    return wrapper


def coalesced(
    generate_key: Optional[KeyGenerator] = None,
) -> Callable[[UnitOfWork[T]], Callable[..., Awaitable[T]]]:
    """Decorator form of ``coalesce``::

        @coalesced(lambda user: user.id)
        async def load_profile(user): ...
    """

    def decorator(fn: UnitOfWork[T]) -> Callable[..., Awaitable[T]]:
        return coalesce(fn, generate_key)

    return decorator
