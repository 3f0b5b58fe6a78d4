"""ConcurrencyLimiter — bounded parallelism for a unit of work."""

from __future__ import annotations

import asyncio
import contextvars
import functools
import logging
import numbers
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from fnguard.configs.config import get_app_config

from .base import InvalidArgument, UnitOfWork, resolve

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class _PendingCall:
    """A call waiting for a slot, the future its caller is awaiting, and the
    caller's context, which the invocation runs in once admitted."""

    args: tuple[Any, ...]
    kwargs: dict[str, Any]
    waiter: asyncio.Future[Any]
    context: contextvars.Context


class ConcurrencyLimiter(Generic[T]):
    """Admission gate allowing at most ``capacity`` invocations in flight.

    Calls beyond capacity wait in a FIFO queue.  When an invocation settles
    its slot is handed straight to the head of the queue, so a newcomer can
    never overtake a waiting call, and the queued invocation starts in its
    own task so stack depth stays flat however long the queue grows.

    Usage::

        limiter = ConcurrencyLimiter(fetch_page, capacity=4)
        pages = await asyncio.gather(*(limiter(url) for url in urls))
    """

    def __init__(self, fn: UnitOfWork[T], capacity: int) -> None:
        _validate(fn, capacity)
        self._fn = fn
        self._capacity = int(capacity)
        self._in_flight = 0
        self._pending: deque[_PendingCall] = deque()
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def in_flight(self) -> int:
        """Invocations currently holding a slot."""
        return self._in_flight

    @property
    def pending(self) -> int:
        """Calls queued for a slot."""
        return len(self._pending)

    async def __call__(self, *args: Any, **kwargs: Any) -> T:
        if self._in_flight < self._capacity and not self._pending:
            self._in_flight += 1
            try:
                return await resolve(self._fn, args, kwargs)
            finally:
                self._release()

        waiter: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._pending.append(
            _PendingCall(args, kwargs, waiter, contextvars.copy_context())
        )
        logger.debug(
            "Limiter at capacity (%d): queued call, %d waiting",
            self._capacity,
            len(self._pending),
        )
        return await waiter

    def _release(self) -> None:
        """Hand the freed slot to the oldest live waiter, or give it back."""
        while self._pending:
            call = self._pending.popleft()
            if call.waiter.done():
                # Caller was cancelled while queued.
                continue
            task = asyncio.get_running_loop().create_task(
                self._admit(call), context=call.context
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            return
        self._in_flight -= 1

    async def _admit(self, call: _PendingCall) -> None:
        try:
            result = await resolve(self._fn, call.args, call.kwargs)
        except asyncio.CancelledError:
            call.waiter.cancel()
            raise
        except BaseException as exc:
            logger.debug("Queued invocation failed: %r", exc)
            if not call.waiter.done():
                call.waiter.set_exception(exc)
            if isinstance(exc, (KeyboardInterrupt, SystemExit)):
                raise
        else:
            if not call.waiter.done():
                call.waiter.set_result(result)
        finally:
            self._release()


def _validate(fn: Any, capacity: Any) -> None:
    if not callable(fn):
        raise InvalidArgument("parameter must be a function")

    if isinstance(capacity, bool) or not isinstance(capacity, numbers.Real):
        raise InvalidArgument("limit must be a number")

    # Slots are whole: 1.5 would otherwise admit two calls.
    if not isinstance(capacity, numbers.Integral) and not float(capacity).is_integer():
        raise InvalidArgument("limit must be a number")

    if capacity < 1:
        raise InvalidArgument("limit must be >= 1")


# ---------------------------------------------------------------------------
# Decorator API
# ---------------------------------------------------------------------------


def limit(
    fn: UnitOfWork[T], capacity: int | None = None
) -> Callable[..., Awaitable[T]]:
    """Wrap *fn* so at most *capacity* invocations run concurrently.

    When *capacity* is ``None`` the configured
    ``limiter.default_capacity`` is used.  The returned coroutine function
    exposes its ``ConcurrencyLimiter`` as ``.limiter``.

    Raises:
        InvalidArgument: if *fn* is not callable or *capacity* is not a
            whole number >= 1.
    """
    if capacity is None:
        capacity = get_app_config().limiter.default_capacity
    limiter: ConcurrencyLimiter[T] = ConcurrencyLimiter(fn, capacity)

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        return await limiter(*args, **kwargs)

    wrapper.limiter = limiter  # type: ignore[attr-defined]
    return wrapper


def limited(
    capacity: int | None = None,
) -> Callable[[UnitOfWork[T]], Callable[..., Awaitable[T]]]:
    """Decorator form of ``limit``::

        @limited(4)
        async def fetch(url): ...
    """

    def decorator(fn: UnitOfWork[T]) -> Callable[..., Awaitable[T]]:
        return limit(fn, capacity)

    return decorator
