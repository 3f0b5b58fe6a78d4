"""Concurrency-control decorators for async units of work.

Two independent wrappers, each adding one behavior:

1. **Limiter** (``limit`` / ``limited``): at most ``capacity`` invocations
   in flight; the rest wait in a FIFO queue and are admitted as slots free.

2. **Coalescer** (``coalesce`` / ``coalesced``): concurrent calls sharing a
   key run the wrapped callable once and all receive its outcome.

They compose in either order.  ``limit(coalesce(fn), 2)`` bounds distinct
keys in flight; ``coalesce(limit(fn, 2))`` shares results before queueing.
"""

from .base import CoalesceKeyError, FnGuardError, InvalidArgument, UnitOfWork
from .coalesce import RequestCoalescer, coalesce, coalesced
from .keys import MAX_SAFE_INTEGER, derive_key
from .limit import ConcurrencyLimiter, limit, limited

__all__ = [
    "CoalesceKeyError",
    "ConcurrencyLimiter",
    "FnGuardError",
    "InvalidArgument",
    "MAX_SAFE_INTEGER",
    "RequestCoalescer",
    "UnitOfWork",
    "coalesce",
    "coalesced",
    "derive_key",
    "limit",
    "limited",
]
