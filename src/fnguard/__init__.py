"""fnguard — composable concurrency decorators for asyncio."""

from fnguard.concurrency import (
    MAX_SAFE_INTEGER,
    CoalesceKeyError,
    ConcurrencyLimiter,
    FnGuardError,
    InvalidArgument,
    RequestCoalescer,
    UnitOfWork,
    coalesce,
    coalesced,
    derive_key,
    limit,
    limited,
)
from fnguard.configs.config import AppConfig, get_app_config
from fnguard.infra.logging import setup_logging

__all__ = [
    "AppConfig",
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
    "get_app_config",
    "limit",
    "limited",
    "setup_logging",
]
