from pydantic import BaseModel, Field


class LoggingConfig(BaseModel):
    """Settings for the ``fnguard`` logger, applied by ``setup_logging``."""

    level: str = Field(default="INFO", description="Level of the fnguard logger")
    json_output: bool = Field(
        default=False,
        description="Emit JSON lines instead of human-readable output",
    )


class LimiterConfig(BaseModel):
    """Defaults for ``limit`` / ``limited``."""

    default_capacity: int = Field(
        default=10,
        ge=1,
        description="Capacity used when a limiter is built without one",
    )


class CoalescerConfig(BaseModel):
    """Defaults for ``coalesce`` / ``coalesced``."""

    default_key: str = Field(
        default="DEFAULT",
        min_length=1,
        description="Key shared by every call made without arguments",
    )
