"""Automatic coalescing keys derived from call arguments.

Only ``str``, ``bool`` and integral numbers are accepted.  Every value is
encoded as ``{<tag><length>:<text>}``; the explicit length means a value's
text can contain any delimiter without bleeding into its neighbours, so two
different argument lists can never produce the same key::

    derive_key(("one", "two"), {})   -> "{s3:one}|{s3:two}#2:0"
    derive_key(("one}|{stwo",), {})  -> "{s10:one}|{stwo}#1:0"
    derive_key((True,), {})          -> "{b4:true}#1:0"
    derive_key(("true",), {})        -> "{s4:true}#1:0"

Keyword arguments are sorted by name and encoded as
``{k<length>:<name>}=<value>`` after the positional parts.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fnguard.configs.config import get_app_config

from .base import CoalesceKeyError

# Largest integer every JSON/JS consumer can round-trip exactly.
MAX_SAFE_INTEGER = 2**53 - 1

_TAG_STRING = "s"
_TAG_NUMBER = "n"
_TAG_BOOLEAN = "b"
_TAG_KEYWORD = "k"

_SEPARATOR = "|"


def derive_key(args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> str:
    """Build the coalescing key for one call.

    Raises:
        CoalesceKeyError: if an argument has an unsupported type or is a
            number that is not a safe integer.
    """
    if not args and not kwargs:
        return get_app_config().coalescer.default_key

    parts = [_encode_value(arg) for arg in args]
    parts.extend(
        f"{_wrap(_TAG_KEYWORD, name)}={_encode_value(kwargs[name])}"
        for name in sorted(kwargs)
    )
    return f"{_SEPARATOR.join(parts)}#{len(args)}:{len(kwargs)}"


def _encode_value(value: Any) -> str:
    # bool is an int subclass, so it has to be checked first.
    if isinstance(value, bool):
        return _wrap(_TAG_BOOLEAN, "true" if value else "false")
    if isinstance(value, str):
        return _wrap(_TAG_STRING, value)
    if isinstance(value, (int, float)):
        return _wrap(_TAG_NUMBER, str(_safe_integer(value)))
    raise CoalesceKeyError(
        f"Invalid parameter type: {type(value).__name__}.\n"
        "Create a generate_key callback to use complex data types."
    )


def _safe_integer(value: int | float) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise CoalesceKeyError(
            "Unable to generate key: Provided integer exceeds maximum safe integer size"
        )
    number = int(value)
    if abs(number) > MAX_SAFE_INTEGER:
        raise CoalesceKeyError(
            "Unable to generate key: Provided integer exceeds maximum safe integer size"
        )
    return number


def _wrap(tag: str, text: str) -> str:
    return f"{{{tag}{len(text)}:{text}}}"
