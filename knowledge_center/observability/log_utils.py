"""
Helpers for passing arbitrary values as structured log context.

Values handed to extra= are reduced to short strings first so that large
payloads (document text, vectors) never end up in log lines.

Dependencies: logging (stdlib)
System role: Structured logging helpers
"""

import logging
from typing import Any


def safe_log_value(value: Any, max_length: int = 500) -> str:
    """
    Reduce a value to a bounded string.

    Sequences and mappings are summarized by size rather than rendered;
    long strings are cut at max_length.

    Args:
        value: Any value
        max_length: Longest string kept before truncation

    Returns:
        str: Printable representation
    """
    try:
        if isinstance(value, (list, tuple, set)):
            rendered = f"{type(value).__name__}({len(value)} items)"
        elif isinstance(value, dict):
            rendered = f"dict({len(value)} keys)"
        elif isinstance(value, bytes):
            rendered = f"bytes({len(value)})"
        else:
            rendered = str(value)
    except Exception as e:
        return f"<unprintable {type(value).__name__}: {type(e).__name__}>"

    if len(rendered) > max_length:
        return f"{rendered[:max_length]}... (truncated, {len(rendered)} total)"
    return rendered


def _safe_context(context: dict[str, Any]) -> dict[str, str]:
    return {key: safe_log_value(value) for key, value in context.items()}


def log_with_context(logger: logging.Logger, level: int, message: str, **context) -> None:
    """Log message at level with every context value passed through safe_log_value."""
    logger.log(level, message, extra=_safe_context(context))


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context,
) -> None:
    """
    Log an exception with traceback, its type and message, and context.

    Call from inside the except block handling exc.
    """
    extra = _safe_context(context)
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(exc)
    logger.exception(message, extra=extra)
