"""
Request payload sanitization utilities.

Strips dangerous markup from every string reachable inside a decoded JSON
request body before resource handlers persist it. Rich-text fields such as
product descriptions legitimately carry HTML, so dangerous constructs are
removed surgically instead of escaping the whole value:

- ``<script>...</script>`` and ``<iframe>...</iframe>`` blocks
- inline event-handler attributes (``onclick="..."``, ``onload='...'``,
  ``onerror=alert(1)``)
- ``javascript:`` and ``data:text/html`` URI schemes

Other characters (``&``, quotes, harmless tags) are preserved and only the
surrounding whitespace is trimmed.
"""

import re
from typing import Any, Set

import structlog

logger = structlog.get_logger("sanitization")

# Blocks match lazily up to the first closing tag.
SCRIPT_BLOCK_PATTERN = re.compile(
    r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE
)
IFRAME_BLOCK_PATTERN = re.compile(
    r"<iframe\b[^<]*(?:(?!</iframe>)<[^<]*)*</iframe>", re.IGNORECASE
)

EVENT_HANDLER_DOUBLE_QUOTED_PATTERN = re.compile(r'\bon\w+\s*=\s*"[^"]*"', re.IGNORECASE)
EVENT_HANDLER_SINGLE_QUOTED_PATTERN = re.compile(r"\bon\w+\s*=\s*'[^']*'", re.IGNORECASE)
EVENT_HANDLER_UNQUOTED_PATTERN = re.compile(r"\bon\w+\s*=\s*[^\s>]+", re.IGNORECASE)

JAVASCRIPT_URI_PATTERN = re.compile(r"javascript:", re.IGNORECASE)
DATA_HTML_URI_PATTERN = re.compile(r"data:text/html", re.IGNORECASE)

# Applied once each, in this order.
DANGEROUS_PATTERNS = (
    SCRIPT_BLOCK_PATTERN,
    IFRAME_BLOCK_PATTERN,
    EVENT_HANDLER_DOUBLE_QUOTED_PATTERN,
    EVENT_HANDLER_SINGLE_QUOTED_PATTERN,
    EVENT_HANDLER_UNQUOTED_PATTERN,
    JAVASCRIPT_URI_PATTERN,
    DATA_HTML_URI_PATTERN,
)


def sanitize_string(value: str) -> str:
    """
    Remove dangerous markup from a single string.

    Each pattern in ``DANGEROUS_PATTERNS`` is applied exactly once, in
    order, so the cost stays linear in the length of the value. Text that a
    removal splices together (``<scr<script></script>ipt>``) is not rescanned.

    Args:
        value: Raw string value

    Returns:
        Sanitized, whitespace-trimmed string
    """
    sanitized = value
    for pattern in DANGEROUS_PATTERNS:
        sanitized = pattern.sub("", sanitized)

    if sanitized != value:
        logger.debug(
            "Dangerous markup removed from string value",
            removed_characters=len(value) - len(sanitized),
        )

    return sanitized.strip()


def sanitize_input(value: Any) -> Any:
    """
    Recursively sanitize a decoded request payload.

    Strings are cleaned with :func:`sanitize_string`; lists and dicts are
    rebuilt with every member sanitized; everything else (``None``, numbers,
    booleans) is returned as-is. A list or dict that refers back to a
    container still being sanitized is returned unchanged by reference
    instead of being walked again.

    Args:
        value: Any JSON-compatible value

    Returns:
        Sanitized copy of ``value``
    """
    return _sanitize(value, set())


def _sanitize(value: Any, in_progress: Set[int]) -> Any:
    if isinstance(value, str):
        return sanitize_string(value)

    if not isinstance(value, (list, dict)):
        return value

    marker = id(value)
    if marker in in_progress:
        return value

    in_progress.add(marker)
    try:
        if isinstance(value, list):
            return [_sanitize(item, in_progress) for item in value]
        return {key: _sanitize(item, in_progress) for key, item in value.items()}
    finally:
        in_progress.discard(marker)


__all__ = [
    'DANGEROUS_PATTERNS',
    'sanitize_string',
    'sanitize_input',
]
