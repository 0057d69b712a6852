"""
Detect database errors caused by a schema that is mid-migration.

This is a UX hint only: pages that hit such an error show a "refresh
shortly" banner instead of a server error. Nothing is retried or repaired.
"""

SCHEMA_ERROR_MATCHERS = (
    "schema cache",
    "does not exist",
    "relation does not exist",
)

SCHEMA_CACHE_BANNER_MESSAGE = "Database schema is updating. Please refresh in a moment."


def _error_message(error) -> str:
    if error is None:
        return ""
    if isinstance(error, str):
        return error
    if isinstance(error, dict):
        return str(error.get("message") or "")
    message = getattr(error, "message", None)
    if message is None:
        message = getattr(error, "detail", None)
    if message is None and isinstance(error, BaseException):
        message = str(error)
    return str(message or "")


def is_schema_cache_error(error) -> bool:
    """
    True when the error's message (case-insensitive) mentions a missing
    relation or a stale schema cache; False for None or an empty message.

    Accepts exceptions, objects with a ``message`` attribute, dicts with a
    "message" key, or plain strings.
    """
    message = _error_message(error).lower()
    if not message:
        return False
    return any(matcher in message for matcher in SCHEMA_ERROR_MATCHERS)
