"""Errors of the Site Reviews domain that Protean has no counterpart for.

Validation, missing reviews and illegal transitions use
``protean.exceptions`` (``ValidationError``, ``ObjectNotFoundError``,
``InvalidOperationError``). A honeypot hit is deliberately absent: it is
answered like a successful submission and never surfaces as an error.
"""


class SiteReviewsError(Exception):
    """Base class for errors raised by the domain."""


class RateLimited(SiteReviewsError):
    """Too many submissions from one client for one scope in the current window."""

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(f"Too many reviews submitted. Please try again in {retry_after} seconds.")


class StoreFault(SiteReviewsError):
    """The review store failed. Details are logged, never returned to callers."""


def error_message(exc: Exception) -> str:
    """Flatten an exception's field messages into one line for humans."""
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        parts = []
        for value in messages.values():
            parts.extend(value if isinstance(value, (list, tuple)) else [value])
        return "; ".join(str(part) for part in parts)
    if messages:
        return str(messages)
    return str(exc)
