"""
errors.py — AppError base class and error code registry.

Every error returned by the SplitRight API must use a code defined here.
Do not raise strings or generic exceptions from service or route code.

Rules:
  - Error codes are a versioned contract. They do not change once published.
  - Error messages are human-readable prose. They may be improved at any time.
  - Allocation and formatting never raise: empty item lists, zero
    participants and missing optional fields resolve to documented defaults.
    Only the persistence boundary (history log, live-split slot) raises.
"""

from __future__ import annotations


class AppError(Exception):

    def __init__(
            self,
            code: str,
            message: str,
            http_status: int,
            field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code        = code
        self.message     = message
        self.http_status = http_status
        self.field       = field  # which request field caused the error

    def to_dict(self) -> dict:
        payload = {
            "code":    self.code,
            "message": self.message,
        }
        if self.field is not None:
            payload["field"] = self.field
        return {"error": payload}

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"http_status={self.http_status}, "
            f"message={self.message!r})"
        )


# ── Error Code Registry ────────────────────────────────────────────────────
#
# Organised by category. HTTP status is indicated in the comment.
#
# IMPORTANT: these are the string values sent in the API response.
# Do not rename them without a major version bump.
# ──────────────────────────────────────────────────────────────────────────

class ErrorCode:

    # ── Schema / Input Errors (400) ────────────────────────────────────────
    MISSING_FIELD              = "MISSING_FIELD"
    INVALID_FIELD              = "INVALID_FIELD"
    INVALID_TIP_TYPE           = "INVALID_TIP_TYPE"
    INVALID_SPLIT_MODE         = "INVALID_SPLIT_MODE"
    INVALID_PAYMENT_METHOD     = "INVALID_PAYMENT_METHOD"
    DUPLICATE_ASSIGNEE         = "DUPLICATE_ASSIGNEE"
    DUPLICATE_PARTICIPANT      = "DUPLICATE_PARTICIPANT"
    UNKNOWN_ASSIGNEE           = "UNKNOWN_ASSIGNEE"

    # ── Not Found Errors (404) ─────────────────────────────────────────────
    HISTORY_ENTRY_NOT_FOUND    = "HISTORY_ENTRY_NOT_FOUND"
    NO_CURRENT_SPLIT           = "NO_CURRENT_SPLIT"

    # ── Storage Errors ─────────────────────────────────────────────────────
    PERSISTENCE_FAILED         = "PERSISTENCE_FAILED"     # 503: write rejected
    HISTORY_LOAD_FAILED        = "HISTORY_LOAD_FAILED"    # 500: unreadable or malformed

    # ── System Errors (500) ────────────────────────────────────────────────
    INTERNAL_ERROR             = "INTERNAL_ERROR"


# ── Warning Code Registry ──────────────────────────────────────────────────
#
# Warnings are returned alongside a 2xx response in the `warnings` array.
# They do not block the request.
# ──────────────────────────────────────────────────────────────────────────

class WarningCode:

    # The stored history log could not be read. The response carries an
    # empty list instead of a partial one.
    HISTORY_UNREADABLE = "HISTORY_UNREADABLE"


# ── Storage exceptions ─────────────────────────────────────────────────────

class PersistenceError(AppError):
    """The key-value medium rejected a write. In-memory state is unchanged."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.PERSISTENCE_FAILED, message, 503)


class LoadError(AppError):
    """The key-value medium could not be read or held malformed data."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.HISTORY_LOAD_FAILED, message, 500)
