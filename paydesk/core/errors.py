"""
Error taxonomy for the payments ledger.

Every error is raised once, where the condition is detected, and surfaced
to the caller unchanged. The API layer renders them as
``{"detail": message, "error": code}`` with the status below.
"""


class LedgerError(Exception):
    """Base class for errors surfaced to API callers."""
    status_code: int = 400
    code: str = "ledger_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class Unauthorized(LedgerError):
    """Authentication required"""
    status_code = 401
    code = "unauthorized"


class InvalidToken(LedgerError):
    """Invalid or expired link"""
    status_code = 401
    code = "invalid_token"


class ScopeMismatch(LedgerError):
    """Token does not match payment period"""
    status_code = 403
    code = "scope_mismatch"


class NotFound(LedgerError):
    """Payment record not found"""
    status_code = 404
    code = "not_found"


class ValidationError(LedgerError):
    """Invalid period, month, year or rate"""
    status_code = 422
    code = "validation_error"
