"""Error Hierarchy — typed, categorized exceptions for every Oneclick failure mode.

Invariants:
    - Every error has a code (ErrorCode), category (ErrorCategory), severity (ErrorSeverity)
    - ErrorCode is closed: orchestrators never classify a failure with a free-form string
    - Domain errors (400-level) are caller faults; gateway/store errors (500-level) are not
    - to_envelope() produces the tagged {status: error} result returned by orchestrators
    - to_response() produces the REST envelope used by the global error handler

Design Decisions:
    - Single hierarchy with OneclickError base: orchestrator boundary catches all of it
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    CONFLICT = "conflict"
    RESOURCE_NOT_FOUND = "resource_not_found"
    GATEWAY = "gateway"
    DECODE = "decode"
    DATABASE = "database"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


class ErrorCode(str, Enum):
    """Closed set of classified failure reasons surfaced in error envelopes."""
    # validation
    MISSING_UA = "MISSING_UA"
    INVALID_USER_ID = "INVALID_USER_ID"
    INVALID_USER_EMAIL = "INVALID_USER_EMAIL"
    INVALID_INSCRIPTION_ID = "INVALID_INSCRIPTION_ID"
    INVALID_TBK_TOKEN = "INVALID_TBK_TOKEN"
    INVALID_BUY_ORDER = "INVALID_BUY_ORDER"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_SHARES = "INVALID_SHARES"
    # decode
    INVALID_HASH = "INVALID_HASH"
    # conflict
    ACTIVE_INSCRIPTION_EXISTS = "ACTIVE_INSCRIPTION_EXISTS"
    BUY_ORDER_ALREADY_PROCESSED = "BUY_ORDER_ALREADY_PROCESSED"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    DUPLICATE_RECORD = "DUPLICATE_RECORD"
    # not found
    PENDING_INSCRIPTION_NOT_FOUND = "PENDING_INSCRIPTION_NOT_FOUND"
    ACTIVE_INSCRIPTION_NOT_FOUND = "ACTIVE_INSCRIPTION_NOT_FOUND"
    TRANSACTION_NOT_FOUND = "TRANSACTION_NOT_FOUND"
    # gateway
    UNEXPECTED_TBK_RESPONSE = "UNEXPECTED_TBK_RESPONSE"
    MISSING_INSCRIPTION_TOKEN = "MISSING_INSCRIPTION_TOKEN"
    GATEWAY_REQUEST_FAILED = "GATEWAY_REQUEST_FAILED"
    # infrastructure
    STORE_ERROR = "STORE_ERROR"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    inscription_id: str | None = None
    user_id: str | None = None
    buy_order: str | None = None
    debug_info: dict[str, Any] | None = None


class OneclickError(Exception):
    """Base exception for all Oneclick errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_envelope(self) -> dict:
        """Convert to the tagged result envelope returned by orchestrators."""
        return {
            "status": "error",
            "error": self.code.value,
            "message": self.message.replace("\n", ". "),
        }

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            **self.to_envelope(),
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationError(OneclickError):
    """Malformed or missing input."""
    def __init__(
        self, code: ErrorCode, message: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message or f"Invalid input ({code.value})",
            code, ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )


class DecodeError(OneclickError):
    """Opaque identifier malformed, truncated or tampered."""
    def __init__(
        self, message: str = "Identifier could not be decoded",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, ErrorCode.INVALID_HASH, ErrorCategory.DECODE,
            ErrorSeverity.WARNING, context, 400,
        )


class ConflictError(OneclickError):
    """State invariant violation (duplicate active inscription, duplicate buy order)."""
    def __init__(
        self, code: ErrorCode, message: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message or f"Conflicting state ({code.value})",
            code, ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class NotFoundError(OneclickError):
    """Referenced record absent or not in the required status."""
    def __init__(
        self, code: ErrorCode, message: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message or f"Record not found ({code.value})",
            code, ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class GatewayError(OneclickError):
    """Gateway response missing required fields or reporting an unclassified failure."""
    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNEXPECTED_TBK_RESPONSE,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.GATEWAY,
            ErrorSeverity.ERROR, context, 502,
        )


class GatewayRequestError(GatewayError):
    """Gateway answered with a non-2xx HTTP status (or was unreachable)."""
    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Gateway request failed ({status_code or 'no response'}): {message}",
            ErrorCode.GATEWAY_REQUEST_FAILED, context,
        )
        self.status_code = status_code


class StoreError(OneclickError):
    """Persistence operation failed."""
    def __init__(
        self, message: str, operation: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Store {operation} failed: {message}",
            ErrorCode.STORE_ERROR, ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ConfigurationError(OneclickError):
    """Required setting missing or malformed at startup."""
    def __init__(self, setting: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid or missing setting: {setting}",
            ErrorCode.INVALID_CONFIGURATION, ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.setting = setting
