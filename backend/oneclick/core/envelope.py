"""Result Envelope — uniform tagged result for every orchestrator operation.

Invariants:
    - Success: {"status": "ok", ...payload}; advisory text travels in "message"
    - Failure: {"status": "error", "error": <ErrorCode value>, "message": <text>}
    - Unclassified exceptions become INTERNAL_ERROR without leaking internals
"""

from oneclick.core.errors import ErrorCode, OneclickError

STATUS_OK = "ok"
STATUS_ERROR = "error"


def ok_envelope(message: str | None = None, **payload: object) -> dict:
    """Build a success envelope. message is only included when given."""
    envelope: dict = {"status": STATUS_OK, **payload}
    if message:
        envelope["message"] = message
    return envelope


def error_envelope(exc: BaseException) -> dict:
    """Build a failure envelope from any exception."""
    if isinstance(exc, OneclickError):
        return exc.to_envelope()
    return {
        "status": STATUS_ERROR,
        "error": ErrorCode.INTERNAL_ERROR.value,
        "message": "An unexpected error occurred",
    }


def is_error(envelope: dict) -> bool:
    return envelope.get("status") == STATUS_ERROR
