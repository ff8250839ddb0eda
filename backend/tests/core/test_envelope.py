"""Result Envelope and Error Hierarchy — tagged results and error metadata.

Tests:
    - ok envelopes carry payload and optional message
    - error envelopes carry the ErrorCode value and never leak unknown exceptions
    - Each error class maps to its category and HTTP status
"""

from oneclick.core.envelope import error_envelope, is_error, ok_envelope
from oneclick.core.errors import (
    ConflictError, DecodeError, ErrorCategory, ErrorCode, GatewayError,
    GatewayRequestError, NotFoundError, StoreError, ValidationError,
)


def test_ok_envelope_with_payload():
    assert ok_envelope(url="u", token="t") == {"status": "ok", "url": "u", "token": "t"}


def test_ok_envelope_message_only_when_given():
    assert ok_envelope() == {"status": "ok"}
    assert ok_envelope(message="heads up") == {"status": "ok", "message": "heads up"}


def test_error_envelope_from_classified_error():
    envelope = error_envelope(ConflictError(ErrorCode.BUY_ORDER_ALREADY_PROCESSED))
    assert envelope["status"] == "error"
    assert envelope["error"] == "BUY_ORDER_ALREADY_PROCESSED"
    assert is_error(envelope)


def test_error_envelope_hides_unclassified_exception():
    envelope = error_envelope(RuntimeError("password=hunter2"))
    assert envelope["error"] == "INTERNAL_ERROR"
    assert "hunter2" not in envelope["message"]


def test_error_classes_carry_category_and_status():
    assert ValidationError(ErrorCode.INVALID_AMOUNT).http_status == 400
    assert DecodeError().code == ErrorCode.INVALID_HASH
    assert NotFoundError(ErrorCode.TRANSACTION_NOT_FOUND).category == (
        ErrorCategory.RESOURCE_NOT_FOUND
    )
    assert GatewayError("x").code == ErrorCode.UNEXPECTED_TBK_RESPONSE
    assert StoreError("x", "insert").http_status == 503


def test_gateway_request_error_keeps_http_status():
    exc = GatewayRequestError("not found", 404)
    assert isinstance(exc, GatewayError)
    assert exc.status_code == 404
    assert exc.code == ErrorCode.GATEWAY_REQUEST_FAILED


def test_to_response_adds_metadata():
    response = ValidationError(ErrorCode.MISSING_UA, "Missing user-agent").to_response()
    assert response["error"] == "MISSING_UA"
    assert response["category"] == "validation"
    assert response["severity"] == "warning"
    assert "timestamp" in response
