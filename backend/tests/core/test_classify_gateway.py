"""Gateway Classification — success sentinels and refund outcome mapping.

Tests:
    - Start/finish/authorize require their fields and the 0 response code
    - Refund: REVERSED ok, NULLIFIED advisory, anything else failed
    - Refund HTTP 422 is advisory, other statuses failed
    - Only GatewayRequestError(404) counts as gateway not-found
"""

import pytest

from oneclick.core.classify_gateway import (
    ALREADY_SETTLED_ADVISORY,
    NULLIFIED_ADVISORY,
    classify_refund,
    classify_refund_failure,
    is_gateway_not_found,
    require_authorized_detail,
    require_finish_fields,
    require_start_fields,
)
from oneclick.core.domain_types import RefundOutcome
from oneclick.core.errors import GatewayError, GatewayRequestError
from oneclick.schemas.gateway import (
    AuthorizationResult,
    FinishInscriptionResult,
    RefundResult,
    StartInscriptionResult,
)


def test_start_fields_present():
    result = StartInscriptionResult(token="tok", url_webpay="https://webpay/x")
    assert require_start_fields(result) == ("https://webpay/x", "tok")


@pytest.mark.parametrize("payload", [
    {"token": "tok"},
    {"url_webpay": "https://webpay/x"},
    {},
])
def test_start_fields_missing(payload):
    with pytest.raises(GatewayError):
        require_start_fields(StartInscriptionResult(**payload))


def test_finish_success_requires_tbk_user():
    with pytest.raises(GatewayError):
        require_finish_fields(FinishInscriptionResult(response_code=0))
    result = FinishInscriptionResult(response_code=0, tbk_user="u")
    assert require_finish_fields(result) is result


def test_finish_non_zero_code_fails():
    with pytest.raises(GatewayError):
        require_finish_fields(FinishInscriptionResult(response_code=-1, tbk_user="u"))


def test_finish_code_as_string_is_coerced():
    result = FinishInscriptionResult.model_validate(
        {"response_code": "0", "tbk_user": "u"},
    )
    assert require_finish_fields(result).response_code == 0


def test_authorized_detail_is_first_detail():
    result = AuthorizationResult.model_validate(
        {"details": [{"response_code": 0, "authorization_code": "1213"}]},
    )
    assert require_authorized_detail(result).authorization_code == "1213"


@pytest.mark.parametrize("details", [[], [{"response_code": -96}], [{}]])
def test_authorized_detail_rejected(details):
    with pytest.raises(GatewayError):
        require_authorized_detail(AuthorizationResult.model_validate({"details": details}))


def test_refund_reversed_is_plain_success():
    assert classify_refund(RefundResult(type="REVERSED")) == (
        RefundOutcome.REVERSED, None,
    )


def test_refund_nullified_is_advisory():
    assert classify_refund(RefundResult(type="NULLIFIED")) == (
        RefundOutcome.ADVISORY, NULLIFIED_ADVISORY,
    )


@pytest.mark.parametrize("kind", [None, "", "PENDING", "REVERSAL"])
def test_refund_other_discriminators_fail(kind):
    outcome, message = classify_refund(RefundResult(type=kind))
    assert outcome == RefundOutcome.FAILED
    assert message is None


def test_refund_422_is_already_settled():
    assert classify_refund_failure(GatewayRequestError("x", 422)) == (
        RefundOutcome.ADVISORY, ALREADY_SETTLED_ADVISORY,
    )


@pytest.mark.parametrize("status", [None, 400, 404, 500])
def test_refund_other_failures_fail(status):
    outcome, _ = classify_refund_failure(GatewayRequestError("x", status))
    assert outcome == RefundOutcome.FAILED


def test_gateway_not_found_only_for_404_request_errors():
    assert is_gateway_not_found(GatewayRequestError("gone", 404))
    assert not is_gateway_not_found(GatewayRequestError("boom", 500))
    assert not is_gateway_not_found(GatewayError("missing fields"))
    assert not is_gateway_not_found(ValueError("404"))
