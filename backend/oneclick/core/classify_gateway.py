"""Gateway Classification — maps raw gateway answers to success / advisory / failure.

Invariants:
    - Response code 0 is the only success sentinel for finish and authorize
    - Refund "REVERSED" is a full reversal (plain ok)
    - Refund "NULLIFIED" and HTTP 422 are advisory oks: the money already went back
    - Any other refund discriminator is a failure
    - Pure: no IO, no state; raising GatewayError is the only side effect

Design Decisions:
    - Most permissive refund classification: a retried refund that already
      succeeded must not look like a caller error (refunds are not idempotent
      at the gateway)
"""

from oneclick.core.domain_types import RefundOutcome
from oneclick.core.errors import GatewayError, GatewayRequestError
from oneclick.schemas.gateway import (
    AuthorizationDetail,
    AuthorizationResult,
    FinishInscriptionResult,
    RefundResult,
    StartInscriptionResult,
)

SUCCESS_RESPONSE_CODE = 0
REFUND_FULL_REVERSAL = "REVERSED"
REFUND_NULLIFIED = "NULLIFIED"
HTTP_NOT_FOUND = 404
HTTP_UNPROCESSABLE = 422

NULLIFIED_ADVISORY = "refund registered as a nullification (partial or already nullified)"
ALREADY_SETTLED_ADVISORY = "refund already processed by the gateway"
INSCRIPTION_GONE_ADVISORY = "inscription no longer exists in the gateway"


def require_start_fields(result: StartInscriptionResult) -> tuple[str, str]:
    """Return (redirect_url, token) or raise when either is missing."""
    if not result.token or not result.url_webpay:
        raise GatewayError("Inscription start response lacks token or redirect URL")
    return result.url_webpay, result.token


def is_finish_success(result: FinishInscriptionResult) -> bool:
    return result.response_code == SUCCESS_RESPONSE_CODE


def require_finish_fields(result: FinishInscriptionResult) -> FinishInscriptionResult:
    """Success code alone is not enough: the credential token must be present too."""
    if not is_finish_success(result):
        raise GatewayError(
            f"Inscription finish rejected, response_code={result.response_code}",
        )
    if not result.tbk_user:
        raise GatewayError("Inscription finish response lacks tbk_user")
    return result


def require_authorized_detail(result: AuthorizationResult) -> AuthorizationDetail:
    """First (and only) detail must carry the success response code."""
    detail = result.details[0] if result.details else None
    code = detail.response_code if detail else None
    if detail is None or code != SUCCESS_RESPONSE_CODE:
        raise GatewayError(f"Authorization rejected, response_code={code}")
    return detail


def classify_refund(result: RefundResult) -> tuple[RefundOutcome, str | None]:
    """Classify a refund answer by its `type` discriminator."""
    discriminator = (result.type or "").upper()
    if discriminator == REFUND_FULL_REVERSAL:
        return RefundOutcome.REVERSED, None
    if discriminator == REFUND_NULLIFIED:
        return RefundOutcome.ADVISORY, NULLIFIED_ADVISORY
    return RefundOutcome.FAILED, None


def classify_refund_failure(exc: GatewayRequestError) -> tuple[RefundOutcome, str | None]:
    """A 422 from the refund endpoint means the charge was already settled/reversed."""
    if exc.status_code == HTTP_UNPROCESSABLE:
        return RefundOutcome.ADVISORY, ALREADY_SETTLED_ADVISORY
    return RefundOutcome.FAILED, None


def is_gateway_not_found(exc: BaseException) -> bool:
    return (
        isinstance(exc, GatewayRequestError)
        and exc.status_code == HTTP_NOT_FOUND
    )
