"""Transaction Routes — charge and refund on an active inscription.

Invariants:
    - Both routes require the bearer API key
    - Routes only unpack the body; every decision lives in TransactionOrchestrator
"""

from fastapi import APIRouter, Depends

from oneclick.api.auth import require_api_key
from oneclick.api.dependencies import EnvelopeResponder, get_transactions
from oneclick.schemas.requests import ChargeBody, RefundBody
from oneclick.services.transaction_orchestrator import TransactionOrchestrator

router = APIRouter(
    prefix="/inscription", tags=["transactions"],
    dependencies=[Depends(require_api_key)],
)


@router.post("/charge")
async def charge(
    body: ChargeBody | None = None,
    orchestrator: TransactionOrchestrator = Depends(get_transactions),
    respond: EnvelopeResponder = Depends(),
):
    body = body or ChargeBody()
    envelope = await orchestrator.charge(
        user_id=body.user_id,
        buy_order=body.buy_order,
        amount=body.amount,
        inscription_id=body.inscription_id,
        commerce_code=body.commerce_code,
        shares=body.shares,
    )
    return respond(envelope)


@router.post("/refund")
async def refund(
    body: RefundBody | None = None,
    orchestrator: TransactionOrchestrator = Depends(get_transactions),
    respond: EnvelopeResponder = Depends(),
):
    body = body or RefundBody()
    envelope = await orchestrator.refund(
        buy_order=body.buy_order,
        amount=body.amount,
        user_id=body.user_id,
        commerce_code=body.commerce_code,
        auth_code=body.auth_code,
    )
    return respond(envelope)
