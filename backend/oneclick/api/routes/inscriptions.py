"""Inscription Routes — create, finish (gateway callback) and delete.

Invariants:
    - create/delete and POST finish require the bearer API key
    - GET finish is public: the caller is the cardholder's browser coming back
      from the gateway, not the owning application
    - finish always answers with a redirect (302), success or failure
    - finish is served with and without a trailing slash (no slash redirect)
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from oneclick.api.auth import require_api_key
from oneclick.api.dependencies import (
    EnvelopeResponder, get_device_context, get_inscriptions,
)
from oneclick.core.device_context import DeviceContext
from oneclick.schemas.requests import InscriptionCreateBody, InscriptionDeleteBody
from oneclick.services.inscription_orchestrator import InscriptionOrchestrator

router = APIRouter(prefix="/inscription", tags=["inscriptions"])


@router.post("/create", dependencies=[Depends(require_api_key)])
async def create_inscription(
    body: InscriptionCreateBody | None = None,
    device: DeviceContext = Depends(get_device_context),
    orchestrator: InscriptionOrchestrator = Depends(get_inscriptions),
    respond: EnvelopeResponder = Depends(),
):
    """Start a new inscription; answers with the gateway redirect URL and token."""
    body = body or InscriptionCreateBody()
    envelope = await orchestrator.create_inscription(body.user_id, body.email, device)
    return respond(envelope)


async def _finish(
    hash: str, tbk_token: str, orchestrator: InscriptionOrchestrator,
) -> RedirectResponse:
    url = await orchestrator.finish_inscription(hash, tbk_token)
    return RedirectResponse(url, status_code=302)


@router.get("/finish/{hash}")
@router.get("/finish/{hash}/", include_in_schema=False)
async def finish_inscription_public(
    hash: str,
    tbk_token: str = Query("", alias="TBK_TOKEN"),
    orchestrator: InscriptionOrchestrator = Depends(get_inscriptions),
):
    """Gateway callback reached by the cardholder's browser."""
    return await _finish(hash, tbk_token, orchestrator)


@router.post("/finish/{hash}", dependencies=[Depends(require_api_key)])
@router.post(
    "/finish/{hash}/", dependencies=[Depends(require_api_key)],
    include_in_schema=False,
)
async def finish_inscription(
    hash: str,
    tbk_token: str = Query("", alias="TBK_TOKEN"),
    orchestrator: InscriptionOrchestrator = Depends(get_inscriptions),
):
    return await _finish(hash, tbk_token, orchestrator)


@router.post("/delete", dependencies=[Depends(require_api_key)])
async def delete_inscription(
    body: InscriptionDeleteBody | None = None,
    orchestrator: InscriptionOrchestrator = Depends(get_inscriptions),
    respond: EnvelopeResponder = Depends(),
):
    body = body or InscriptionDeleteBody()
    envelope = await orchestrator.delete_inscription(body.inscription_id, body.user_id)
    return respond(envelope)
