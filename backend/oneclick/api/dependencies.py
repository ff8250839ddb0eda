"""API Dependencies — orchestrator wiring, request-scoped accessors and envelope responses.

Invariants:
    - Orchestrators are built once (lifespan) and stored on app.state
    - Routes fetch orchestrators through these accessors, never construct them
    - Error envelopes are sent with settings.error_envelope_status_code, ok envelopes with 200
"""

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from oneclick.config import Settings, get_settings
from oneclick.core.device_context import DeviceContext
from oneclick.core.envelope import is_error
from oneclick.core.identifier_codec import IdentifierCodec
from oneclick.core.repository_protocols import DocumentStore, GatewayClient
from oneclick.services.inscription_orchestrator import InscriptionOrchestrator
from oneclick.services.transaction_orchestrator import TransactionOrchestrator


def attach_orchestrators(
    app: FastAPI,
    settings: Settings,
    store: DocumentStore,
    gateway: GatewayClient,
    codec: IdentifierCodec,
) -> None:
    """Build both orchestrators around the shared store/gateway handles."""
    app.state.inscriptions = InscriptionOrchestrator(store, gateway, codec, settings)
    app.state.transactions = TransactionOrchestrator(store, gateway, settings)


def get_inscriptions(request: Request) -> InscriptionOrchestrator:
    return request.app.state.inscriptions


def get_transactions(request: Request) -> TransactionOrchestrator:
    return request.app.state.transactions


def get_device_context(request: Request) -> DeviceContext:
    """User-agent plus client IP (first X-Forwarded-For hop when behind a proxy)."""
    forwarded = request.headers.get("x-forwarded-for", "")
    ip = forwarded.split(",")[0].strip() if forwarded else None
    if not ip and request.client:
        ip = request.client.host
    return DeviceContext(
        user_agent=request.headers.get("user-agent", ""), ip=ip,
    )


class EnvelopeResponder:
    """Turns an orchestrator envelope into a JSONResponse."""

    def __init__(self, settings: Settings = Depends(get_settings)):
        self._error_status = settings.error_envelope_status_code

    def __call__(self, envelope: dict) -> JSONResponse:
        status_code = self._error_status if is_error(envelope) else 200
        return JSONResponse(
            status_code=status_code, content=jsonable_encoder(envelope),
        )
