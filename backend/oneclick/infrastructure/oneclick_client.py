"""Oneclick Mall Client — async HTTP client for the Transbank Oneclick Mall REST API.

Invariants:
    - No retries: every call is attempted exactly once, the caller classifies the outcome
    - Non-2xx answers raise GatewayRequestError carrying the HTTP status code
    - Transport failures (timeout, connection) raise GatewayRequestError(status_code=None)
    - 2xx bodies that do not match the response schema raise GatewayError
    - Integration mode uses the public integration credentials; production mode
      requires both commerce code and API key

Protocol version:
    - Paths, headers and payloads follow the Oneclick Mall REST API v1.2
      (API_PATH below); revisit them when Transbank publishes a new version

Design Decisions:
    - httpx.AsyncClient over the vendor SDK: the SDK is synchronous and would block
      the event loop on every gateway call
    - One client per process (connection pool), closed on shutdown
    - transport parameter: lets tests plug httpx.MockTransport without monkeypatching
"""

import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError as PydanticValidationError

from oneclick.config import Settings
from oneclick.core.domain_types import GatewayMode
from oneclick.core.errors import GatewayError, GatewayRequestError
from oneclick.infrastructure.observability import mask_secret
from oneclick.schemas.gateway import (
    AuthorizationResult,
    FinishInscriptionResult,
    RefundResult,
    StartInscriptionResult,
    TransactionDetail,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

INTEGRATION_HOST = "https://webpay3gint.transbank.cl"
PRODUCTION_HOST = "https://webpay3g.transbank.cl"
API_PATH = "/rswebpaytransaction/api/oneclick/v1.2"

# Public integration credentials published by Transbank for the Oneclick Mall sandbox
INTEGRATION_COMMERCE_CODE = "597055555541"
INTEGRATION_API_KEY = "579B532A7440BB0C9079DED94D31EA1615BACEB56610332264630D42D0A36B1C"


def _error_message(response: httpx.Response) -> str:
    """Gateway errors come as {"error_message": "..."}; fall back to raw text."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict) and body.get("error_message"):
        return str(body["error_message"])
    return response.reason_phrase


class OneclickMallClient:
    """GatewayClient implementation over the Oneclick Mall REST endpoints."""

    def __init__(
        self,
        commerce_code: str = INTEGRATION_COMMERCE_CODE,
        api_key: str = INTEGRATION_API_KEY,
        mode: GatewayMode = GatewayMode.INTEGRATION,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.mode = mode
        host = PRODUCTION_HOST if mode == GatewayMode.PRODUCTION else INTEGRATION_HOST
        self.client = httpx.AsyncClient(
            base_url=host + API_PATH,
            timeout=timeout_seconds,
            transport=transport,
            headers={
                "Tbk-Api-Key-Id": commerce_code,
                "Tbk-Api-Key-Secret": api_key,
                "Content-Type": "application/json",
            },
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None,
    ) -> "OneclickMallClient":
        """Pick production credentials when configured, integration otherwise."""
        mode = settings.gateway_mode
        if mode == GatewayMode.PRODUCTION:
            logger.info(
                f"Gateway production mode, code={settings.tbk_code} "
                f"key={mask_secret(settings.tbk_key)}",
                extra={"gateway_mode": mode.value},
            )
            return cls(
                settings.tbk_code, settings.tbk_key, mode,
                settings.tbk_timeout_seconds, transport,
            )
        logger.info(
            "Gateway integration mode", extra={"gateway_mode": mode.value},
        )
        return cls(
            timeout_seconds=settings.tbk_timeout_seconds, transport=transport,
        )

    async def start_inscription(
        self, user_id: str, email: str, callback_url: str,
    ) -> StartInscriptionResult:
        body = await self._request("POST", "/inscriptions", {
            "username": user_id,
            "email": email,
            "response_url": callback_url,
        })
        return self._parse(StartInscriptionResult, body)

    async def finish_inscription(self, token: str) -> FinishInscriptionResult:
        body = await self._request("PUT", f"/inscriptions/{token}")
        return self._parse(FinishInscriptionResult, body)

    async def delete_inscription(self, token: str, user_id: str) -> None:
        await self._request("DELETE", "/inscriptions", {
            "tbk_user": token,
            "username": user_id,
        })

    async def authorize(
        self,
        user_id: str,
        token: str,
        buy_order: str,
        details: list[TransactionDetail],
    ) -> AuthorizationResult:
        body = await self._request("POST", "/transactions", {
            "username": user_id,
            "tbk_user": token,
            "buy_order": buy_order,
            "details": [d.model_dump() for d in details],
        })
        return self._parse(AuthorizationResult, body)

    async def refund(
        self,
        buy_order: str,
        commerce_code: str,
        child_buy_order: str,
        amount: int,
    ) -> RefundResult:
        body = await self._request("POST", f"/transactions/{buy_order}/refunds", {
            "commerce_code": commerce_code,
            "detail_buy_order": child_buy_order,
            "amount": amount,
        })
        return self._parse(RefundResult, body)

    async def close(self) -> None:
        await self.client.aclose()

    async def _request(
        self, method: str, path: str, payload: dict | None = None,
    ) -> dict | None:
        """Single attempt; map transport and HTTP failures to GatewayRequestError."""
        try:
            response = await self.client.request(method, path, json=payload)
        except httpx.TimeoutException as e:
            raise GatewayRequestError(f"timeout on {method} {path}") from e
        except httpx.HTTPError as e:
            raise GatewayRequestError(f"{type(e).__name__} on {method} {path}") from e

        if response.is_error:
            message = _error_message(response)
            logger.warning(
                f"Gateway {method} {path} answered {response.status_code}: {message}",
                extra={"gateway_status": response.status_code},
            )
            raise GatewayRequestError(message, response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise GatewayError(f"Non-JSON gateway body on {method} {path}") from e

    def _parse(self, model: type[M], body: dict | None) -> M:
        try:
            return model.model_validate(body or {})
        except PydanticValidationError as e:
            raise GatewayError(
                f"Unexpected gateway body for {model.__name__}: {e.error_count()} error(s)",
            ) from e
