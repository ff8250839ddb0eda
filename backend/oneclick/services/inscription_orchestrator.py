"""Inscription Orchestrator — create / finish / delete of one-click credentials.

Invariants:
    - State machine: pending -> success | failed, success -> removed (nothing else)
    - At most one success inscription per user: count() fast path before the write,
      partial unique index as the authoritative check when finishing
    - create/delete never raise: every outcome is a tagged envelope
    - finish never raises: it always returns a redirect URL (success or failure
      destination, both carrying inscriptionId), and a resolvable pending
      inscription is marked failed on any fault
    - Gateway "not found" on delete is a successful tombstone (idempotent delete)

Design Decisions:
    - Store, gateway and codec injected via constructor: one instance per process,
      shared by concurrent requests, no locks (races resolved by the store indexes)
    - Callback URL embeds the encrypted inscription id, never the raw id
"""

import logging
from datetime import datetime, timezone

from oneclick.config import Settings
from oneclick.core.classify_gateway import (
    INSCRIPTION_GONE_ADVISORY,
    is_gateway_not_found,
    require_finish_fields,
    require_start_fields,
)
from oneclick.core.device_context import DeviceContext, build_client_metadata
from oneclick.core.domain_types import Collection, InscriptionStatus
from oneclick.core.envelope import ok_envelope
from oneclick.core.errors import (
    ConflictError, ErrorCode, GatewayError, NotFoundError, ValidationError,
)
from oneclick.core.identifier_codec import IdentifierCodec
from oneclick.core.repository_protocols import DocumentStore, GatewayClient
from oneclick.core.validation import (
    is_valid_email, is_valid_object_id, is_valid_uuid, last_four, sanitize_text,
)
from oneclick.infrastructure.observability import mask_secret
from oneclick.services.orchestrator_helpers import (
    capture_failure, log_failure, transition, with_query,
)

logger = logging.getLogger(__name__)

FINISH_PATH = "inscription/finish"


class InscriptionOrchestrator:
    """Owns the Inscription state machine."""

    def __init__(
        self,
        store: DocumentStore,
        gateway: GatewayClient,
        codec: IdentifierCodec,
        settings: Settings,
    ):
        self.store = store
        self.gateway = gateway
        self.codec = codec
        self.settings = settings

    # ─── create ──────────────────────────────────────────────────

    async def create_inscription(
        self, user_id: object, email: object, device: DeviceContext,
    ) -> dict:
        """Register a pending inscription and start it at the gateway."""
        user_id = sanitize_text(user_id)
        try:
            return await self._create(user_id, sanitize_text(email).lower(), device)
        except Exception as e:
            return capture_failure("create_inscription", e, user_id=user_id)

    async def _create(self, user_id: str, email: str, device: DeviceContext) -> dict:
        if not device.has_user_agent:
            raise ValidationError(ErrorCode.MISSING_UA, "Missing user-agent")
        if not is_valid_object_id(user_id):
            raise ValidationError(ErrorCode.INVALID_USER_ID)
        if not is_valid_email(email):
            raise ValidationError(ErrorCode.INVALID_USER_EMAIL)

        active = await self.store.count(
            Collection.INSCRIPTIONS,
            {"user_id": user_id, "status": InscriptionStatus.SUCCESS},
        )
        if active:
            raise ConflictError(
                ErrorCode.ACTIVE_INSCRIPTION_EXISTS,
                "User already has an active inscription",
            )

        inscription_id = await self.store.insert_one(Collection.INSCRIPTIONS, {
            "user_id": user_id,
            "status": InscriptionStatus.PENDING,
            "created_at": datetime.now(timezone.utc),
            "client": build_client_metadata(device),
        })
        callback_url = self.settings.callback_url(
            f"{FINISH_PATH}/{self.codec.encrypt(inscription_id)}",
        )

        result = await self.gateway.start_inscription(user_id, email, callback_url)
        url, token = require_start_fields(result)

        logger.info(
            f"Created pending inscription, token={mask_secret(token)}",
            extra={"inscription_id": inscription_id, "user_id": user_id},
        )
        return ok_envelope(url=url, token=token)

    # ─── finish ──────────────────────────────────────────────────

    async def finish_inscription(
        self, encrypted_id: object, gateway_token: object,
    ) -> str:
        """Complete the inscription from the gateway callback. Returns a redirect URL."""
        inscription = None
        inscription_id = ""
        try:
            inscription_id = self._decode_id(sanitize_text(encrypted_id))
            inscription = await self.store.find_one(
                Collection.INSCRIPTIONS,
                {"id": inscription_id, "status": InscriptionStatus.PENDING},
            )
            if not inscription:
                raise NotFoundError(ErrorCode.PENDING_INSCRIPTION_NOT_FOUND)
            await self._finish(inscription, sanitize_text(gateway_token))
            return with_query(
                self.settings.tbk_success_url, inscriptionId=inscription_id,
            )
        except Exception as e:
            log_failure(
                "finish_inscription", e, inscription_id=inscription_id or None,
            )
            if inscription:
                await self._mark_failed(inscription)
            return with_query(
                self.settings.tbk_failed_url,
                inscriptionId=inscription_id,
            )

    def _decode_id(self, encrypted_id: str) -> str:
        inscription_id = self.codec.decrypt(encrypted_id)
        if not is_valid_uuid(inscription_id):
            raise ValidationError(ErrorCode.INVALID_HASH, "Decoded id has invalid shape")
        return inscription_id

    async def _finish(self, inscription: dict, gateway_token: str) -> None:
        if not gateway_token:
            raise ValidationError(ErrorCode.INVALID_TBK_TOKEN)

        result = await self.gateway.finish_inscription(gateway_token)
        logger.info(
            f"Gateway finish answered response_code={result.response_code}",
            extra={"inscription_id": inscription["id"]},
        )
        result = require_finish_fields(result)

        try:
            await transition(self.store, inscription, InscriptionStatus.SUCCESS, {
                "token": result.tbk_user,
                "auth_code": result.authorization_code,
                "card_type": result.card_type,
                "card_digits": last_four(result.card_number),
            })
        except ConflictError as e:
            if e.code != ErrorCode.DUPLICATE_RECORD:
                raise
            # lost the race against another inscription of the same user
            raise ConflictError(
                ErrorCode.ACTIVE_INSCRIPTION_EXISTS,
                "User already has an active inscription",
            ) from e
        logger.info(
            "Inscription finished successfully",
            extra={"inscription_id": inscription["id"], "user_id": inscription["user_id"]},
        )

    async def _mark_failed(self, inscription: dict) -> None:
        """Mandatory side effect of a failed finish; logged, never raised."""
        try:
            await transition(self.store, inscription, InscriptionStatus.FAILED)
        except Exception as e:
            log_failure(
                "finish_inscription(mark_failed)", e, inscription_id=inscription["id"],
            )

    # ─── delete ──────────────────────────────────────────────────

    async def delete_inscription(self, inscription_id: object, user_id: object) -> dict:
        """Remove an active inscription at the gateway and tombstone it locally."""
        inscription_id = sanitize_text(inscription_id)
        user_id = sanitize_text(user_id)
        try:
            return await self._delete(inscription_id, user_id)
        except Exception as e:
            return capture_failure(
                "delete_inscription", e,
                inscription_id=inscription_id, user_id=user_id,
            )

    async def _delete(self, inscription_id: str, user_id: str) -> dict:
        if not is_valid_uuid(inscription_id):
            raise ValidationError(ErrorCode.INVALID_INSCRIPTION_ID)
        if not is_valid_object_id(user_id):
            raise ValidationError(ErrorCode.INVALID_USER_ID)

        inscription = await self.store.find_one(Collection.INSCRIPTIONS, {
            "id": inscription_id,
            "user_id": user_id,
            "status": InscriptionStatus.SUCCESS,
        })
        if not inscription:
            raise NotFoundError(ErrorCode.ACTIVE_INSCRIPTION_NOT_FOUND)
        token = inscription.get("token")
        if not token:
            raise GatewayError(
                "Active inscription has no gateway token",
                ErrorCode.MISSING_INSCRIPTION_TOKEN,
            )

        logger.info(
            f"Deleting inscription, token={mask_secret(token)}",
            extra={"inscription_id": inscription_id, "user_id": user_id},
        )
        message = None
        try:
            await self.gateway.delete_inscription(token, user_id)
        except Exception as e:
            if not is_gateway_not_found(e):
                raise
            message = INSCRIPTION_GONE_ADVISORY
            logger.warning(
                "Inscription already absent at the gateway, removing locally",
                extra={"inscription_id": inscription_id},
            )

        await transition(self.store, inscription, InscriptionStatus.REMOVED, {
            "removed_at": datetime.now(timezone.utc),
        })
        return ok_envelope(message=message)
