"""Transaction Orchestrator — charge and refund against an active inscription.

Invariants:
    - buy_order is the idempotency key: a charge for a recorded buy_order is rejected
      before any gateway call (count() fast path, unique index authoritative)
    - A Transaction row is written only after the gateway authorized the charge
    - Refund requires a recorded charge and never mutates it
    - Refund classification: REVERSED -> ok, NULLIFIED / HTTP 422 -> ok + advisory,
      anything else -> error
    - charge/refund never raise: every outcome is a tagged envelope

Design Decisions:
    - Child buy order equals parent buy order (one detail per charge)
    - Missing commerce code falls back to the configured default child store
"""

import logging
from datetime import datetime, timezone

from oneclick.config import Settings
from oneclick.core.classify_gateway import (
    classify_refund,
    classify_refund_failure,
    require_authorized_detail,
)
from oneclick.core.domain_types import Collection, InscriptionStatus, RefundOutcome
from oneclick.core.envelope import ok_envelope
from oneclick.core.errors import (
    ConflictError, ErrorCode, GatewayError, GatewayRequestError, NotFoundError,
    ValidationError,
)
from oneclick.core.repository_protocols import DocumentStore, GatewayClient
from oneclick.core.validation import (
    is_valid_object_id, is_valid_uuid, last_four, parse_int, sanitize_text,
)
from oneclick.schemas.gateway import TransactionDetail
from oneclick.services.orchestrator_helpers import capture_failure

logger = logging.getLogger(__name__)


class TransactionOrchestrator:
    """Owns the charge/refund flow."""

    def __init__(
        self, store: DocumentStore, gateway: GatewayClient, settings: Settings,
    ):
        self.store = store
        self.gateway = gateway
        self.settings = settings

    def _commerce_code(self, commerce_code: object) -> str:
        return sanitize_text(commerce_code) or self.settings.tbk_default_child_commerce_code

    # ─── charge ──────────────────────────────────────────────────

    async def charge(
        self,
        user_id: object,
        buy_order: object,
        amount: object,
        inscription_id: object = None,
        commerce_code: object = None,
        shares: object = 1,
    ) -> dict:
        """Authorize a charge on the user's active inscription and record it."""
        user_id = sanitize_text(user_id)
        buy_order = sanitize_text(buy_order)
        try:
            return await self._charge(
                user_id=user_id,
                buy_order=buy_order,
                amount=parse_int(amount),
                inscription_id=sanitize_text(inscription_id),
                commerce_code=self._commerce_code(commerce_code),
                shares=parse_int(shares, fallback=1),
            )
        except Exception as e:
            return capture_failure(
                "charge", e, user_id=user_id, buy_order=buy_order,
            )

    async def _charge(
        self,
        user_id: str,
        buy_order: str,
        amount: int,
        inscription_id: str,
        commerce_code: str,
        shares: int,
    ) -> dict:
        if not is_valid_object_id(user_id):
            raise ValidationError(ErrorCode.INVALID_USER_ID)
        if not buy_order:
            raise ValidationError(ErrorCode.INVALID_BUY_ORDER)
        if amount <= 0:
            raise ValidationError(ErrorCode.INVALID_AMOUNT)
        if shares < 1:
            raise ValidationError(ErrorCode.INVALID_SHARES)
        if inscription_id and not is_valid_uuid(inscription_id):
            raise ValidationError(ErrorCode.INVALID_INSCRIPTION_ID)

        inscription = await self._resolve_inscription(user_id, inscription_id)

        if await self.store.count(Collection.TRANSACTIONS, {"buy_order": buy_order}):
            raise ConflictError(
                ErrorCode.BUY_ORDER_ALREADY_PROCESSED,
                f"Buy order {buy_order} already processed",
            )

        logger.info(
            f"Authorizing charge, cc={commerce_code} amount={amount} shares={shares}",
            extra={"buy_order": buy_order, "inscription_id": inscription["id"]},
        )
        result = await self.gateway.authorize(
            inscription["user_id"],
            inscription["token"],
            buy_order,
            [TransactionDetail(
                amount=amount,
                commerce_code=commerce_code,
                buy_order=buy_order,
                installments_number=shares,
            )],
        )
        detail = require_authorized_detail(result)
        logger.info("Charge authorized", extra={"buy_order": buy_order})

        card_number = result.card_detail.card_number if result.card_detail else None
        try:
            transaction_id = await self.store.insert_one(Collection.TRANSACTIONS, {
                "buy_order": buy_order,
                "commerce_code": commerce_code,
                "inscription_id": inscription["id"],
                "user_id": inscription["user_id"],
                "card_digits": last_four(card_number),
                "auth_code": detail.authorization_code,
                "response_code": detail.response_code,
                "payment_type": detail.payment_type_code,
                "status": detail.status,
                "shares": parse_int(detail.installments_number, shares) or shares,
                "amount": amount,
                "created_at": datetime.now(timezone.utc),
            })
        except ConflictError as e:
            # authorized at the gateway but a concurrent charge recorded the buy order first
            logger.critical(
                "Authorized charge lost the buy_order race; gateway holds a duplicate",
                extra={"buy_order": buy_order, "error_code": e.code.value},
            )
            raise ConflictError(
                ErrorCode.BUY_ORDER_ALREADY_PROCESSED,
                f"Buy order {buy_order} already processed",
            ) from e

        trx = await self.store.find_one(Collection.TRANSACTIONS, {"id": transaction_id})
        return ok_envelope(trx=trx)

    async def _resolve_inscription(self, user_id: str, inscription_id: str) -> dict:
        predicate: dict = {"user_id": user_id, "status": InscriptionStatus.SUCCESS}
        if inscription_id:
            predicate["id"] = inscription_id
        inscription = await self.store.find_one(Collection.INSCRIPTIONS, predicate)
        if not inscription:
            raise NotFoundError(ErrorCode.ACTIVE_INSCRIPTION_NOT_FOUND)
        if not inscription.get("token"):
            raise GatewayError(
                "Active inscription has no gateway token",
                ErrorCode.MISSING_INSCRIPTION_TOKEN,
            )
        return inscription

    # ─── refund ──────────────────────────────────────────────────

    async def refund(
        self,
        buy_order: object,
        amount: object,
        user_id: object = None,
        commerce_code: object = None,
        auth_code: object = None,
    ) -> dict:
        """Reverse (fully or partially) a recorded charge at the gateway."""
        buy_order = sanitize_text(buy_order)
        try:
            return await self._refund(
                buy_order=buy_order,
                amount=parse_int(amount),
                user_id=sanitize_text(user_id),
                commerce_code=self._commerce_code(commerce_code),
                auth_code=sanitize_text(auth_code),
            )
        except Exception as e:
            return capture_failure("refund", e, buy_order=buy_order)

    async def _refund(
        self,
        buy_order: str,
        amount: int,
        user_id: str,
        commerce_code: str,
        auth_code: str,
    ) -> dict:
        if not buy_order:
            raise ValidationError(ErrorCode.INVALID_BUY_ORDER)
        if amount <= 0:
            raise ValidationError(ErrorCode.INVALID_AMOUNT)
        if user_id and not is_valid_object_id(user_id):
            raise ValidationError(ErrorCode.INVALID_USER_ID)

        predicate: dict = {"buy_order": buy_order}
        if user_id:
            predicate["user_id"] = user_id
        if auth_code:
            predicate["auth_code"] = auth_code
        if not await self.store.count(Collection.TRANSACTIONS, predicate):
            raise NotFoundError(
                ErrorCode.TRANSACTION_NOT_FOUND,
                f"No recorded charge for buy order {buy_order}",
            )

        logger.info(f"Refunding amount={amount}", extra={"buy_order": buy_order})
        try:
            result = await self.gateway.refund(buy_order, commerce_code, buy_order, amount)
        except GatewayRequestError as e:
            outcome, message = classify_refund_failure(e)
            if outcome == RefundOutcome.FAILED:
                raise
            logger.warning(message, extra={"buy_order": buy_order})
            return ok_envelope(message=message)

        outcome, message = classify_refund(result)
        if outcome == RefundOutcome.FAILED:
            raise GatewayError(f"Unexpected refund type {result.type or 'NAN'}")

        logger.info(
            f"Refund classified as {outcome.value}", extra={"buy_order": buy_order},
        )
        return ok_envelope(message=message, response=result.model_dump())
