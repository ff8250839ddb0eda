"""Boundary Protocols — contracts between the orchestrators and their collaborators.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Store and gateway accessed only through these Protocol types
    - Implementations provided by the shell via constructor injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: every boundary method is an IO suspension point
    - Predicates are plain equality dicts ({field: value}); the Store decides how
      to translate them
"""

from typing import Protocol

from oneclick.core.domain_types import Collection
from oneclick.schemas.gateway import (
    AuthorizationResult,
    FinishInscriptionResult,
    RefundResult,
    StartInscriptionResult,
    TransactionDetail,
)


class DocumentStore(Protocol):
    """Contract for document persistence — implemented by shell."""
    async def count(self, collection: Collection, predicate: dict) -> int: ...
    async def find_one(
        self, collection: Collection, predicate: dict,
    ) -> dict | None: ...
    async def insert_one(self, collection: Collection, document: dict) -> str: ...
    async def update_one(
        self, collection: Collection, predicate: dict, patch: dict,
    ) -> int: ...


class GatewayClient(Protocol):
    """Contract for the one-click payment gateway — implemented by shell.

    Non-2xx answers raise GatewayRequestError carrying the HTTP status.
    """
    async def start_inscription(
        self, user_id: str, email: str, callback_url: str,
    ) -> StartInscriptionResult: ...
    async def finish_inscription(self, token: str) -> FinishInscriptionResult: ...
    async def delete_inscription(self, token: str, user_id: str) -> None: ...
    async def authorize(
        self,
        user_id: str,
        token: str,
        buy_order: str,
        details: list[TransactionDetail],
    ) -> AuthorizationResult: ...
    async def refund(
        self,
        buy_order: str,
        commerce_code: str,
        child_buy_order: str,
        amount: int,
    ) -> RefundResult: ...
