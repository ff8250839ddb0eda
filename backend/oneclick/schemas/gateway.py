"""Gateway Schemas — request details and response shapes of the Oneclick Mall REST API.

Invariants:
    - Response models never reject a payload: every field is optional and unknown
      fields are kept, so classification (core/classify_gateway.py) decides what
      "missing" means
    - TransactionDetail serializes to the exact JSON the authorize endpoint expects

Design Decisions:
    - Pydantic over raw dicts: attribute access + type coercion of numeric codes
      returned as strings by some gateway environments
"""

from pydantic import BaseModel, ConfigDict, Field


class _GatewayResponse(BaseModel):
    model_config = ConfigDict(extra="allow")


class TransactionDetail(BaseModel):
    """One child-store line of an authorization request."""
    amount: int
    commerce_code: str
    buy_order: str
    installments_number: int = Field(default=1, ge=1)


class StartInscriptionResult(_GatewayResponse):
    token: str | None = None
    url_webpay: str | None = None


class FinishInscriptionResult(_GatewayResponse):
    response_code: int | None = None
    tbk_user: str | None = None
    authorization_code: str | None = None
    card_type: str | None = None
    card_number: str | None = None


class CardDetail(_GatewayResponse):
    card_number: str | None = None


class AuthorizationDetail(_GatewayResponse):
    amount: int | None = None
    status: str | None = None
    authorization_code: str | None = None
    payment_type_code: str | None = None
    response_code: int | None = None
    installments_number: int | None = None
    commerce_code: str | None = None
    buy_order: str | None = None


class AuthorizationResult(_GatewayResponse):
    buy_order: str | None = None
    card_detail: CardDetail | None = None
    accounting_date: str | None = None
    transaction_date: str | None = None
    details: list[AuthorizationDetail] = Field(default_factory=list)


class RefundResult(_GatewayResponse):
    type: str | None = None
    authorization_code: str | None = None
    authorization_date: str | None = None
    nullified_amount: float | None = None
    balance: float | None = None
    response_code: int | None = None
