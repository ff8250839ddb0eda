"""Request Schemas — lenient Pydantic bodies for the five inscription endpoints.

Invariants:
    - Wire format is camelCase (userId, buyOrder...); snake_case accepted too
    - Every field is optional with an empty default: shape checks belong to the
      orchestrators so a bad field yields a tagged ValidationError envelope,
      not a framework 400
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _LenientBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class InscriptionCreateBody(_LenientBody):
    user_id: Any = Field("", alias="userId")
    email: Any = ""


class InscriptionDeleteBody(_LenientBody):
    inscription_id: Any = Field("", alias="inscriptionId")
    user_id: Any = Field("", alias="userId")


class ChargeBody(_LenientBody):
    inscription_id: Any = Field("", alias="inscriptionId")
    user_id: Any = Field("", alias="userId")
    commerce_code: Any = Field("", alias="commerceCode")
    buy_order: Any = Field("", alias="buyOrder")
    amount: Any = 0
    shares: Any = 1


class RefundBody(_LenientBody):
    user_id: Any = Field("", alias="userId")
    commerce_code: Any = Field("", alias="commerceCode")
    buy_order: Any = Field("", alias="buyOrder")
    auth_code: Any = Field("", alias="authCode")
    amount: Any = 0
