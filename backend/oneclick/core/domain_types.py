"""Domain Types — identifiers, statuses and collections shared by both orchestrators.

Invariants:
    - UserId is a 24-hex owner reference issued by the owning application
    - InscriptionId and TransactionId are UUID strings issued by the Store
    - Inscription transitions: pending -> success | failed, success -> removed
    - failed and removed are terminal (no outgoing transitions)

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and compare equal to stored column values
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)
InscriptionId = NewType("InscriptionId", str)
TransactionId = NewType("TransactionId", str)
BuyOrder = NewType("BuyOrder", str)


# ─── Enums ───────────────────────────────────────────────────────

class Collection(str, Enum):
    """Logical collections exposed by the Store."""
    INSCRIPTIONS = "inscriptions"
    TRANSACTIONS = "transactions"


class InscriptionStatus(str, Enum):
    """Inscription lifecycle states — maps to DB `status` column."""
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    REMOVED = "removed"


class GatewayMode(str, Enum):
    """Gateway environment selected from configured credentials."""
    INTEGRATION = "integration"
    PRODUCTION = "production"


class RefundOutcome(str, Enum):
    """Classification of a gateway refund answer."""
    REVERSED = "reversed"
    ADVISORY = "advisory"
    FAILED = "failed"


INSCRIPTION_TRANSITIONS: dict[InscriptionStatus, frozenset[InscriptionStatus]] = {
    InscriptionStatus.PENDING: frozenset({
        InscriptionStatus.SUCCESS, InscriptionStatus.FAILED,
    }),
    InscriptionStatus.SUCCESS: frozenset({InscriptionStatus.REMOVED}),
    InscriptionStatus.FAILED: frozenset(),
    InscriptionStatus.REMOVED: frozenset(),
}


def can_transition(
    current: InscriptionStatus | str, target: InscriptionStatus | str,
) -> bool:
    """True when the inscription state machine allows current -> target."""
    try:
        current_status = InscriptionStatus(current)
        target_status = InscriptionStatus(target)
    except ValueError:
        return False
    return target_status in INSCRIPTION_TRANSITIONS[current_status]
