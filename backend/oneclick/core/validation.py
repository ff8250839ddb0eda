"""Input Validation — sanitizing and shape checks shared by both orchestrators.

Invariants:
    - All functions are pure: same input -> same output, no IO
    - sanitize_text never raises: None and non-str inputs become strings
    - parse_int never raises: unparseable input returns the given fallback

Design Decisions:
    - ObjectId shape (24 hex chars) for user ids: ids are issued by the owning
      application's document store, not by this service
    - Email check is deliberately loose (something@something.tld); delivery is the
      gateway's concern
"""

import html
import math
import re
from uuid import UUID

_OBJECT_ID_RE = re.compile(r"^[a-f\d]{24}$", re.IGNORECASE)
_EMAIL_RE = re.compile(r"\S+@\S+\.\S+")


def sanitize_text(value: object) -> str:
    """Strip and HTML-escape a free-text input."""
    if value is None:
        return ""
    return html.escape(str(value), quote=False).strip()


def is_valid_object_id(value: object) -> bool:
    return isinstance(value, str) and bool(_OBJECT_ID_RE.match(value))


def is_valid_uuid(value: object) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def is_valid_email(value: object) -> bool:
    return isinstance(value, str) and bool(_EMAIL_RE.search(value))


def parse_int(value: object, fallback: int = 0) -> int:
    """Lenient integer parse: 1500, "1500", "1500.9" and 1500.9 all give 1500.

    NaN and infinities give the fallback.
    """
    if isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else fallback
    if isinstance(value, str):
        match = re.match(r"^\s*([+-]?\d+)", value)
        if match:
            return int(match.group(1))
    return fallback


def last_four(card_number: str | None) -> str:
    """Keep only the trailing 4 characters of a (masked) card number."""
    if not card_number:
        return ""
    return card_number[-4:]
