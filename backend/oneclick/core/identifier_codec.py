"""Identifier Codec — opaque, authenticated encoding of ids embedded in callback URLs.

Invariants:
    - encrypt() uses a fresh random IV per call: same plaintext -> different tokens
    - decrypt() either returns the exact plaintext or raises DecodeError
    - Tokens are URL-safe (usable as a single path segment)

Design Decisions:
    - Fernet (AES-CBC + HMAC-SHA256) over bare AES-CBC: tampering is detected by
      the MAC instead of relying on padding errors
    - Non-Fernet secrets are stretched with SHA-256 so a plain passphrase works
      as ENCRYPTION_KEY
    - Empty secret -> random per-process key: callbacks only valid until restart
"""

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from oneclick.core.errors import DecodeError


def _build_fernet(secret: str) -> Fernet:
    if not secret:
        return Fernet(Fernet.generate_key())
    try:
        return Fernet(secret)
    except ValueError:
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        return Fernet(base64.urlsafe_b64encode(digest))


class IdentifierCodec:
    """Symmetric encode/decode of identifiers exposed to the outside world."""

    def __init__(self, secret: str = "", ttl_seconds: int | None = None):
        self._fernet = _build_fernet(secret)
        self._ttl_seconds = ttl_seconds

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, token: str) -> str:
        """Decode token back to plaintext. DecodeError on any malformed/tampered input."""
        if not token:
            raise DecodeError("Empty identifier token")
        try:
            if self._ttl_seconds is not None:
                raw = self._fernet.decrypt(token, ttl=self._ttl_seconds)
            else:
                raw = self._fernet.decrypt(token)
            return raw.decode("utf-8")
        except (InvalidToken, ValueError, TypeError) as e:
            raise DecodeError(
                f"Identifier token rejected ({type(e).__name__})",
            ) from e
