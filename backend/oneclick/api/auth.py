"""Bearer Auth — shared API key check for the owning application's calls.

Invariants:
    - Missing, malformed or wrong bearer token -> 401
    - An unset API_KEY rejects every protected call (fail closed)
    - Constant-time comparison (secrets.compare_digest)
"""

import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from oneclick.config import Settings, get_settings

_bearer = HTTPBearer(auto_error=False)


async def require_api_key(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(get_settings),
) -> None:
    expected = settings.api_key
    supplied = credentials.credentials if credentials else ""
    if not expected or not secrets.compare_digest(
        supplied.encode("utf-8"), expected.encode("utf-8"),
    ):
        raise HTTPException(
            status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
