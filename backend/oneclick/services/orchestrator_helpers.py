"""Orchestrator Helpers — failure capture, state transitions and redirect building.

Invariants:
    - capture_failure never raises: every exception becomes an error envelope
    - Caller faults (validation/decode/not-found) log at WARNING, everything else at ERROR
    - transition() refuses moves outside INSCRIPTION_TRANSITIONS and only updates a
      row still in the status it was read with (no lost updates)
"""

import logging
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from oneclick.core.domain_types import Collection, InscriptionStatus, can_transition
from oneclick.core.envelope import error_envelope
from oneclick.core.errors import (
    ConflictError, DecodeError, ErrorCode, NotFoundError, OneclickError,
    ValidationError,
)
from oneclick.core.repository_protocols import DocumentStore

logger = logging.getLogger(__name__)

_CALLER_FAULTS = (ValidationError, DecodeError, NotFoundError)


def log_failure(operation: str, exc: BaseException, **extra: object) -> None:
    """Log a classified (or unclassified) failure of an orchestrator operation."""
    if isinstance(exc, OneclickError):
        level = logging.WARNING if isinstance(exc, _CALLER_FAULTS) else logging.ERROR
        logger.log(
            level, f"{operation} failed: {exc.code.value}: {exc.message}",
            extra={"error_code": exc.code.value, **extra},
        )
    else:
        logger.error(
            f"{operation} failed unexpectedly: {exc}",
            exc_info=exc, extra={"error_code": ErrorCode.INTERNAL_ERROR.value, **extra},
        )


def capture_failure(operation: str, exc: BaseException, **extra: object) -> dict:
    log_failure(operation, exc, **extra)
    return error_envelope(exc)


async def transition(
    store: DocumentStore,
    inscription: dict,
    target: InscriptionStatus,
    patch: dict | None = None,
) -> None:
    """Move an inscription to target status, guarded by its current status."""
    current = inscription["status"]
    if not can_transition(current, target):
        raise ConflictError(
            ErrorCode.INVALID_STATUS_TRANSITION,
            f"Inscription cannot move from {current} to {target.value}",
        )
    matched = await store.update_one(
        Collection.INSCRIPTIONS,
        {"id": inscription["id"], "status": current},
        {**(patch or {}), "status": target},
    )
    if not matched:
        raise ConflictError(
            ErrorCode.INVALID_STATUS_TRANSITION,
            f"Inscription {inscription['id']} left status {current} concurrently",
        )


def with_query(url: str, **params: str) -> str:
    """Append query parameters, preserving any already present."""
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))
