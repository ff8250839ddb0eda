"""Service test fixtures — orchestrators wired to the SQLite store and a FakeGateway.

Invariants:
    - Each test gets fresh orchestrators around the per-test store
    - pending/active inscriptions are seeded straight through the store
"""

import pytest

from oneclick.core.domain_types import InscriptionStatus
from oneclick.core.identifier_codec import IdentifierCodec
from oneclick.services.inscription_orchestrator import InscriptionOrchestrator
from oneclick.services.transaction_orchestrator import TransactionOrchestrator
from tests.services.fake_gateway import FakeGateway
from tests.services.seed import CARD_TOKEN, insert_inscription


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def codec(settings):
    return IdentifierCodec(settings.encryption_key)


@pytest.fixture
def inscriptions(store, gateway, codec, settings):
    return InscriptionOrchestrator(store, gateway, codec, settings)


@pytest.fixture
def transactions(store, gateway, settings):
    return TransactionOrchestrator(store, gateway, settings)


@pytest.fixture
async def pending_inscription(store):
    return await insert_inscription(store, InscriptionStatus.PENDING)


@pytest.fixture
async def active_inscription(store):
    return await insert_inscription(store, InscriptionStatus.SUCCESS, token=CARD_TOKEN)
