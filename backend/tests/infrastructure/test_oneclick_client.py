"""Oneclick Mall Client — HTTP contract checked with httpx.MockTransport.

Tests:
    - Endpoints, methods, headers and JSON bodies match the Oneclick Mall REST API
    - Non-2xx answers raise GatewayRequestError with the HTTP status
    - Transport failures raise GatewayRequestError without status
    - Mode selection picks host and credentials from settings
"""

import json

import httpx
import pytest

from oneclick.core.domain_types import GatewayMode
from oneclick.core.errors import GatewayError, GatewayRequestError
from oneclick.infrastructure.oneclick_client import (
    API_PATH,
    INTEGRATION_API_KEY,
    INTEGRATION_COMMERCE_CODE,
    OneclickMallClient,
)
from oneclick.schemas.gateway import TransactionDetail


class _Recorder:
    """MockTransport handler returning one scripted response per call."""

    def __init__(self, status_code: int = 200, body: object = None):
        self.status_code = status_code
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, Exception):
            raise self.body
        if self.body is None:
            return httpx.Response(self.status_code)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> dict:
        return json.loads(self.last.content)


def _client(recorder: _Recorder, **kwargs) -> OneclickMallClient:
    return OneclickMallClient(transport=httpx.MockTransport(recorder), **kwargs)


async def test_start_inscription_request_shape():
    recorder = _Recorder(body={"token": "tok", "url_webpay": "https://webpay/x"})
    client = _client(recorder)

    result = await client.start_inscription("u1", "a@b.com", "https://cb/")

    assert result.token == "tok"
    assert recorder.last.method == "POST"
    assert recorder.last.url.host == "webpay3gint.transbank.cl"
    assert recorder.last.url.path == f"{API_PATH}/inscriptions"
    assert recorder.last.headers["Tbk-Api-Key-Id"] == INTEGRATION_COMMERCE_CODE
    assert recorder.last.headers["Tbk-Api-Key-Secret"] == INTEGRATION_API_KEY
    assert recorder.last_json() == {
        "username": "u1", "email": "a@b.com", "response_url": "https://cb/",
    }
    await client.close()


async def test_finish_inscription_puts_token_in_path():
    recorder = _Recorder(body={
        "response_code": 0, "tbk_user": "tbk-u", "authorization_code": "1213",
        "card_type": "Visa", "card_number": "XXXXXXXXXXXX6623",
    })
    client = _client(recorder)

    result = await client.finish_inscription("tok-1")

    assert recorder.last.method == "PUT"
    assert recorder.last.url.path == f"{API_PATH}/inscriptions/tok-1"
    assert result.tbk_user == "tbk-u"
    assert result.card_number == "XXXXXXXXXXXX6623"


async def test_delete_inscription_no_content():
    recorder = _Recorder(status_code=204)
    client = _client(recorder)

    assert await client.delete_inscription("tbk-u", "u1") is None
    assert recorder.last.method == "DELETE"
    assert recorder.last_json() == {"tbk_user": "tbk-u", "username": "u1"}


async def test_delete_inscription_not_found_carries_status():
    recorder = _Recorder(status_code=404, body={"error_message": "Inscription not found"})
    client = _client(recorder)

    with pytest.raises(GatewayRequestError) as exc_info:
        await client.delete_inscription("tbk-u", "u1")

    assert exc_info.value.status_code == 404
    assert "Inscription not found" in exc_info.value.message


async def test_authorize_sends_details():
    recorder = _Recorder(body={
        "buy_order": "ORD-1",
        "card_detail": {"card_number": "6623"},
        "details": [{"response_code": 0, "authorization_code": "1213", "amount": 1500}],
    })
    client = _client(recorder)

    result = await client.authorize("u1", "tbk-u", "ORD-1", [TransactionDetail(
        amount=1500, commerce_code="597055555542", buy_order="ORD-1",
    )])

    assert recorder.last.url.path == f"{API_PATH}/transactions"
    assert recorder.last_json() == {
        "username": "u1",
        "tbk_user": "tbk-u",
        "buy_order": "ORD-1",
        "details": [{
            "amount": 1500, "commerce_code": "597055555542",
            "buy_order": "ORD-1", "installments_number": 1,
        }],
    }
    assert result.details[0].authorization_code == "1213"


async def test_refund_request_shape():
    recorder = _Recorder(body={"type": "REVERSED"})
    client = _client(recorder)

    result = await client.refund("ORD-1", "597055555542", "ORD-1", 1500)

    assert recorder.last.url.path == f"{API_PATH}/transactions/ORD-1/refunds"
    assert recorder.last_json() == {
        "commerce_code": "597055555542", "detail_buy_order": "ORD-1", "amount": 1500,
    }
    assert result.type == "REVERSED"


async def test_refund_422_carries_status():
    recorder = _Recorder(status_code=422, body={"error_message": "already reversed"})
    client = _client(recorder)

    with pytest.raises(GatewayRequestError) as exc_info:
        await client.refund("ORD-1", "597055555542", "ORD-1", 1500)

    assert exc_info.value.status_code == 422


async def test_transport_failure_has_no_status():
    recorder = _Recorder(body=httpx.ConnectError("refused"))
    client = _client(recorder)

    with pytest.raises(GatewayRequestError) as exc_info:
        await client.finish_inscription("tok")

    assert exc_info.value.status_code is None
    assert len(recorder.requests) == 1


async def test_unexpected_body_shape_is_gateway_error():
    recorder = _Recorder(body={"details": "not-a-list"})
    client = _client(recorder)

    with pytest.raises(GatewayError):
        await client.authorize("u1", "tbk-u", "ORD-1", [])


def test_from_settings_integration_mode(settings):
    client = OneclickMallClient.from_settings(settings)
    assert client.mode == GatewayMode.INTEGRATION
    assert client.client.headers["Tbk-Api-Key-Id"] == INTEGRATION_COMMERCE_CODE


def test_from_settings_production_mode(settings):
    prod = settings.model_copy(update={"tbk_code": "597000000001", "tbk_key": "secret"})

    client = OneclickMallClient.from_settings(prod)

    assert client.mode == GatewayMode.PRODUCTION
    assert client.client.base_url.host == "webpay3g.transbank.cl"
    assert client.client.headers["Tbk-Api-Key-Id"] == "597000000001"
