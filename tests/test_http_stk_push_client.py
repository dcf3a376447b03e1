import json

import httpx
import pytest

from src.checkout.controller import CheckoutController
from src.checkout.errors import TransportError
from src.checkout.state import SuccessState
from src.integrations.clients.real_http.payments import HttpStkPushClient
from src.integrations.contracts.payments import StkPushRequest

BASE_URL = "https://payments.example.test/api"


def make_client(handler, base_url=BASE_URL):
    return HttpStkPushClient(base_url=base_url, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_initiate_posts_json_body():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ResponseCode": "0", "CheckoutRequestID": "abc123"})

    client = make_client(handler, base_url=BASE_URL + "/")
    reply = await client.initiate_stk_push(StkPushRequest(phone="254712345678", amount=100))

    assert seen == {
        "method": "POST",
        "url": f"{BASE_URL}/stkpush/",
        "body": {"phone": "254712345678", "amount": 100},
    }
    assert reply.ok
    assert reply.data["CheckoutRequestID"] == "abc123"


@pytest.mark.asyncio
async def test_check_status_gets_id_path():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        return httpx.Response(200, json={"status": "Pending"})

    reply = await make_client(handler).check_status("ws_CO_123")

    assert seen == {"method": "GET", "path": "/api/check-status/ws_CO_123/"}
    assert reply.data == {"status": "Pending"}


@pytest.mark.asyncio
async def test_non_ok_status_is_returned_not_raised():
    client = make_client(lambda request: httpx.Response(400, json={"error": "Invalid phone number."}))

    reply = await client.initiate_stk_push(StkPushRequest(phone="254712345678", amount=100))

    assert reply.ok is False
    assert reply.status_code == 400
    assert reply.data == {"error": "Invalid phone number."}


@pytest.mark.asyncio
async def test_connection_error_becomes_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as excinfo:
        await make_client(handler).check_status("abc123")
    assert excinfo.value.message == "Network error."


@pytest.mark.asyncio
async def test_unreadable_body_becomes_transport_error():
    client = make_client(lambda request: httpx.Response(502, text="<html>Bad Gateway</html>"))

    with pytest.raises(TransportError):
        await client.initiate_stk_push(StkPushRequest(phone="254712345678", amount=100))


@pytest.mark.asyncio
async def test_missing_base_url_is_a_configuration_error():
    client = HttpStkPushClient(base_url="")

    with pytest.raises(ValueError, match="CHECKOUT_API_BASE_URL"):
        await client.check_status("abc123")


def test_base_url_falls_back_to_environment(monkeypatch):
    monkeypatch.setenv("CHECKOUT_API_BASE_URL", "http://localhost:8000/")
    assert HttpStkPushClient().base_url == "http://localhost:8000"


@pytest.mark.asyncio
async def test_controller_against_http_backend(fast_sleep):
    statuses = iter(["Pending", "Pending", "Success"])

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/stkpush/"):
            return httpx.Response(200, json={"ResponseCode": "0", "CheckoutRequestID": "abc123"})
        return httpx.Response(200, json={"status": next(statuses)})

    navigated = []
    controller = CheckoutController(make_client(handler), sleep=fast_sleep, navigate=lambda: navigated.append(True))
    controller.set_phone_number("712345678")
    controller.set_amount("250")

    await controller.submit()
    state = await controller.wait_for_outcome()

    assert state == SuccessState()
    assert navigated == [True]
