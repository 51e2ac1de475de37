"""
Tests for the aiohttp settlement gateway against a local provider stub.
"""
import pytest
from aiohttp import web
from aiohttp import test_utils

from core.infrastructure.adapters.settlement.http_settlement_gateway import HttpSettlementGateway

from factories import build_payment


async def _start_provider(handler):
    app = web.Application()
    app.router.add_post("/settle", handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    return server


@pytest.mark.asyncio
async def test_approved_response_settles():
    received = {}

    async def handler(request):
        received.update(await request.json())
        return web.json_response({"approved": True})

    server = await _start_provider(handler)
    try:
        gateway = HttpSettlementGateway(str(server.make_url("/settle")), timeout_seconds=2)
        payment = build_payment()

        assert await gateway.settle(payment) is True
    finally:
        await server.close()

    assert received["payment_id"] == payment.payment_id
    assert received["amount"] == str(payment.amount.amount)
    assert received["method"] == payment.method.value


@pytest.mark.asyncio
async def test_declined_and_error_responses_do_not_settle():
    responses = [
        web.json_response({"approved": False}),
        web.json_response({"error": "provider down"}, status=503),
    ]

    async def handler(request):
        return responses.pop(0)

    server = await _start_provider(handler)
    try:
        gateway = HttpSettlementGateway(str(server.make_url("/settle")), timeout_seconds=2)

        assert await gateway.settle(build_payment()) is False
        assert await gateway.settle(build_payment()) is False
    finally:
        await server.close()


def test_url_is_required():
    with pytest.raises(ValueError):
        HttpSettlementGateway("")
