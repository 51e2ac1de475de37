"""Pytest configuration and fixtures for API integration tests."""

from typing import AsyncGenerator

import httpx
import pytest_asyncio

from api.dependencies import (
    get_kitchen_service,
    get_order_service,
    get_payment_service,
    get_reporting_service,
    reset_dependencies,
)
from api.main import app


@pytest_asyncio.fixture
async def client(
    order_service,
    kitchen_service,
    payment_service,
    reporting_service,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client bound to the app, with services wired to the test database."""
    app.dependency_overrides[get_order_service] = lambda: order_service
    app.dependency_overrides[get_kitchen_service] = lambda: kitchen_service
    app.dependency_overrides[get_payment_service] = lambda: payment_service
    app.dependency_overrides[get_reporting_service] = lambda: reporting_service

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client

    # Cleanup
    app.dependency_overrides.clear()
    reset_dependencies()


@pytest_asyncio.fixture
async def store_id(client) -> str:
    response = await client.post(
        "/api/v1/stores", json={"name": "Harbour Grill", "operating_hours": 12}
    )
    assert response.status_code == 201, response.text
    return response.json()["store_id"]
