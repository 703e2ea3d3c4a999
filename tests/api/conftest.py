"""Shared fixtures for API tests."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from stockroom.api.dependencies import (
    get_boms,
    get_change_status_use_case,
    get_ledger,
    get_materials,
    get_record_movement_use_case,
    get_register_material_use_case,
    get_work_orders,
)
from stockroom.api.main import app
from stockroom.application.use_cases import (
    ChangeWorkOrderStatusUseCase,
    RecordMovementUseCase,
    RegisterMaterialUseCase,
)


@pytest.fixture
def mock_registry() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def mock_ledger() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def mock_boms() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def mock_work_orders() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
async def client(
    mock_registry, mock_ledger, mock_boms, mock_work_orders
) -> AsyncGenerator[AsyncClient, None]:
    """
    Client with every service replaced by a mock.

    Use cases are real and run on top of the mocked services.
    """
    app.dependency_overrides[get_materials] = lambda: mock_registry
    app.dependency_overrides[get_ledger] = lambda: mock_ledger
    app.dependency_overrides[get_boms] = lambda: mock_boms
    app.dependency_overrides[get_work_orders] = lambda: mock_work_orders
    app.dependency_overrides[get_register_material_use_case] = (
        lambda: RegisterMaterialUseCase(registry=mock_registry)
    )
    app.dependency_overrides[get_record_movement_use_case] = (
        lambda: RecordMovementUseCase(ledger=mock_ledger)
    )
    app.dependency_overrides[get_change_status_use_case] = (
        lambda: ChangeWorkOrderStatusUseCase(service=mock_work_orders)
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
