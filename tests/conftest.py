"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

import stockroom.infrastructure.storage.sqlite.connection as conn_module
from stockroom.application.services import reset_services
from stockroom.core.entities import BOMItem, Machine, Material
from stockroom.infrastructure.storage.sqlite import close_pool
from stockroom.infrastructure.storage.sqlite.migrations.migrator import initialize_database


@pytest.fixture(autouse=True)
def _reset_service_singletons() -> Generator[None, None, None]:
    """Service singletons must not leak between tests."""
    reset_services()
    yield
    reset_services()


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def initialized_db(
    temp_db_path: Path, mock_settings
) -> AsyncGenerator[Path, None]:
    """
    Migrated temporary database wired into the global connection pool.

    Stores created inside the test talk to this database.
    """
    results = await initialize_database(temp_db_path, create_backup_before=False)
    assert results and all(r.success for r in results)

    conn_module._pool = None
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield temp_db_path
        finally:
            await close_pool()


@pytest.fixture
def sample_material() -> Material:
    return Material(
        id="mat-1",
        code="BRG-6204",
        name="Ball bearing 6204",
        category="bearings",
        unit="piece",
        unit_price=2.5,
        current_stock=10.0,
        min_stock_level=2.0,
        max_stock_level=50.0,
    )


@pytest.fixture
def sample_machine() -> Machine:
    return Machine(id="mch-1", code="PMP-100", name="Pump 100", category="pumps")


@pytest.fixture
def sample_bom_item(sample_machine: Machine, sample_material: Material) -> BOMItem:
    return BOMItem(
        id="bom-1",
        machine_id=sample_machine.id,
        material_id=sample_material.id,
        material_code=sample_material.code,
        material_name=sample_material.name,
        quantity=2.0,
        unit=sample_material.unit,
        unit_price=sample_material.unit_price,
    )
