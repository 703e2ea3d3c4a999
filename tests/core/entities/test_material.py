"""Unit tests for material domain entities."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from stockroom.core.entities.material import Material, StockStatus


class TestMaterial:
    """Tests for Material entity."""

    def test_create_with_defaults(self):
        """Material creates with default values."""
        m = Material(code="abc-1", name="Widget A")
        assert m.id is None
        assert m.category == "other"
        assert m.unit == "piece"
        assert m.unit_price == 0.0
        assert m.current_stock == 0.0
        assert m.location == "Depo"
        assert isinstance(m.created_at, datetime)
        assert m.created_at.tzinfo is not None

    def test_code_normalized_to_upper(self):
        m = Material(code="  brg-6204 ", name="Bearing")
        assert m.code == "BRG-6204"

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError):
            Material(code="X", name="X", current_stock=-1)

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            Material(code="X", name="X", unit_price=-0.01)

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            Material(code="X", name="")


class TestStockStatus:
    """Classification of stock against thresholds."""

    def test_at_minimum_is_critical(self):
        m = Material(code="X", name="X", current_stock=5, min_stock_level=5, max_stock_level=100)
        assert m.stock_status == StockStatus.CRITICAL

    def test_zero_stock_without_thresholds_is_critical(self):
        m = Material(code="X", name="X")
        assert m.stock_status == StockStatus.CRITICAL

    def test_under_thirty_percent_of_max_is_low(self):
        m = Material(code="X", name="X", current_stock=29, min_stock_level=5, max_stock_level=100)
        assert m.stock_status == StockStatus.LOW

    def test_thirty_percent_of_max_is_normal(self):
        m = Material(code="X", name="X", current_stock=30, min_stock_level=5, max_stock_level=100)
        assert m.stock_status == StockStatus.NORMAL

    def test_no_max_level_is_never_low(self):
        m = Material(code="X", name="X", current_stock=6, min_stock_level=5, max_stock_level=0)
        assert m.stock_status == StockStatus.NORMAL

    def test_stock_value(self):
        m = Material(code="X", name="X", current_stock=6, unit_price=2.5)
        assert m.stock_value == 15.0
