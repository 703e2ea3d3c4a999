"""Unit tests for ledger entities."""

import pytest
from pydantic import ValidationError

from stockroom.core.entities.inventory import LedgerBalance, MovementType, StockMovement


class TestStockMovement:
    def test_total_price_computed(self):
        mv = StockMovement(
            material_id="m1", movement_type=MovementType.OUT, quantity=4, unit_price=2.5
        )
        assert mv.total_price == 10.0

    def test_explicit_total_price_kept(self):
        mv = StockMovement(
            material_id="m1",
            movement_type=MovementType.IN,
            quantity=4,
            unit_price=2.5,
            total_price=9.0,
        )
        assert mv.total_price == 9.0

    def test_signed_quantity(self):
        in_mv = StockMovement(material_id="m1", movement_type=MovementType.IN, quantity=3)
        out_mv = StockMovement(material_id="m1", movement_type=MovementType.OUT, quantity=3)
        assert in_mv.signed_quantity == 3
        assert out_mv.signed_quantity == -3

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError):
            StockMovement(material_id="m1", movement_type=MovementType.IN, quantity=0)

    def test_movement_is_immutable(self):
        mv = StockMovement(material_id="m1", movement_type=MovementType.IN, quantity=1)
        with pytest.raises(ValidationError):
            mv.quantity = 5

    def test_ids_are_unique(self):
        a = StockMovement(material_id="m1", movement_type=MovementType.IN, quantity=1)
        b = StockMovement(material_id="m1", movement_type=MovementType.IN, quantity=1)
        assert a.id != b.id


class TestLedgerBalance:
    def test_consistent(self):
        balance = LedgerBalance("m1", current_stock=6, total_in=10, total_out=4, movement_count=2)
        assert balance.ledger_stock == 6
        assert balance.is_consistent

    def test_float_drift_tolerated(self):
        balance = LedgerBalance(
            "m1", current_stock=0.3, total_in=0.1 + 0.2, total_out=0, movement_count=2
        )
        assert balance.is_consistent

    def test_inconsistent(self):
        balance = LedgerBalance("m1", current_stock=7, total_in=10, total_out=4, movement_count=2)
        assert not balance.is_consistent
