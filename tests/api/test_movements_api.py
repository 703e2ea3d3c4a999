"""API tests for movement endpoints."""

from stockroom.core.entities.inventory import (
    MovementStats,
    MovementTotals,
    MovementType,
    StockMovement,
)
from stockroom.core.exceptions import (
    InsufficientStockError,
    MaterialNotFoundError,
    MovementNotFoundError,
)
from stockroom.core.services.stock_ledger import AppliedMovement


def _out(quantity: float = 4) -> StockMovement:
    return StockMovement(
        material_id="mat-1",
        material_code="BRG-6204",
        movement_type=MovementType.OUT,
        quantity=quantity,
        unit_price=2.5,
        performed_by="ali",
    )


class TestRecordMovement:
    async def test_out_movement(self, client, mock_ledger):
        mock_ledger.apply.return_value = AppliedMovement(_out(), 10.0, 6.0)

        resp = await client.post(
            "/api/movements",
            json={"material_id": "mat-1", "type": "OUT", "quantity": 4, "reason": "repair"},
            headers={"X-User-Id": "ali"},
        )

        assert resp.status_code == 201
        data = resp.json()
        assert data["stock_before"] == 10.0
        assert data["stock_after"] == 6.0
        assert data["movement"]["type"] == "OUT"
        assert data["movement"]["total_price"] == 10.0
        sent = mock_ledger.apply.await_args.args[0]
        assert sent.performed_by == "ali"
        assert sent.reason == "repair"

    async def test_insufficient_stock(self, client, mock_ledger):
        mock_ledger.apply.side_effect = InsufficientStockError("mat-1", 15, 10)

        resp = await client.post(
            "/api/movements", json={"material_id": "mat-1", "type": "OUT", "quantity": 15}
        )

        assert resp.status_code == 400
        body = resp.json()
        assert body["error_code"] == "INSUFFICIENT_STOCK"
        assert '"available": 10' in body["detail"]

    async def test_unknown_material(self, client, mock_ledger):
        mock_ledger.apply.side_effect = MaterialNotFoundError("missing")
        resp = await client.post(
            "/api/movements", json={"material_id": "missing", "type": "IN", "quantity": 1}
        )
        assert resp.status_code == 404

    async def test_zero_quantity_rejected(self, client, mock_ledger):
        resp = await client.post(
            "/api/movements", json={"material_id": "mat-1", "type": "IN", "quantity": 0}
        )
        assert resp.status_code == 422
        mock_ledger.apply.assert_not_awaited()

    async def test_unknown_type_rejected(self, client):
        resp = await client.post(
            "/api/movements", json={"material_id": "mat-1", "type": "MOVE", "quantity": 1}
        )
        assert resp.status_code == 422


class TestListMovements:
    async def test_filters_forwarded(self, client, mock_ledger):
        mock_ledger.list_movements.return_value = ([_out()], 1)

        resp = await client.get(
            "/api/movements?type=OUT&material_id=mat-1&work_order_id=wo-1&limit=5"
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 1
        assert data["has_more"] is False
        movement_filter = mock_ledger.list_movements.await_args.args[0]
        assert movement_filter.movement_type == MovementType.OUT
        assert movement_filter.work_order_id == "wo-1"
        assert movement_filter.limit == 5

    async def test_default_limit(self, client, mock_ledger):
        mock_ledger.list_movements.return_value = ([], 0)
        await client.get("/api/movements")
        assert mock_ledger.list_movements.await_args.args[0].limit == 10

    async def test_recent(self, client, mock_ledger):
        mock_ledger.get_recent_movements.return_value = [_out(1), _out(2)]
        resp = await client.get("/api/movements/recent")
        assert [m["quantity"] for m in resp.json()] == [1, 2]

    async def test_get_missing(self, client, mock_ledger):
        mock_ledger.get_movement.side_effect = MovementNotFoundError("mv-x")
        resp = await client.get("/api/movements/mv-x")
        assert resp.status_code == 404
        assert resp.json()["error_code"] == "MOVEMENT_NOT_FOUND"

    async def test_stats_summary(self, client, mock_ledger):
        mock_ledger.stats.return_value = MovementStats(
            today=MovementTotals(inbound=10, outbound=3, count=2),
            month=MovementTotals(inbound=15, outbound=3, count=3),
            total_count=4,
        )

        resp = await client.get("/api/movements/stats/summary")

        assert resp.status_code == 200
        data = resp.json()
        assert data["today"] == {"inbound": 10, "outbound": 3, "count": 2}
        assert data["month"]["inbound"] == 15
        assert data["total_count"] == 4
        mock_ledger.get_movement.assert_not_awaited()
