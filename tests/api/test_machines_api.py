"""API tests for machine and BOM endpoints."""

from stockroom.core.entities.machine import BOMItem, MachineStatus
from stockroom.core.exceptions import (
    DuplicateBOMEntryError,
    DuplicateMachineCodeError,
    MachineNotFoundError,
)


class TestMachines:
    async def test_create(self, client, mock_boms, sample_machine):
        mock_boms.create_machine.return_value = sample_machine

        resp = await client.post("/api/machines", json={"code": "PMP-100", "name": "Pump 100"})

        assert resp.status_code == 201
        assert resp.json()["id"] == "mch-1"
        sent = mock_boms.create_machine.await_args.args[0]
        assert sent.status == MachineStatus.ACTIVE

    async def test_duplicate_code(self, client, mock_boms):
        mock_boms.create_machine.side_effect = DuplicateMachineCodeError("PMP-100", "mch-1")
        resp = await client.post("/api/machines", json={"code": "PMP-100", "name": "x"})

        assert resp.status_code == 400
        assert resp.json()["error_code"] == "DUPLICATE_MACHINE_CODE"

    async def test_list_with_status_filter(self, client, mock_boms, sample_machine):
        mock_boms.list_machines.return_value = [sample_machine]

        resp = await client.get("/api/machines?status=active")

        assert resp.json()["total"] == 1
        assert mock_boms.list_machines.await_args.kwargs["status"] == MachineStatus.ACTIVE

    async def test_delete_reports_removed_lines(self, client, mock_boms):
        mock_boms.delete_machine.return_value = 3

        resp = await client.delete("/api/machines/mch-1")

        assert resp.status_code == 200
        assert resp.json() == {"machine_id": "mch-1", "bom_items_removed": 3}

    async def test_missing_machine(self, client, mock_boms):
        mock_boms.get_machine.side_effect = MachineNotFoundError("nope")
        resp = await client.get("/api/machines/nope")
        assert resp.status_code == 404


class TestBOM:
    async def test_get_bom_with_total(self, client, mock_boms, sample_bom_item):
        second = BOMItem(
            id="bom-2", machine_id="mch-1", material_id="mat-2", quantity=4, unit_price=0.5,
            position=1,
        )
        mock_boms.get_bom.return_value = [sample_bom_item, second]

        resp = await client.get("/api/machines/mch-1/bom")

        data = resp.json()
        assert [i["id"] for i in data["items"]] == ["bom-1", "bom-2"]
        assert data["items"][0]["line_cost"] == 5.0
        assert data["total_cost"] == 7.0

    async def test_add_item(self, client, mock_boms, sample_bom_item):
        mock_boms.add_item.return_value = sample_bom_item

        resp = await client.post(
            "/api/machines/mch-1/bom", json={"material_id": "mat-1", "quantity": 2}
        )

        assert resp.status_code == 201
        mock_boms.add_item.assert_awaited_once_with(
            "mch-1", "mat-1", 2.0, unit_price=None, notes=None
        )

    async def test_add_duplicate_material(self, client, mock_boms):
        mock_boms.add_item.side_effect = DuplicateBOMEntryError("mch-1", "mat-1")

        resp = await client.post(
            "/api/machines/mch-1/bom", json={"material_id": "mat-1", "quantity": 2}
        )

        assert resp.status_code == 400
        assert resp.json()["error_code"] == "DUPLICATE_BOM_ENTRY"

    async def test_non_positive_quantity_rejected(self, client, mock_boms):
        resp = await client.post(
            "/api/machines/mch-1/bom", json={"material_id": "mat-1", "quantity": 0}
        )
        assert resp.status_code == 422
        mock_boms.add_item.assert_not_awaited()

    async def test_cost(self, client, mock_boms, sample_bom_item):
        mock_boms.get_bom.return_value = [sample_bom_item]
        mock_boms.bom_cost.return_value = 5.0

        resp = await client.get("/api/machines/mch-1/bom/cost")

        assert resp.json() == {"machine_id": "mch-1", "line_count": 1, "total_cost": 5.0}

    async def test_remove_item(self, client, mock_boms):
        resp = await client.delete("/api/machines/mch-1/bom/bom-1")
        assert resp.status_code == 204
        mock_boms.remove_item.assert_awaited_once_with("mch-1", "bom-1")
