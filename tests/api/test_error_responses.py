"""Error body shape shared by every endpoint."""

import json

from stockroom.core.exceptions import MaterialNotFoundError, WorkOrderNotFoundError

ERROR_FIELDS = {"error_code", "message", "hint", "detail", "path", "timestamp"}


async def test_not_found_body(client, mock_work_orders):
    mock_work_orders.get.side_effect = WorkOrderNotFoundError("wo-x")

    resp = await client.get("/api/work-orders/wo-x")

    assert resp.status_code == 404
    body = resp.json()
    assert set(body) == ERROR_FIELDS
    assert json.loads(body["detail"]) == {"work_order_id": "wo-x"}
    assert "wo-x" in body["message"]


async def test_validation_body(client):
    resp = await client.post("/api/materials", json={"name": "no code"})

    assert resp.status_code == 422
    body = resp.json()
    assert set(body) == ERROR_FIELDS
    assert "code" in body["detail"]


async def test_unexpected_error_is_hidden(client, mock_registry):
    mock_registry.get.side_effect = RuntimeError("disk on fire at /var/db")

    resp = await client.get("/api/materials/mat-1")

    assert resp.status_code == 500
    body = resp.json()
    assert body["error_code"] == "INTERNAL_ERROR"
    assert body["message"] == "Internal server error"
    assert "disk" not in resp.text


async def test_not_found_hint_is_specific(client, mock_registry):
    mock_registry.get.side_effect = MaterialNotFoundError("mat-x")
    resp = await client.get("/api/materials/mat-x")
    assert "GET /api/materials" in resp.json()["hint"]
