"""API endpoint tests for suppliers, the inventory ledger, pickups and deliveries."""

from __future__ import annotations

import uuid
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from backend.app.models.delivery import Delivery
from backend.app.models.inventory import InventoryTransaction
from backend.app.models.supplier import Supplier


def _post_txn(
    client: TestClient,
    supplier_id: uuid.UUID,
    txn_type: str,
    qty: str,
    day: str = "2025-10-01",
    **extra: object,
):
    return client.post(
        "/api/v1/inventory/transactions",
        json={
            "supplier_id": str(supplier_id),
            "transaction_type": txn_type,
            "quantity": qty,
            "transaction_date": day,
            **extra,
        },
    )


# ═══════════════════════════════════════════════════════════════════════════════
#  Suppliers
# ═══════════════════════════════════════════════════════════════════════════════


class TestSupplierAPI:
    def test_create_and_list(self, client: TestClient) -> None:
        r = client.post("/api/v1/suppliers/", json={"name": "  Riverside Dairy "})
        assert r.status_code == 201
        body = r.json()
        assert body["name"] == "Riverside Dairy"
        assert body["is_active"] is True

        r = client.get("/api/v1/suppliers/")
        assert r.status_code == 200
        assert [s["name"] for s in r.json()] == ["Riverside Dairy"]

    def test_blank_name_rejected(self, client: TestClient) -> None:
        r = client.post("/api/v1/suppliers/", json={"name": "   "})
        assert r.status_code == 422

    def test_get_unknown_supplier_404(self, client: TestClient) -> None:
        r = client.get(f"/api/v1/suppliers/{uuid.uuid4()}")
        assert r.status_code == 404


# ═══════════════════════════════════════════════════════════════════════════════
#  Ledger
# ═══════════════════════════════════════════════════════════════════════════════


class TestTransactionAPI:
    def test_record_transaction(
        self, client: TestClient, db: Session, supplier: Supplier
    ) -> None:
        r = _post_txn(
            client,
            supplier.id,
            "intake",
            "100",
            notes="Morning collection",
        )
        assert r.status_code == 201
        body = r.json()
        assert body["transaction_type"] == "intake"
        assert Decimal(body["quantity"]) == Decimal("100")
        assert body["unit"] == "liters"
        assert body["transaction_date"] == "2025-10-01"
        assert db.query(InventoryTransaction).count() == 1

    def test_actor_header_recorded(
        self, client: TestClient, supplier: Supplier
    ) -> None:
        r = client.post(
            "/api/v1/inventory/transactions",
            json={
                "supplier_id": str(supplier.id),
                "transaction_type": "waste",
                "quantity": "3",
            },
            headers={"X-Actor": "night-shift"},
        )
        assert r.status_code == 201
        assert r.json()["created_by"] == "night-shift"

    def test_negative_quantity_422(
        self, client: TestClient, db: Session, supplier: Supplier
    ) -> None:
        r = _post_txn(client, supplier.id, "intake", "-5")
        assert r.status_code == 422
        assert db.query(InventoryTransaction).count() == 0

    @pytest.mark.parametrize("qty", ["0.00004", "1e17"])
    def test_quantity_beyond_column_precision_422(
        self, client: TestClient, db: Session, supplier: Supplier, qty: str
    ) -> None:
        r = _post_txn(client, supplier.id, "intake", qty)
        assert r.status_code == 422
        assert db.query(InventoryTransaction).count() == 0

    def test_unknown_type_422(self, client: TestClient, supplier: Supplier) -> None:
        r = _post_txn(client, supplier.id, "spill", "5")
        assert r.status_code == 422

    def test_reference_pairing_422(
        self, client: TestClient, supplier: Supplier
    ) -> None:
        r = _post_txn(
            client,
            supplier.id,
            "supply",
            "5",
            reference_type="pickup_log",
            reference_id=str(uuid.uuid4()),
        )
        assert r.status_code == 422

    def test_unknown_supplier_404(self, client: TestClient) -> None:
        r = _post_txn(client, uuid.uuid4(), "intake", "5")
        assert r.status_code == 404

    def test_list_transactions(self, client: TestClient, supplier: Supplier) -> None:
        _post_txn(client, supplier.id, "intake", "10", day="2025-10-01")
        _post_txn(client, supplier.id, "supply", "4", day="2025-10-02")

        r = client.get(
            "/api/v1/inventory/transactions",
            params={"supplier_id": str(supplier.id), "transaction_type": "supply"},
        )
        assert r.status_code == 200
        rows = r.json()
        assert len(rows) == 1
        assert rows[0]["transaction_type"] == "supply"

    def test_list_requires_supplier(self, client: TestClient) -> None:
        r = client.get("/api/v1/inventory/transactions")
        assert r.status_code == 422


class TestProjectionAPI:
    def test_stock(self, client: TestClient, supplier: Supplier) -> None:
        _post_txn(client, supplier.id, "intake", "100")
        _post_txn(client, supplier.id, "supply", "30")
        _post_txn(client, supplier.id, "waste", "5")
        _post_txn(client, supplier.id, "adjustment", "0")

        r = client.get(f"/api/v1/inventory/suppliers/{supplier.id}/stock")
        assert r.status_code == 200
        body = r.json()
        assert Decimal(body["current_stock"]) == Decimal("65")
        assert Decimal(body["total_intake"]) == Decimal("100")
        assert Decimal(body["total_waste"]) == Decimal("5")

    def test_stock_unknown_supplier_is_zero(self, client: TestClient) -> None:
        r = client.get(f"/api/v1/inventory/suppliers/{uuid.uuid4()}/stock")
        assert r.status_code == 200
        assert Decimal(r.json()["current_stock"]) == Decimal("0")

    def test_daily(self, client: TestClient, supplier: Supplier) -> None:
        _post_txn(client, supplier.id, "intake", "50", day="2025-10-01")
        _post_txn(client, supplier.id, "intake", "70", day="2025-10-02")
        _post_txn(client, supplier.id, "supply", "20", day="2025-10-02")

        r = client.get(f"/api/v1/inventory/suppliers/{supplier.id}/daily")
        assert r.status_code == 200
        rows = r.json()
        assert [row["transaction_date"] for row in rows] == ["2025-10-02", "2025-10-01"]
        assert Decimal(rows[0]["net_change"]) == Decimal("50")

        r = client.get(
            f"/api/v1/inventory/suppliers/{supplier.id}/daily",
            params={"from_date": "2025-10-01", "to_date": "2025-10-01"},
        )
        assert [row["transaction_date"] for row in r.json()] == ["2025-10-01"]

    def test_daily_inverted_range_400(
        self, client: TestClient, supplier: Supplier
    ) -> None:
        r = client.get(
            f"/api/v1/inventory/suppliers/{supplier.id}/daily",
            params={"from_date": "2025-10-05", "to_date": "2025-10-01"},
        )
        assert r.status_code == 400

    def test_summary_lists_suppliers(
        self, client: TestClient, supplier: Supplier, other_supplier: Supplier
    ) -> None:
        _post_txn(client, supplier.id, "intake", "10")
        _post_txn(client, other_supplier.id, "intake", "20")

        r = client.get("/api/v1/inventory/summary")
        assert r.status_code == 200
        stocks = {row["supplier_id"]: Decimal(row["current_stock"]) for row in r.json()}
        assert stocks == {
            str(supplier.id): Decimal("10"),
            str(other_supplier.id): Decimal("20"),
        }


# ═══════════════════════════════════════════════════════════════════════════════
#  Pickups & deliveries
# ═══════════════════════════════════════════════════════════════════════════════


class TestPickupAPI:
    def test_pickup_creates_intake_when_enabled(
        self, client: TestClient, supplier: Supplier, ledger_automation: None
    ) -> None:
        r = client.post(
            "/api/v1/pickup-logs/",
            json={
                "supplier_id": str(supplier.id),
                "quantity": "42.5",
                "pickup_date": "2025-10-03",
            },
        )
        assert r.status_code == 201
        assert r.json()["unit"] == "liters"

        r = client.get(f"/api/v1/inventory/suppliers/{supplier.id}/stock")
        assert Decimal(r.json()["total_intake"]) == Decimal("42.5")

    def test_list_pickups(self, client: TestClient, supplier: Supplier) -> None:
        client.post(
            "/api/v1/pickup-logs/",
            json={"supplier_id": str(supplier.id), "quantity": "10"},
        )
        r = client.get("/api/v1/pickup-logs/", params={"supplier_id": str(supplier.id)})
        assert r.status_code == 200
        assert len(r.json()) == 1

    def test_pickup_excess_decimal_places_422(
        self, client: TestClient, supplier: Supplier
    ) -> None:
        r = client.post(
            "/api/v1/pickup-logs/",
            json={"supplier_id": str(supplier.id), "quantity": "0.00004"},
        )
        assert r.status_code == 422

    def test_pickup_unknown_supplier_404(self, client: TestClient) -> None:
        r = client.post(
            "/api/v1/pickup-logs/",
            json={"supplier_id": str(uuid.uuid4()), "quantity": "10"},
        )
        assert r.status_code == 404


class TestDeliveryAPI:
    def test_status_sequence_creates_single_supply(
        self,
        client: TestClient,
        db: Session,
        pending_delivery: Delivery,
        ledger_automation: None,
    ) -> None:
        url = f"/api/v1/deliveries/{pending_delivery.id}/status"
        for status in ("completed", "completed", "cancelled"):
            r = client.patch(url, json={"status": status})
            assert r.status_code == 200
            assert r.json()["status"] == status

        supplies = (
            db.query(InventoryTransaction)
            .filter(InventoryTransaction.reference_id == pending_delivery.id)
            .all()
        )
        assert len(supplies) == 1

    def test_reopening_completed_delivery_400(
        self,
        client: TestClient,
        db: Session,
        pending_delivery: Delivery,
        ledger_automation: None,
    ) -> None:
        url = f"/api/v1/deliveries/{pending_delivery.id}/status"
        assert client.patch(url, json={"status": "completed"}).status_code == 200

        r = client.patch(url, json={"status": "pending"})
        assert r.status_code == 400
        assert client.patch(url, json={"status": "completed"}).status_code == 200
        assert db.query(InventoryTransaction).count() == 1

    def test_create_and_list(self, client: TestClient, supplier: Supplier) -> None:
        r = client.post(
            "/api/v1/deliveries/",
            json={"supplier_id": str(supplier.id), "quantity": "12"},
        )
        assert r.status_code == 201
        assert r.json()["status"] == "pending"

        r = client.get("/api/v1/deliveries/")
        assert len(r.json()) == 1

    def test_invalid_status_422(
        self, client: TestClient, pending_delivery: Delivery
    ) -> None:
        r = client.patch(
            f"/api/v1/deliveries/{pending_delivery.id}/status",
            json={"status": "lost"},
        )
        assert r.status_code == 422

    def test_unknown_delivery_404(self, client: TestClient) -> None:
        r = client.patch(
            f"/api/v1/deliveries/{uuid.uuid4()}/status",
            json={"status": "completed"},
        )
        assert r.status_code == 404
