"""Shared test fixtures.

Each test gets a freshly created schema, so tests never pollute each other.
SQLite in memory is used unless ``TEST_DATABASE_URL`` points elsewhere
(e.g. a throwaway PostgreSQL database).
"""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

from decimal import Decimal
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from backend.app.core.config import settings
from backend.app.core.database import Base, get_db
from backend.app.main import app
from backend.app.models.delivery import Delivery, DeliveryStatus
from backend.app.models.supplier import Supplier

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+pysqlite://")


def _make_engine(url: str = TEST_DATABASE_URL) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(url)

    if url.endswith("://"):
        # In memory: every session has to share the one connection.
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(url)

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection: object, _record: object) -> None:
        cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


# ─── DB session on a fresh schema ─────────────────────────────────────────────


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    engine = _make_engine()
    Base.metadata.create_all(engine)
    session = Session(bind=engine)

    yield session

    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def session_pair(tmp_path: Path) -> Generator[tuple[Session, Session], None, None]:
    """Two sessions on separate connections to one database."""
    url = TEST_DATABASE_URL
    if url.startswith("sqlite"):
        url = f"sqlite+pysqlite:///{tmp_path / 'ledger.db'}"
    engine = _make_engine(url)
    Base.metadata.create_all(engine)
    first, second = Session(bind=engine), Session(bind=engine)

    yield first, second

    first.close()
    second.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def client(db: Session) -> Generator[TestClient, None, None]:
    """FastAPI TestClient wired to the test session."""

    def _override_get_db() -> Generator[Session, None, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ─── Ledger automation ───────────────────────────────────────────────────────


@pytest.fixture()
def ledger_automation(monkeypatch: pytest.MonkeyPatch) -> None:
    """Subscribe the ledger to pickup and delivery events for one test."""
    monkeypatch.setattr(settings, "INVENTORY_AUTO_FROM_PICKUP", True)
    monkeypatch.setattr(settings, "INVENTORY_AUTO_FROM_DELIVERY", True)


# ─── Suppliers ────────────────────────────────────────────────────────────────


@pytest.fixture()
def supplier(db: Session) -> Supplier:
    s = Supplier(name="Green Valley Dairy", phone="0500000001")
    db.add(s)
    db.flush()
    return s


@pytest.fixture()
def other_supplier(db: Session) -> Supplier:
    s = Supplier(name="Hilltop Milk Co", phone="0500000002")
    db.add(s)
    db.flush()
    return s


# ─── Deliveries ───────────────────────────────────────────────────────────────


@pytest.fixture()
def pending_delivery(db: Session, supplier: Supplier) -> Delivery:
    d = Delivery(
        supplier_id=supplier.id,
        quantity=Decimal("40"),
        unit="liters",
        status=DeliveryStatus.PENDING,
        notes="Morning route",
    )
    db.add(d)
    db.flush()
    return d
