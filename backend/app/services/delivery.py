"""Delivery lifecycle.

A delivery reaching ``completed`` is the only transition the inventory
ledger cares about, and it must be counted once. Every status change is
written as a guarded UPDATE (compare-and-swap on the stored status), and the
ledger hook fires only when the completing UPDATE matched a row. Two requests
completing the same delivery concurrently therefore produce a single supply
row, and a completed delivery can never be reopened and completed again.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from backend.app.core.config import settings
from backend.app.models.delivery import Delivery, DeliveryStatus
from backend.app.schemas.delivery import DeliveryCreate
from backend.app.services.audit import log_action
from backend.app.services.inventory import on_delivery_completed
from backend.app.services.supplier import require_supplier

logger = logging.getLogger(__name__)


def create_delivery(
    db: Session,
    data: DeliveryCreate,
    created_by: str | None = None,
) -> Delivery:
    require_supplier(db, data.supplier_id)

    completed_time = data.completed_time
    if data.status == DeliveryStatus.COMPLETED and completed_time is None:
        completed_time = datetime.now(timezone.utc)

    delivery = Delivery(
        supplier_id=data.supplier_id,
        customer_id=data.customer_id,
        delivery_partner_id=data.delivery_partner_id,
        quantity=data.quantity,
        unit=data.unit or settings.INVENTORY_DEFAULT_UNIT,
        delivery_date=data.delivery_date or date.today(),
        status=data.status,
        completed_time=completed_time,
        notes=data.notes,
        created_by=created_by,
    )
    db.add(delivery)
    db.flush()

    if delivery.status == DeliveryStatus.COMPLETED:
        on_delivery_completed(db, delivery, previous_status=None)

    log_action(
        db,
        actor=created_by,
        action="DELIVERY_CREATED",
        resource_type="deliveries",
        resource_id=str(delivery.id),
        changes={
            "supplier_id": str(delivery.supplier_id),
            "quantity": str(delivery.quantity),
            "status": delivery.status.value,
        },
    )

    db.commit()
    db.refresh(delivery)
    return delivery


class DeliveryNotFoundError(ValueError):
    pass


class DeliveryTransitionError(ValueError):
    pass


# Stored statuses each target status may be written over. A completed
# delivery can only be cancelled, and a cancelled one is final, so a delivery
# enters ``completed`` at most once.
ALLOWED_FROM: dict[DeliveryStatus, tuple[DeliveryStatus, ...]] = {
    DeliveryStatus.PENDING: (DeliveryStatus.PENDING, DeliveryStatus.IN_TRANSIT),
    DeliveryStatus.IN_TRANSIT: (DeliveryStatus.PENDING, DeliveryStatus.IN_TRANSIT),
    DeliveryStatus.COMPLETED: (DeliveryStatus.PENDING, DeliveryStatus.IN_TRANSIT),
    DeliveryStatus.CANCELLED: tuple(DeliveryStatus),
}


def update_delivery_status(
    db: Session,
    delivery_id: UUID,
    status: DeliveryStatus,
    completed_time: datetime | None = None,
    created_by: str | None = None,
) -> Delivery:
    delivery = db.query(Delivery).filter(Delivery.id == delivery_id).first()
    if not delivery:
        raise DeliveryNotFoundError("Delivery not found")
    previous = delivery.status

    values: dict[str, object] = {"status": status}
    if status == DeliveryStatus.COMPLETED:
        values["completed_time"] = completed_time or datetime.now(timezone.utc)

    result = db.execute(
        update(Delivery)
        .where(
            Delivery.id == delivery_id,
            Delivery.status.in_(ALLOWED_FROM[status]),
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    db.refresh(delivery)

    if result.rowcount != 1:
        if delivery.status != status:
            raise DeliveryTransitionError(
                f"Cannot change delivery status from "
                f"{delivery.status.value} to {status.value}"
            )
        logger.info("Delivery %s already %s, ledger unchanged", delivery_id, status.value)
    elif status == DeliveryStatus.COMPLETED:
        on_delivery_completed(db, delivery, previous_status=previous)

    log_action(
        db,
        actor=created_by,
        action="DELIVERY_STATUS_CHANGED",
        resource_type="deliveries",
        resource_id=str(delivery_id),
        changes={"from": previous.value, "to": status.value},
    )

    db.commit()
    db.refresh(delivery)
    return delivery


def list_deliveries(db: Session, supplier_id: UUID | None = None) -> list[Delivery]:
    query = db.query(Delivery)
    if supplier_id:
        query = query.filter(Delivery.supplier_id == supplier_id)
    return query.order_by(Delivery.delivery_date.desc(), Delivery.created_at.desc()).all()
