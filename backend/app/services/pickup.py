from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from backend.app.core.config import settings
from backend.app.models.pickup import PickupLog
from backend.app.schemas.pickup import PickupLogCreate
from backend.app.services.audit import log_action
from backend.app.services.inventory import on_pickup_created
from backend.app.services.supplier import require_supplier

logger = logging.getLogger(__name__)


def create_pickup_log(
    db: Session,
    data: PickupLogCreate,
    created_by: str | None = None,
) -> PickupLog:
    """Record milk collected from a farmer.

    The ledger hook runs in the same transaction, so an intake row (when
    automation is on) is committed together with the pickup or not at all.
    """
    require_supplier(db, data.supplier_id)

    pickup = PickupLog(
        supplier_id=data.supplier_id,
        farmer_id=data.farmer_id,
        quantity=data.quantity,
        unit=data.unit or settings.INVENTORY_DEFAULT_UNIT,
        pickup_date=data.pickup_date or date.today(),
        notes=data.notes,
        created_by=created_by,
    )
    if data.pickup_time is not None:
        pickup.pickup_time = data.pickup_time
    db.add(pickup)
    db.flush()

    on_pickup_created(db, pickup)

    log_action(
        db,
        actor=created_by,
        action="PICKUP_LOGGED",
        resource_type="pickup_logs",
        resource_id=str(pickup.id),
        changes={
            "supplier_id": str(pickup.supplier_id),
            "quantity": str(pickup.quantity),
            "pickup_date": pickup.pickup_date.isoformat(),
        },
    )

    db.commit()
    db.refresh(pickup)
    logger.info("Pickup %s logged for supplier %s", pickup.id, pickup.supplier_id)
    return pickup


def list_pickup_logs(db: Session, supplier_id: UUID | None = None) -> list[PickupLog]:
    query = db.query(PickupLog)
    if supplier_id:
        query = query.filter(PickupLog.supplier_id == supplier_id)
    return query.order_by(PickupLog.pickup_date.desc(), PickupLog.created_at.desc()).all()
