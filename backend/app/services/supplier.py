from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from backend.app.models.supplier import Supplier
from backend.app.schemas.supplier import SupplierCreate
from backend.app.services.audit import log_action


class SupplierNotFoundError(ValueError):
    pass


def get_supplier(db: Session, supplier_id: UUID) -> Supplier | None:
    return db.query(Supplier).filter(Supplier.id == supplier_id).first()


def require_supplier(db: Session, supplier_id: UUID) -> Supplier:
    supplier = get_supplier(db, supplier_id)
    if not supplier:
        raise SupplierNotFoundError("Supplier not found")
    return supplier


def create_supplier(
    db: Session, data: SupplierCreate, created_by: str | None = None
) -> Supplier:
    supplier = Supplier(**data.model_dump())
    db.add(supplier)
    db.flush()

    log_action(
        db,
        actor=created_by,
        action="SUPPLIER_CREATED",
        resource_type="suppliers",
        resource_id=str(supplier.id),
        changes={"name": supplier.name},
    )

    db.commit()
    db.refresh(supplier)
    return supplier


def list_suppliers(db: Session) -> list[Supplier]:
    return (
        db.query(Supplier)
        .filter(Supplier.is_active.is_(True))
        .order_by(Supplier.name)
        .all()
    )
