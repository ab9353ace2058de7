"""Milk inventory ledger.

Every movement of milk through a supplier's stock is one append-only row in
``inventory``. Stock levels are never stored: they are aggregated on read
from the ledger, with intake and adjustments counting up and supply and
waste counting down.

Pickup logs and deliveries feed the ledger through ``on_pickup_created`` and
``on_delivery_completed``. Both run inside the caller's transaction and are
no-ops unless their automation flag is switched on in settings.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from backend.app.core.config import settings
from backend.app.models.delivery import Delivery, DeliveryStatus
from backend.app.models.inventory import (
    INBOUND_TYPES,
    OUTBOUND_TYPES,
    REFERENCE_PAIRING,
    InventoryTransaction,
    ReferenceType,
    TransactionType,
)
from backend.app.models.pickup import PickupLog
from backend.app.schemas.inventory import DailyInventoryOut, InventorySummaryOut
from backend.app.services.audit import log_action
from backend.app.services.supplier import require_supplier

logger = logging.getLogger(__name__)

# Matches the numeric(20, 4) quantity columns
QUANTITY_SCALE = 4
QUANTITY_INTEGER_DIGITS = 16

ZERO = Decimal("0")


class InventoryValidationError(ValueError):
    """Ledger input was rejected before anything was written."""


# ── Helpers ──────────────────────────────────────────────────────────────────


def _to_decimal(value: object) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(str(value))


def _coerce_enum(enum_cls: Any, value: Any, field: str) -> Any:
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InventoryValidationError(
            f"{field} must be one of: {allowed} (got {value!r})"
        ) from None


def _coerce_quantity(value: Any) -> Decimal:
    try:
        quantity = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InventoryValidationError(f"Quantity must be a number (got {value!r})") from None
    if not quantity.is_finite():
        raise InventoryValidationError("Quantity must be a finite number")
    if quantity < 0:
        raise InventoryValidationError("Quantity must be non-negative")
    if quantity >= Decimal(10) ** QUANTITY_INTEGER_DIGITS:
        raise InventoryValidationError(
            f"Quantity must have at most {QUANTITY_INTEGER_DIGITS} integer digits"
        )
    if quantity != quantity.quantize(Decimal(1).scaleb(-QUANTITY_SCALE)):
        raise InventoryValidationError(
            f"Quantity must have at most {QUANTITY_SCALE} decimal places"
        )
    return quantity


def _check_pairing(
    transaction_type: TransactionType, reference_type: ReferenceType | None
) -> None:
    expected = REFERENCE_PAIRING.get(reference_type)  # type: ignore[arg-type]
    if expected is not None and transaction_type != expected:
        raise InventoryValidationError(
            f"reference_type '{reference_type.value}' requires "  # type: ignore[union-attr]
            f"transaction_type '{expected.value}'"
        )


def _signed_quantity():
    """Quantity with the sign of its effect on stock."""
    return case(
        (
            InventoryTransaction.transaction_type.in_(INBOUND_TYPES),
            InventoryTransaction.quantity,
        ),
        (
            InventoryTransaction.transaction_type.in_(OUTBOUND_TYPES),
            -InventoryTransaction.quantity,
        ),
        else_=0,
    )


def _total_of(transaction_type: TransactionType):
    return func.coalesce(
        func.sum(
            case(
                (
                    InventoryTransaction.transaction_type == transaction_type,
                    InventoryTransaction.quantity,
                ),
                else_=0,
            )
        ),
        0,
    )


def _add_transaction(
    db: Session,
    *,
    supplier_id: UUID,
    transaction_type: TransactionType,
    quantity: Decimal,
    transaction_date: date | None,
    transaction_time: datetime | None,
    reference_id: UUID | None,
    reference_type: ReferenceType | None,
    unit: str | None,
    notes: str | None,
    created_by: str | None,
) -> InventoryTransaction:
    """Stage one validated ledger row and its audit entry. Does not commit."""
    txn = InventoryTransaction(
        supplier_id=supplier_id,
        transaction_type=transaction_type,
        quantity=quantity,
        transaction_date=transaction_date or date.today(),
        reference_id=reference_id,
        reference_type=reference_type,
        unit=unit or settings.INVENTORY_DEFAULT_UNIT,
        notes=notes,
        created_by=created_by,
    )
    # Leave NULL times to the server default.
    if transaction_time is not None:
        txn.transaction_time = transaction_time
    db.add(txn)
    db.flush()

    log_action(
        db,
        actor=created_by,
        action="INVENTORY_RECORDED",
        resource_type="inventory",
        resource_id=str(txn.id),
        changes={
            "supplier_id": str(supplier_id),
            "transaction_type": transaction_type.value,
            "quantity": str(quantity),
            "unit": txn.unit,
            "transaction_date": txn.transaction_date.isoformat(),
            "reference_type": reference_type.value if reference_type else None,
            "reference_id": str(reference_id) if reference_id else None,
        },
    )
    logger.info(
        "Recorded %s of %s %s for supplier %s",
        transaction_type.value,
        quantity,
        txn.unit,
        supplier_id,
    )
    return txn


# ── Write side ───────────────────────────────────────────────────────────────


def record_transaction(
    db: Session,
    *,
    supplier_id: UUID,
    transaction_type: TransactionType | str,
    quantity: Decimal | int | float | str,
    transaction_date: date | None = None,
    transaction_time: datetime | None = None,
    reference_id: UUID | None = None,
    reference_type: ReferenceType | str | None = None,
    unit: str | None = None,
    notes: str | None = None,
    created_by: str | None = None,
) -> InventoryTransaction:
    """Append one movement to a supplier's ledger and commit it.

    Raises ``InventoryValidationError`` for a negative or non-numeric
    quantity, an unknown transaction/reference type, or a reference type
    paired with the wrong transaction type. Raises ``ValueError`` if the
    supplier does not exist. Nothing is written in either case.
    """
    txn_type = _coerce_enum(TransactionType, transaction_type, "transaction_type")
    ref_type = _coerce_enum(ReferenceType, reference_type, "reference_type")
    qty = _coerce_quantity(quantity)
    _check_pairing(txn_type, ref_type)
    require_supplier(db, supplier_id)

    txn = _add_transaction(
        db,
        supplier_id=supplier_id,
        transaction_type=txn_type,
        quantity=qty,
        transaction_date=transaction_date,
        transaction_time=transaction_time,
        reference_id=reference_id,
        reference_type=ref_type,
        unit=unit,
        notes=notes,
        created_by=created_by,
    )
    db.commit()
    db.refresh(txn)
    return txn


# ── Read side ────────────────────────────────────────────────────────────────


def get_current_stock(db: Session, supplier_id: UUID) -> Decimal:
    """Signed total of a supplier's ledger; zero when there are no rows."""
    value = (
        db.query(func.coalesce(func.sum(_signed_quantity()), 0))
        .filter(InventoryTransaction.supplier_id == supplier_id)
        .scalar()
    )
    return _to_decimal(value)


def _summary_columns() -> list:
    return [
        _total_of(TransactionType.INTAKE).label("total_intake"),
        _total_of(TransactionType.SUPPLY).label("total_supply"),
        _total_of(TransactionType.ADJUSTMENT).label("total_adjustments"),
        _total_of(TransactionType.WASTE).label("total_waste"),
        func.coalesce(func.sum(_signed_quantity()), 0).label("current_stock"),
    ]


def _summary_out(supplier_id: UUID, row: Any) -> InventorySummaryOut:
    return InventorySummaryOut(
        supplier_id=supplier_id,
        total_intake=_to_decimal(row.total_intake),
        total_supply=_to_decimal(row.total_supply),
        total_adjustments=_to_decimal(row.total_adjustments),
        total_waste=_to_decimal(row.total_waste),
        current_stock=_to_decimal(row.current_stock),
    )


def get_inventory_summary(db: Session, supplier_id: UUID) -> InventorySummaryOut:
    """Per-type totals and current stock for one supplier (all zeros if empty)."""
    row = (
        db.query(*_summary_columns())
        .filter(InventoryTransaction.supplier_id == supplier_id)
        .one()
    )
    return _summary_out(supplier_id, row)


def list_inventory_summaries(db: Session) -> list[InventorySummaryOut]:
    """One summary row for every supplier that has ledger activity."""
    rows = (
        db.query(InventoryTransaction.supplier_id, *_summary_columns())
        .group_by(InventoryTransaction.supplier_id)
        .order_by(InventoryTransaction.supplier_id)
        .all()
    )
    return [_summary_out(r.supplier_id, r) for r in rows]


def get_daily_summary(
    db: Session,
    supplier_id: UUID,
    from_date: date | None = None,
    to_date: date | None = None,
) -> list[DailyInventoryOut]:
    """Per-date intake, supply and net change for a supplier, newest first.

    The optional date bounds are inclusive.
    """
    if from_date and to_date and from_date > to_date:
        raise InventoryValidationError("from_date must not be after to_date")

    query = db.query(
        InventoryTransaction.transaction_date,
        _total_of(TransactionType.INTAKE).label("daily_intake"),
        _total_of(TransactionType.SUPPLY).label("daily_supply"),
        func.coalesce(func.sum(_signed_quantity()), 0).label("net_change"),
    ).filter(InventoryTransaction.supplier_id == supplier_id)
    if from_date:
        query = query.filter(InventoryTransaction.transaction_date >= from_date)
    if to_date:
        query = query.filter(InventoryTransaction.transaction_date <= to_date)

    rows = (
        query.group_by(InventoryTransaction.transaction_date)
        .order_by(InventoryTransaction.transaction_date.desc())
        .all()
    )
    return [
        DailyInventoryOut(
            supplier_id=supplier_id,
            transaction_date=r.transaction_date,
            daily_intake=_to_decimal(r.daily_intake),
            daily_supply=_to_decimal(r.daily_supply),
            net_change=_to_decimal(r.net_change),
        )
        for r in rows
    ]


def list_transactions(
    db: Session,
    supplier_id: UUID,
    *,
    transaction_type: TransactionType | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
    limit: int = 100,
) -> list[InventoryTransaction]:
    """Raw ledger rows for a supplier, most recent first."""
    query = db.query(InventoryTransaction).filter(
        InventoryTransaction.supplier_id == supplier_id
    )
    if transaction_type:
        query = query.filter(InventoryTransaction.transaction_type == transaction_type)
    if from_date:
        query = query.filter(InventoryTransaction.transaction_date >= from_date)
    if to_date:
        query = query.filter(InventoryTransaction.transaction_date <= to_date)
    return (
        query.order_by(
            InventoryTransaction.transaction_date.desc(),
            InventoryTransaction.created_at.desc(),
        )
        .limit(limit)
        .all()
    )


# ── Derived rows ─────────────────────────────────────────────────────────────


def derive_from_pickup(db: Session, pickup: PickupLog) -> InventoryTransaction:
    """Stage the intake row mirroring a newly created pickup log."""
    return _add_transaction(
        db,
        supplier_id=pickup.supplier_id,
        transaction_type=TransactionType.INTAKE,
        quantity=_coerce_quantity(pickup.quantity),
        transaction_date=pickup.pickup_date,
        transaction_time=pickup.pickup_time,
        reference_id=pickup.id,
        reference_type=ReferenceType.PICKUP_LOG,
        unit=pickup.unit,
        notes=f"Auto-created from pickup log: {pickup.notes or ''}",
        created_by=pickup.created_by,
    )


def derive_from_delivery(
    db: Session,
    delivery: Delivery,
    previous_status: DeliveryStatus | str | None,
) -> InventoryTransaction | None:
    """Stage the supply row for a delivery that has just become completed.

    Returns None for every other transition, including completed to completed.
    """
    if delivery.status != DeliveryStatus.COMPLETED:
        return None
    if previous_status == DeliveryStatus.COMPLETED:
        return None
    return _add_transaction(
        db,
        supplier_id=delivery.supplier_id,
        transaction_type=TransactionType.SUPPLY,
        quantity=_coerce_quantity(delivery.quantity),
        transaction_date=delivery.delivery_date,
        transaction_time=delivery.completed_time,
        reference_id=delivery.id,
        reference_type=ReferenceType.DELIVERY,
        unit=delivery.unit,
        notes=f"Auto-created from delivery: {delivery.notes or ''}",
        created_by=delivery.created_by,
    )


# ── Event entry points ───────────────────────────────────────────────────────


def on_pickup_created(db: Session, pickup: PickupLog) -> InventoryTransaction | None:
    if not settings.INVENTORY_AUTO_FROM_PICKUP:
        logger.debug("Pickup automation disabled — no intake for %s", pickup.id)
        return None
    return derive_from_pickup(db, pickup)


def on_delivery_completed(
    db: Session,
    delivery: Delivery,
    previous_status: DeliveryStatus | str | None,
) -> InventoryTransaction | None:
    if not settings.INVENTORY_AUTO_FROM_DELIVERY:
        logger.debug("Delivery automation disabled — no supply for %s", delivery.id)
        return None
    return derive_from_delivery(db, delivery, previous_status)
