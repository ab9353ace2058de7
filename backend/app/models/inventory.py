from __future__ import annotations

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    Uuid,
    event,
    func,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, object_session

from backend.app.core.database import Base


class TransactionType(str, enum.Enum):
    INTAKE = "intake"
    SUPPLY = "supply"
    ADJUSTMENT = "adjustment"
    WASTE = "waste"


class ReferenceType(str, enum.Enum):
    PICKUP_LOG = "pickup_log"
    DELIVERY = "delivery"
    MANUAL = "manual"


# Types that add to stock; the rest subtract.
INBOUND_TYPES = (TransactionType.INTAKE, TransactionType.ADJUSTMENT)
OUTBOUND_TYPES = (TransactionType.SUPPLY, TransactionType.WASTE)

# A reference type that names a source record only pairs with one movement.
REFERENCE_PAIRING: dict[ReferenceType, TransactionType] = {
    ReferenceType.PICKUP_LOG: TransactionType.INTAKE,
    ReferenceType.DELIVERY: TransactionType.SUPPLY,
}


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class ImmutableTransactionError(RuntimeError):
    """Raised when something tries to rewrite or remove a ledger row."""


class InventoryTransaction(Base):
    """One milk-quantity movement in a supplier's ledger.

    Rows are append-only. ``quantity`` is never negative: the direction of
    the movement is carried by ``transaction_type``.
    """

    __tablename__ = "inventory"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    supplier_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("suppliers.id", ondelete="CASCADE"), nullable=False
    )
    transaction_type: Mapped[TransactionType] = mapped_column(
        Enum(
            TransactionType,
            name="inventory_transaction_type",
            values_callable=_enum_values,
        ),
        nullable=False,
    )
    reference_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    reference_type: Mapped[ReferenceType | None] = mapped_column(
        Enum(
            ReferenceType,
            name="inventory_reference_type",
            values_callable=_enum_values,
        ),
        nullable=True,
    )
    quantity: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=4), nullable=False
    )
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="liters")
    transaction_date: Mapped[date] = mapped_column(
        Date, nullable=False, default=date.today
    )
    transaction_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
        CheckConstraint(
            "reference_type IS NULL"
            " OR (reference_type = 'pickup_log' AND transaction_type = 'intake')"
            " OR (reference_type = 'delivery' AND transaction_type = 'supply')"
            " OR reference_type = 'manual'",
            name="ck_inventory_reference_pairing",
        ),
        Index("ix_inventory_supplier", "supplier_id"),
        Index("ix_inventory_date", "transaction_date"),
        Index("ix_inventory_type", "transaction_type"),
        Index("ix_inventory_reference", "reference_type", "reference_id"),
    )


# ─── Append-only guard ────────────────────────────────────────────────────────


@event.listens_for(InventoryTransaction, "before_update")
def _reject_update(mapper, connection, target: InventoryTransaction) -> None:
    session: Session | None = object_session(target)
    if session is not None and not session.is_modified(
        target, include_collections=False
    ):
        return
    raise ImmutableTransactionError(
        f"Inventory transaction {target.id} is append-only and cannot be modified"
    )


@event.listens_for(InventoryTransaction, "before_delete")
def _reject_delete(mapper, connection, target: InventoryTransaction) -> None:
    raise ImmutableTransactionError(
        f"Inventory transaction {target.id} is append-only and cannot be deleted"
    )
