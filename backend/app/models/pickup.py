from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.core.database import Base


class PickupLog(Base):
    """Milk collected from a farmer on behalf of a supplier."""

    __tablename__ = "pickup_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    supplier_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("suppliers.id", ondelete="CASCADE"), nullable=False
    )
    # Farmers are managed outside this service.
    farmer_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    quantity: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=4), nullable=False
    )
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="liters")
    pickup_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    pickup_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_pickup_quantity_non_negative"),
        Index("ix_pickup_logs_supplier", "supplier_id"),
        Index("ix_pickup_logs_farmer", "farmer_id"),
        Index("ix_pickup_logs_date", "pickup_date"),
    )
