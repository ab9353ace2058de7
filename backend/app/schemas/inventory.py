from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from backend.app.models.inventory import (
    REFERENCE_PAIRING,
    ReferenceType,
    TransactionType,
)


class InventoryTransactionCreate(BaseModel):
    supplier_id: UUID
    transaction_type: TransactionType
    quantity: Decimal = Field(max_digits=20, decimal_places=4)
    transaction_date: date | None = None
    transaction_time: datetime | None = None
    reference_id: UUID | None = None
    reference_type: ReferenceType | None = None
    unit: str | None = None
    notes: str | None = None

    @field_validator("quantity")
    @classmethod
    def quantity_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Quantity must be non-negative")
        return v

    @model_validator(mode="after")
    def reference_matches_type(self) -> InventoryTransactionCreate:
        expected = REFERENCE_PAIRING.get(self.reference_type)  # type: ignore[arg-type]
        if expected is not None and self.transaction_type != expected:
            raise ValueError(
                f"reference_type '{self.reference_type.value}' requires "
                f"transaction_type '{expected.value}'"
            )
        return self


class InventoryTransactionOut(BaseModel):
    id: UUID
    supplier_id: UUID
    transaction_type: TransactionType
    reference_id: UUID | None
    reference_type: ReferenceType | None
    quantity: Decimal
    unit: str
    transaction_date: date
    transaction_time: datetime | None
    notes: str | None
    created_by: str | None
    created_at: datetime | None

    class Config:
        from_attributes = True


# ─── Projections ──────────────────────────────────────────────────────────────


class InventorySummaryOut(BaseModel):
    supplier_id: UUID
    total_intake: Decimal
    total_supply: Decimal
    total_adjustments: Decimal
    total_waste: Decimal
    current_stock: Decimal


class DailyInventoryOut(BaseModel):
    supplier_id: UUID
    transaction_date: date
    daily_intake: Decimal
    daily_supply: Decimal
    net_change: Decimal
