from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class PickupLogCreate(BaseModel):
    supplier_id: UUID
    farmer_id: UUID | None = None
    quantity: Decimal = Field(max_digits=20, decimal_places=4)
    unit: str | None = None
    pickup_date: date | None = None
    pickup_time: datetime | None = None
    notes: str | None = None

    @field_validator("quantity")
    @classmethod
    def quantity_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Quantity must be non-negative")
        return v


class PickupLogOut(BaseModel):
    id: UUID
    supplier_id: UUID
    farmer_id: UUID | None
    quantity: Decimal
    unit: str
    pickup_date: date
    pickup_time: datetime | None
    notes: str | None

    class Config:
        from_attributes = True
