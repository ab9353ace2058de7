from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from backend.app.models.delivery import DeliveryStatus


class DeliveryCreate(BaseModel):
    supplier_id: UUID
    customer_id: UUID | None = None
    delivery_partner_id: UUID | None = None
    quantity: Decimal = Field(max_digits=20, decimal_places=4)
    unit: str | None = None
    delivery_date: date | None = None
    status: DeliveryStatus = DeliveryStatus.PENDING
    completed_time: datetime | None = None
    notes: str | None = None

    @field_validator("quantity")
    @classmethod
    def quantity_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Quantity must be non-negative")
        return v


class DeliveryStatusUpdate(BaseModel):
    status: DeliveryStatus
    completed_time: datetime | None = None


class DeliveryOut(BaseModel):
    id: UUID
    supplier_id: UUID
    customer_id: UUID | None
    delivery_partner_id: UUID | None
    quantity: Decimal
    unit: str
    delivery_date: date
    status: DeliveryStatus
    completed_time: datetime | None
    notes: str | None

    class Config:
        from_attributes = True
