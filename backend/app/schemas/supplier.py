from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, field_validator


class SupplierCreate(BaseModel):
    name: str
    business_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name must not be blank")
        return v.strip()


class SupplierOut(BaseModel):
    id: UUID
    name: str
    business_name: str | None
    email: str | None
    phone: str | None
    address: str | None
    is_active: bool

    class Config:
        from_attributes = True
