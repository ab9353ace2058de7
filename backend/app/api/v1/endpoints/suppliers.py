from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.api.deps import get_actor
from backend.app.core.database import get_db
from backend.app.models.supplier import Supplier
from backend.app.schemas.supplier import SupplierCreate, SupplierOut
from backend.app.services.supplier import create_supplier, get_supplier, list_suppliers

router = APIRouter()


@router.get("/", response_model=list[SupplierOut])
def get_suppliers(db: Session = Depends(get_db)) -> list[Supplier]:
    return list_suppliers(db)


@router.post("/", response_model=SupplierOut, status_code=status.HTTP_201_CREATED)
def post_supplier(
    payload: SupplierCreate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
) -> Supplier:
    return create_supplier(db, payload, created_by=actor)


@router.get("/{supplier_id}", response_model=SupplierOut)
def get_supplier_detail(
    supplier_id: UUID,
    db: Session = Depends(get_db),
) -> Supplier:
    supplier = get_supplier(db, supplier_id)
    if not supplier:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return supplier
