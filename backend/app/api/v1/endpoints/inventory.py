from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backend.app.api.deps import get_actor
from backend.app.core.database import get_db
from backend.app.models.inventory import InventoryTransaction, TransactionType
from backend.app.schemas.inventory import (
    DailyInventoryOut,
    InventorySummaryOut,
    InventoryTransactionCreate,
    InventoryTransactionOut,
)
from backend.app.services.inventory import (
    get_daily_summary,
    get_inventory_summary,
    list_inventory_summaries,
    list_transactions,
    record_transaction,
)
from backend.app.services.supplier import SupplierNotFoundError

router = APIRouter()


# ─── Ledger ───────────────────────────────────────────────────────────────────


@router.post(
    "/transactions",
    response_model=InventoryTransactionOut,
    status_code=status.HTTP_201_CREATED,
)
def post_transaction(
    payload: InventoryTransactionCreate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
) -> InventoryTransaction:
    try:
        return record_transaction(
            db,
            supplier_id=payload.supplier_id,
            transaction_type=payload.transaction_type,
            quantity=payload.quantity,
            transaction_date=payload.transaction_date,
            transaction_time=payload.transaction_time,
            reference_id=payload.reference_id,
            reference_type=payload.reference_type,
            unit=payload.unit,
            notes=payload.notes,
            created_by=actor,
        )
    except SupplierNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/transactions", response_model=list[InventoryTransactionOut])
def get_transactions(
    supplier_id: UUID = Query(...),
    transaction_type: TransactionType | None = Query(None),
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[InventoryTransaction]:
    return list_transactions(
        db,
        supplier_id,
        transaction_type=transaction_type,
        from_date=from_date,
        to_date=to_date,
        limit=limit,
    )


# ─── Projections ──────────────────────────────────────────────────────────────


@router.get("/summary", response_model=list[InventorySummaryOut])
def get_summaries(db: Session = Depends(get_db)) -> list[InventorySummaryOut]:
    return list_inventory_summaries(db)


@router.get("/suppliers/{supplier_id}/stock", response_model=InventorySummaryOut)
def get_supplier_stock(
    supplier_id: UUID,
    db: Session = Depends(get_db),
) -> InventorySummaryOut:
    return get_inventory_summary(db, supplier_id)


@router.get(
    "/suppliers/{supplier_id}/daily", response_model=list[DailyInventoryOut]
)
def get_supplier_daily(
    supplier_id: UUID,
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    db: Session = Depends(get_db),
) -> list[DailyInventoryOut]:
    try:
        return get_daily_summary(db, supplier_id, from_date, to_date)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
