from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backend.app.api.deps import get_actor
from backend.app.core.database import get_db
from backend.app.models.delivery import Delivery
from backend.app.schemas.delivery import DeliveryCreate, DeliveryOut, DeliveryStatusUpdate
from backend.app.services.delivery import (
    DeliveryNotFoundError,
    create_delivery,
    list_deliveries,
    update_delivery_status,
)

router = APIRouter()


@router.post("/", response_model=DeliveryOut, status_code=status.HTTP_201_CREATED)
def post_delivery(
    payload: DeliveryCreate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
) -> Delivery:
    try:
        return create_delivery(db, payload, created_by=actor)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/", response_model=list[DeliveryOut])
def get_deliveries(
    supplier_id: UUID | None = Query(None),
    db: Session = Depends(get_db),
) -> list[Delivery]:
    return list_deliveries(db, supplier_id)


@router.patch("/{delivery_id}/status", response_model=DeliveryOut)
def patch_delivery_status(
    delivery_id: UUID,
    payload: DeliveryStatusUpdate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
) -> Delivery:
    try:
        return update_delivery_status(
            db,
            delivery_id,
            payload.status,
            completed_time=payload.completed_time,
            created_by=actor,
        )
    except DeliveryNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
