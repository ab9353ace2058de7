from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backend.app.api.deps import get_actor
from backend.app.core.database import get_db
from backend.app.models.pickup import PickupLog
from backend.app.schemas.pickup import PickupLogCreate, PickupLogOut
from backend.app.services.pickup import create_pickup_log, list_pickup_logs

router = APIRouter()


@router.post("/", response_model=PickupLogOut, status_code=status.HTTP_201_CREATED)
def post_pickup_log(
    payload: PickupLogCreate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
) -> PickupLog:
    try:
        return create_pickup_log(db, payload, created_by=actor)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/", response_model=list[PickupLogOut])
def get_pickup_logs(
    supplier_id: UUID | None = Query(None),
    db: Session = Depends(get_db),
) -> list[PickupLog]:
    return list_pickup_logs(db, supplier_id)
