from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, condecimal

from cibercontrol.core.deps import get_store
from cibercontrol.core.serialization_helpers import serialize_row, serialize_rows
from cibercontrol.core.store import RowStore
from cibercontrol.services import accounting_service


router = APIRouter()


class MovementCreate(BaseModel):
    type: str  # ingreso | egreso
    amount: condecimal(max_digits=10, decimal_places=2)
    detail: str


class MovementOut(BaseModel):
    id: int
    type: str
    amount: float
    detail: str
    created_at: Optional[str]


@router.post("/movements", response_model=MovementOut, status_code=201)
def create_movement(data: MovementCreate, store: RowStore = Depends(get_store)):
    return serialize_row(accounting_service.add_movement(store, data.type, data.amount, data.detail))


@router.get("/movements", response_model=List[MovementOut])
def list_movements(
    movement_type: Optional[str] = Query(None, alias="type"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    store: RowStore = Depends(get_store),
):
    return serialize_rows(
        accounting_service.list_movements(store, movement_type=movement_type, start_date=start_date, end_date=end_date)
    )
