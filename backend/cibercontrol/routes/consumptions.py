from fastapi import APIRouter, Depends
from pydantic import BaseModel

from cibercontrol.core.deps import get_store
from cibercontrol.core.serialization_helpers import serialize_row
from cibercontrol.core.store import RowStore
from cibercontrol.routes.sessions import ConsumptionOut
from cibercontrol.services import consumption_service


router = APIRouter()


class QuantityUpdate(BaseModel):
    quantity: int


class PaidUpdate(BaseModel):
    paid: bool


@router.patch("/{consumption_id}/quantity", response_model=ConsumptionOut)
def update_quantity(consumption_id: int, data: QuantityUpdate, store: RowStore = Depends(get_store)):
    return serialize_row(consumption_service.set_quantity(store, consumption_id, data.quantity))


@router.patch("/{consumption_id}/paid", response_model=ConsumptionOut)
def update_paid(consumption_id: int, data: PaidUpdate, store: RowStore = Depends(get_store)):
    return serialize_row(consumption_service.toggle_paid(store, consumption_id, data.paid))


@router.delete("/{consumption_id}", status_code=204)
def remove_consumption(consumption_id: int, store: RowStore = Depends(get_store)):
    consumption_service.remove_consumption(store, consumption_id)
