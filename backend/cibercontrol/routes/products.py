from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, condecimal

from cibercontrol.core.deps import get_store
from cibercontrol.core.serialization_helpers import serialize_row, serialize_rows
from cibercontrol.core.store import RowStore
from cibercontrol.services import product_service


router = APIRouter()


class ProductCreate(BaseModel):
    name: str
    price: condecimal(max_digits=10, decimal_places=2)
    group: Optional[int] = None


class ProductOut(BaseModel):
    id: int
    name: str
    price: float
    group: Optional[int]

    class Config:
        from_attributes = True


@router.get("/", response_model=List[ProductOut])
def list_products(
    group: Optional[int] = Query(None, description="Grupo de PCs; sin grupo lista todo"),
    store: RowStore = Depends(get_store),
):
    return serialize_rows(product_service.list_products(store, group=group))


@router.post("/", response_model=ProductOut, status_code=201)
def create_product(data: ProductCreate, store: RowStore = Depends(get_store)):
    return serialize_row(product_service.add_product_to_catalog(store, data.name, data.price, group=data.group))
