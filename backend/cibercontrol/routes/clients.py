from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from cibercontrol.core.deps import get_store
from cibercontrol.core.serialization_helpers import serialize_row
from cibercontrol.core.store import RowStore
from cibercontrol.services import client_service


router = APIRouter()


class ClientCreate(BaseModel):
    name: Optional[str] = None
    nickname: Optional[str] = None


class ClientOut(BaseModel):
    id: int
    name: Optional[str]
    nickname: Optional[str]
    display_name: str
    created_at: Optional[str]


def _client_out(client):
    data = serialize_row(client)
    data["display_name"] = client_service.display_name(client)
    return data


@router.get("/", response_model=List[ClientOut])
def list_clients(store: RowStore = Depends(get_store)):
    return [_client_out(c) for c in client_service.list_clients(store)]


@router.post("/", response_model=ClientOut, status_code=201)
def create_client(data: ClientCreate, store: RowStore = Depends(get_store)):
    return _client_out(client_service.add_client(store, data.name, data.nickname))


@router.get("/{client_id}", response_model=ClientOut)
def get_client(client_id: int, store: RowStore = Depends(get_store)):
    return _client_out(client_service.get_client(store, client_id))
