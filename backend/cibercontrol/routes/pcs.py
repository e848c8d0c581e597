from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from cibercontrol.core.deps import get_store
from cibercontrol.core.serialization_helpers import serialize_row, serialize_rows
from cibercontrol.core.store import RowStore
from cibercontrol.routes.sessions import SessionOut
from cibercontrol.services import pc_service, session_service


router = APIRouter()


class PCOut(BaseModel):
    id: int
    number: str
    status: str
    group: Optional[int]
    position: Optional[dict]
    created_at: Optional[str]

    class Config:
        from_attributes = True


class PCStatusUpdate(BaseModel):
    status: str  # "available" | "maintenance"


class OpenSessionRequest(BaseModel):
    client_id: int
    optional_client: Optional[str] = None
    mode: Optional[str] = None


@router.get("/", response_model=List[PCOut])
def list_pcs(
    status: Optional[str] = Query(None, description="available | occupied | maintenance"),
    store: RowStore = Depends(get_store),
):
    """PCs ordenadas por número (PC2 antes que PC10)"""
    return serialize_rows(pc_service.list_pcs(store, status=status))


@router.patch("/{pc_id}/status", response_model=PCOut)
def update_pc_status(pc_id: int, data: PCStatusUpdate, store: RowStore = Depends(get_store)):
    return serialize_row(pc_service.set_pc_status(store, pc_id, data.status))


@router.get("/{pc_id}/session", response_model=Optional[SessionOut])
def get_active_session(pc_id: int, store: RowStore = Depends(get_store)):
    pc_service.get_pc(store, pc_id)
    return serialize_row(session_service.get_active_session(store, pc_id))


@router.post("/{pc_id}/session", response_model=SessionOut, status_code=201)
def open_session(pc_id: int, data: OpenSessionRequest, store: RowStore = Depends(get_store)):
    """Abrir sesión: la PC debe estar libre"""
    session = session_service.open_session(
        store,
        pc_id=pc_id,
        client_id=data.client_id,
        optional_client=data.optional_client,
        mode=data.mode,
    )
    return serialize_row(session)
