from typing import List

from fastapi import APIRouter, Depends

from cibercontrol.core.deps import get_store
from cibercontrol.core.serialization_helpers import serialize_rows
from cibercontrol.core.store import RowStore
from cibercontrol.routes.sessions import StatusHistoryResponse
from cibercontrol.services.status_history_service import get_status_history


router = APIRouter()


@router.get("/{entity_type}/{entity_id}", response_model=List[StatusHistoryResponse])
def get_entity_history(entity_type: str, entity_id: int, store: RowStore = Depends(get_store)):
    """Historial de cambios de estado (sesiones cerradas con ajuste, eliminadas, deudas pagadas)"""
    return serialize_rows(get_status_history(store, entity_type, entity_id))
