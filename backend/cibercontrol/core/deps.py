from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from cibercontrol.core.database import get_db
from cibercontrol.core.store import RowStore


def get_store(db: Session = Depends(get_db)) -> RowStore:
    return RowStore(db)


def get_operator(x_operator: Optional[str] = Header(None)) -> Optional[str]:
    """Nombre del cajero para el historial; sin autenticación."""
    if not x_operator:
        return None
    return x_operator.strip()[:255] or None
