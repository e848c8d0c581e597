from __future__ import annotations

import logging
from typing import List, Optional

from cibercontrol.core.errors import NotFoundError, ValidationError
from cibercontrol.core.store import Row, RowStore


logger = logging.getLogger(__name__)


def _normalize_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def display_name(client: Optional[Row]) -> str:
    """Apodo si lo tiene, si no el nombre."""
    if not client:
        return "Cliente desconocido"
    return client.get("nickname") or client.get("name") or "Cliente desconocido"


def add_client(store: RowStore, name: Optional[str], nickname: Optional[str] = None) -> Row:
    normalized_name = _normalize_text(name)
    if not normalized_name:
        raise ValidationError("Client name is required")
    client = store.insert("clients", {"name": normalized_name, "nickname": _normalize_text(nickname)})
    logger.info("client created id=%s name=%s", client["id"], client["name"])
    return client


def get_client(store: RowStore, client_id: int) -> Row:
    client = store.get("clients", client_id)
    if not client:
        raise NotFoundError("Client not found")
    return client


def list_clients(store: RowStore) -> List[Row]:
    return store.select("clients", order_by="name")
