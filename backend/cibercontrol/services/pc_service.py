import logging
from typing import List, Optional

from cibercontrol.core.errors import ConflictError, NotFoundError, ValidationError
from cibercontrol.core.store import Row, RowStore
from cibercontrol.models.pc import PC_AVAILABLE, PC_MAINTENANCE, PC_OCCUPIED, PC_STATUSES


logger = logging.getLogger(__name__)


def _pc_sort_key(pc: Row):
    # "PC7" antes que "PC12"
    digits = "".join(ch for ch in pc["number"] if ch.isdigit())
    return (int(digits) if digits else 0, pc["number"])


def list_pcs(store: RowStore, status: Optional[str] = None) -> List[Row]:
    if status is not None and status not in PC_STATUSES:
        raise ValidationError(f"Invalid PC status: {status}")
    rows = store.select("pcs", eq={"status": status} if status else None)
    return sorted(rows, key=_pc_sort_key)


def get_pc(store: RowStore, pc_id: int) -> Row:
    pc = store.get("pcs", pc_id)
    if not pc:
        raise NotFoundError("PC not found")
    return pc


def set_pc_status(store: RowStore, pc_id: int, status: str) -> Row:
    """
    Pone una PC en mantenimiento o la devuelve a disponible.

    El estado "occupied" solo lo manejan las sesiones (abrir/cerrar/mover).
    """
    if status not in (PC_AVAILABLE, PC_MAINTENANCE):
        raise ValidationError("Only 'available' and 'maintenance' can be set manually")
    pc = get_pc(store, pc_id)
    if pc["status"] == PC_OCCUPIED:
        raise ConflictError(f"PC {pc['number']} has an active session")
    if pc["status"] == status:
        return pc

    updated = store.update("pcs", pc_id, {"status": status}, expect={"status": pc["status"]})
    if updated is None:
        raise ConflictError(f"PC {pc['number']} changed status, reload and try again")
    logger.info("pc %s status %s -> %s", pc["number"], pc["status"], status)
    return updated
