import logging
from datetime import date
from typing import Any, List, Optional

from cibercontrol.core.business_day import optional_bounds
from cibercontrol.core.errors import ValidationError
from cibercontrol.core.store import Row, RowStore
from cibercontrol.models.accounting_movement import MOVEMENT_TYPES
from cibercontrol.services.reconciliation import money


logger = logging.getLogger(__name__)


def add_movement(store: RowStore, movement_type: str, amount: Any, detail: Optional[str]) -> Row:
    """Ingreso o egreso manual de caja, sin relación con sesiones."""
    if movement_type not in MOVEMENT_TYPES:
        raise ValidationError(f"Invalid movement type: {movement_type}")
    amount = money(amount)
    if amount <= 0:
        raise ValidationError("Movement amount must be positive")
    detail = (detail or "").strip()
    if not detail:
        raise ValidationError("Movement detail is required")

    movement = store.insert("mov_contable", {"type": movement_type, "amount": amount, "detail": detail})
    logger.info("movement %s %s %s: %s", movement["id"], movement_type, amount, detail)
    return movement


def list_movements(
    store: RowStore,
    movement_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Row]:
    if movement_type is not None and movement_type not in MOVEMENT_TYPES:
        raise ValidationError(f"Invalid movement type: {movement_type}")
    gte = lt = None
    bounds = optional_bounds(start_date, end_date)
    if bounds:
        gte, lt = {"created_at": bounds[0]}, {"created_at": bounds[1]}
    return store.select(
        "mov_contable",
        eq={"type": movement_type} if movement_type else None,
        gte=gte,
        lt=lt,
        order_by="created_at",
        desc=True,
    )
