"""
Consumos (productos) cargados a una sesión activa.

``sessions.advance_payment`` guarda la suma de los consumos pagados. Se
recalcula y se guarda en la misma transacción de cualquier cambio que la
afecte: marcar/desmarcar pagado, cambiar cantidad o quitar un consumo.
"""
import logging
from decimal import Decimal
from typing import List

from cibercontrol.core.errors import ConflictError, NotFoundError, ValidationError
from cibercontrol.core.store import Row, RowStore
from cibercontrol.models.rental_session import SESSION_ACTIVE
from cibercontrol.services import product_service
from cibercontrol.services.reconciliation import line_amount, paid_total
from cibercontrol.services.session_service import get_session, require_active


logger = logging.getLogger(__name__)


def _validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or quantity is None:
        raise ValidationError("Quantity must be a positive integer")
    try:
        value = int(quantity)
    except (TypeError, ValueError):
        raise ValidationError("Quantity must be a positive integer")
    if value != quantity or value <= 0:
        raise ValidationError("Quantity must be a positive integer")
    return value


def get_consumption(store: RowStore, consumption_id: int) -> Row:
    consumption = store.get("consumptions", consumption_id)
    if not consumption:
        raise NotFoundError("Consumption not found")
    return consumption


def list_consumptions(store: RowStore, session_id: int) -> List[Row]:
    return store.select("consumptions", eq={"session_id": session_id}, order_by="created_at")


def refresh_advance_payment(store: RowStore, session_id: int) -> Decimal:
    """Recalcula y guarda el adelanto (suma de consumos pagados) de la sesión."""
    advance = paid_total(list_consumptions(store, session_id))
    updated = store.update("sessions", session_id, {"advance_payment": advance}, expect={"status": SESSION_ACTIVE})
    if updated is None:
        raise ConflictError("Session is already closed")
    return advance


def add_product(store: RowStore, session_id: int, product_id: int, quantity: int = 1) -> Row:
    """Agrega un producto a la sesión copiando nombre y precio actuales."""
    quantity = _validate_quantity(quantity)
    with store.transaction():
        require_active(get_session(store, session_id))
        product = product_service.get_product(store, product_id)
        consumption = store.insert(
            "consumptions",
            {
                "session_id": session_id,
                "product_name": product["name"],
                "quantity": quantity,
                "price": product["price"],
                "amount": line_amount(quantity, product["price"]),
                "paid": False,
            },
        )
    logger.info("session %s + %s x %s", session_id, quantity, product["name"])
    return consumption


def set_quantity(store: RowStore, consumption_id: int, quantity: int) -> Row:
    quantity = _validate_quantity(quantity)
    with store.transaction():
        consumption = get_consumption(store, consumption_id)
        require_active(get_session(store, consumption["session_id"]))
        if consumption["paid"]:
            raise ConflictError("Cannot change the quantity of a paid item")
        updated = store.update(
            "consumptions",
            consumption_id,
            {"quantity": quantity, "amount": line_amount(quantity, consumption["price"])},
            expect={"paid": False},
        )
        if updated is None:
            raise ConflictError("Item was marked as paid, reload and try again")
        refresh_advance_payment(store, consumption["session_id"])
    return updated


def toggle_paid(store: RowStore, consumption_id: int, paid: bool) -> Row:
    """Marca un consumo como pagado o no y actualiza el adelanto de la sesión."""
    with store.transaction():
        consumption = get_consumption(store, consumption_id)
        require_active(get_session(store, consumption["session_id"]))
        updated = consumption
        if bool(consumption["paid"]) != bool(paid):
            updated = store.update("consumptions", consumption_id, {"paid": bool(paid)})
        advance = refresh_advance_payment(store, consumption["session_id"])
    logger.info("consumption %s paid=%s, session %s advance=%s", consumption_id, bool(paid), consumption["session_id"], advance)
    return updated


def remove_consumption(store: RowStore, consumption_id: int) -> None:
    with store.transaction():
        consumption = get_consumption(store, consumption_id)
        require_active(get_session(store, consumption["session_id"]))
        store.delete("consumptions", consumption_id)
        refresh_advance_payment(store, consumption["session_id"])
    logger.info("consumption %s removed from session %s", consumption_id, consumption["session_id"])
