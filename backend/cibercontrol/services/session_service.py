"""
Ciclo de vida de una sesión de alquiler de PC.

Abrir, mover, cobrar (cerrar) y eliminar sesiones. Cada operación toca la
sesión y una o dos PCs; todo se hace dentro de ``store.transaction()`` y cada
cambio de estado va con compare-and-swap (``expect=``) para que dos cajeros
actuando sobre la misma PC no se pisen: el segundo recibe ConflictError.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from cibercontrol.core.errors import ConflictError, NotFoundError, ValidationError
from cibercontrol.core.store import Row, RowStore
from cibercontrol.models.base import utcnow
from cibercontrol.models.pc import PC_AVAILABLE, PC_OCCUPIED
from cibercontrol.models.rental_session import SESSION_ACTIVE, SESSION_INACTIVE
from cibercontrol.services import client_service, pc_service
from cibercontrol.services.reconciliation import (
    Reconciliation,
    Tender,
    ZERO,
    money,
    paid_total,
    reconcile,
    session_total,
)
from cibercontrol.services.status_history_service import create_status_history


logger = logging.getLogger(__name__)


@dataclass
class CloseResult:
    session: Row
    debit: Row
    reconciliation: Reconciliation


def get_session(store: RowStore, session_id: int) -> Row:
    session = store.get("sessions", session_id)
    if not session:
        raise NotFoundError("Session not found")
    return session


def get_active_session(store: RowStore, pc_id: int) -> Optional[Row]:
    return store.first("sessions", eq={"pc_id": pc_id, "status": SESSION_ACTIVE})


def require_active(session: Row) -> Row:
    if session["status"] != SESSION_ACTIVE:
        raise ConflictError("Session is already closed")
    return session


def _release_pc(store: RowStore, pc_id: Optional[int]) -> None:
    if pc_id is None:
        return
    released = store.update("pcs", pc_id, {"status": PC_AVAILABLE}, expect={"status": PC_OCCUPIED})
    if released is None:
        # La PC ya no estaba ocupada (p.ej. la pusieron en mantenimiento a mano)
        logger.warning("pc id=%s was not occupied when releasing it", pc_id)


def open_session(
    store: RowStore,
    pc_id: Optional[int],
    client_id: Optional[int],
    optional_client: Optional[str] = None,
    mode: Optional[str] = None,
) -> Row:
    """
    Abre una sesión para un cliente en una PC libre.

    La disponibilidad se vuelve a verificar contra la base justo antes de
    insertar: lo que muestra la pantalla puede estar desactualizado.

    Raises:
        ValidationError: falta la PC o el cliente
        ConflictError: la PC no está libre o ya tiene una sesión activa
    """
    if not pc_id or not client_id:
        raise ValidationError("A PC and a client are required to open a session")

    with store.transaction():
        pc = pc_service.get_pc(store, pc_id)
        client_service.get_client(store, client_id)

        if pc["status"] != PC_AVAILABLE:
            logger.warning("open rejected: pc %s is %s", pc["number"], pc["status"])
            raise ConflictError(f"PC {pc['number']} is not available ({pc['status']})")
        if get_active_session(store, pc_id):
            logger.warning("open rejected: pc %s already has an active session", pc["number"])
            raise ConflictError("A session is already active for this seat")

        reserved = store.update("pcs", pc_id, {"status": PC_OCCUPIED}, expect={"status": PC_AVAILABLE})
        if reserved is None:
            raise ConflictError("A session is already active for this seat")

        # El indice unico (pc_id, status='active') rechaza un segundo insert concurrente
        session = store.insert(
            "sessions",
            {
                "client_id": client_id,
                "pc_id": pc_id,
                "pc_number": pc["number"],
                "start_time": utcnow(),
                "status": SESSION_ACTIVE,
                "mode": mode,
                "optional_client": optional_client,
            },
        )

    logger.info("session %s opened on pc %s for client %s", session["id"], pc["number"], client_id)
    return session


def move_session(store: RowStore, session_id: int, target_pc_id: int) -> Row:
    """
    Pasa una sesión activa a otra PC libre.

    Orden de escritura: reservar destino, mover la sesión, liberar origen.
    """
    with store.transaction():
        session = require_active(get_session(store, session_id))
        origin_pc_id = session["pc_id"]
        if origin_pc_id == target_pc_id:
            raise ValidationError("Session is already on that PC")

        target = pc_service.get_pc(store, target_pc_id)
        if target["status"] != PC_AVAILABLE:
            raise ConflictError(f"PC {target['number']} is not available ({target['status']})")

        reserved = store.update("pcs", target_pc_id, {"status": PC_OCCUPIED}, expect={"status": PC_AVAILABLE})
        if reserved is None:
            raise ConflictError(f"PC {target['number']} was taken by another session")

        moved = store.update(
            "sessions",
            session_id,
            {"pc_id": target_pc_id, "pc_number": target["number"]},
            expect={"status": SESSION_ACTIVE, "pc_id": origin_pc_id},
        )
        if moved is None:
            raise ConflictError("Session changed while moving it, reload and try again")

        _release_pc(store, origin_pc_id)

    logger.info("session %s moved from %s to %s", session_id, session["pc_number"], target["number"])
    return moved


def register_prepayment(
    store: RowStore,
    session_id: int,
    yape: Any = None,
    plin: Any = None,
    cash: Any = None,
) -> Row:
    """Guarda pagos recibidos antes de cobrar (solo sesiones activas)."""
    patch: Dict[str, Any] = {}
    for name, value in (("yape", yape), ("plin", plin), ("cash", cash)):
        if value is None:
            continue
        amount = money(value)
        if amount < 0:
            raise ValidationError(f"{name} cannot be negative")
        patch[name] = amount
    if not patch:
        raise ValidationError("No payment amounts given")

    updated = store.update("sessions", session_id, patch, expect={"status": SESSION_ACTIVE})
    if updated is None:
        get_session(store, session_id)
        raise ConflictError("Session is already closed")
    logger.info("session %s prepayment %s", session_id, patch)
    return updated


def update_observation(store: RowStore, session_id: int, observation: Optional[str]) -> Row:
    """Única edición permitida sobre una sesión cerrada."""
    get_session(store, session_id)
    text = (observation or "").strip() or None
    return store.update("sessions", session_id, {"observation": text})


def session_summary(store: RowStore, session_id: int) -> Dict[str, Any]:
    """Resumen de pago: total, adelantos y lo que falta cobrar."""
    session = get_session(store, session_id)
    consumptions = store.select("consumptions", eq={"session_id": session_id})
    if session["status"] == SESSION_ACTIVE:
        total = session_total(consumptions)
    else:
        total = money(session["total_amount"])
    advance = money(session["advance_payment"])
    registered = money(money(session["cash"]) + money(session["yape"]) + money(session["plin"]) + money(session["money_advance"]))
    pending = max(total - advance - registered, ZERO)
    return {
        "session_id": session_id,
        "status": session["status"],
        "total_amount": total,
        "advance_payment": advance,
        "registered_payments": registered,
        "pending": money(pending),
        "consumption_count": len(consumptions),
    }


def close_session(
    store: RowStore,
    session_id: int,
    cash: Any = None,
    yape: Any = None,
    plin: Any = None,
    money_advance: Any = None,
    debt_override: Any = None,
    override_reason: Optional[str] = None,
    observation: Optional[str] = None,
    optional_client: Optional[str] = None,
    operator: Optional[str] = None,
) -> CloseResult:
    """
    Cobra y cierra una sesión.

    El total se recalcula desde los consumos en este momento. Los montos no
    enviados toman lo ya registrado en la sesión (pagos previos). Siempre se
    crea una fila en ``debits``: pendiente si queda deuda, pagada si no.

    Raises:
        ConflictError: la sesión ya estaba cerrada
        ValidationError: montos negativos o ajuste manual sin motivo
    """
    if debt_override is not None and not (override_reason or "").strip():
        raise ValidationError("A reason is required to override the computed debt")

    with store.transaction():
        session = require_active(get_session(store, session_id))
        consumptions = store.select("consumptions", eq={"session_id": session_id})

        tender = Tender.of(
            cash=session["cash"] if cash is None else cash,
            yape=session["yape"] if yape is None else yape,
            plin=session["plin"] if plin is None else plin,
            money_advance=session["money_advance"] if money_advance is None else money_advance,
        )
        result = reconcile(
            session_total(consumptions),
            tender,
            advance_payment=paid_total(consumptions),
            debt_override=debt_override,
        )

        patch = {
            "end_time": utcnow(),
            "status": SESSION_INACTIVE,
            "total_amount": result.total,
            "advance_payment": result.advance_payment,
            "cash": tender.cash,
            "yape": tender.yape,
            "plin": tender.plin,
            "money_advance": tender.money_advance,
            "debt": result.debt,
            "change": result.change,
            "closed_by": operator,
        }
        if observation is not None:
            patch["observation"] = observation.strip() or None
        if optional_client is not None:
            patch["optional_client"] = optional_client.strip() or None
        if result.overridden:
            patch["debt_override_reason"] = override_reason.strip()

        closed = store.update("sessions", session_id, patch, expect={"status": SESSION_ACTIVE})
        if closed is None:
            raise ConflictError("Session is already closed")

        _release_pc(store, session["pc_id"])

        client = store.get("clients", session["client_id"]) if session["client_id"] else None
        debit = store.insert(
            "debits",
            {
                "client_id": session["client_id"],
                "client_name": closed["optional_client"] or client_service.display_name(client),
                "pc_id": session["pc_id"],
                "pc_number": session["pc_number"],
                "session_id": session_id,
                "amount": result.debt,
                "original_amount": result.debt,
                "status": result.debt <= 0,
            },
        )

        if result.overridden:
            create_status_history(
                store,
                entity_type="session",
                entity_id=session_id,
                old_status=SESSION_ACTIVE,
                new_status=SESSION_INACTIVE,
                operator=operator,
                notes=f"Deuda ajustada de {result.computed_debt} a {result.debt}: {override_reason.strip()}",
            )

    logger.info(
        "session %s closed total=%s tendered=%s debt=%s change=%s debit=%s",
        session_id, result.total, result.tendered, result.debt, result.change, debit["id"],
    )
    return CloseResult(session=closed, debit=debit, reconciliation=result)


def delete_session(store: RowStore, session_id: int, operator: Optional[str] = None) -> None:
    """
    Deshace una apertura equivocada: borra consumos y sesión y libera la PC.

    No genera deuda. Solo para sesiones activas; queda registro en
    status_history.
    """
    with store.transaction():
        session = require_active(get_session(store, session_id))
        removed = store.delete_where("consumptions", eq={"session_id": session_id})
        store.delete("sessions", session_id)
        _release_pc(store, session["pc_id"])
        create_status_history(
            store,
            entity_type="session",
            entity_id=session_id,
            old_status=SESSION_ACTIVE,
            new_status="deleted",
            operator=operator,
            notes=f"PC {session['pc_number']}, cliente {session['client_id']}, {removed} consumo(s) eliminados",
        )
    logger.warning("session %s deleted by %s (pc %s)", session_id, operator or "unknown", session["pc_number"])
