"""
Deudas de clientes y sus abonos.

Una deuda nace al cobrar una sesión (``session_service.close_session``). Cada
abono se guarda en ``debits_details`` y descuenta el saldo. El estado es
derivado: pagada (True) si y solo si el saldo llegó a 0.

El saldo guardado en ``debits.amount`` es un cache; la fuente de verdad es
``original_amount - sum(abonos)``. ``debit_balance`` lo recalcula y lo
corrige si no coincide.
"""
import logging
from datetime import date
from decimal import Decimal
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from cibercontrol.core.business_day import optional_bounds
from cibercontrol.core.errors import ConflictError, NotFoundError, ValidationError
from cibercontrol.core.store import Row, RowStore
from cibercontrol.models.debit import PAYMENT_METHODS
from cibercontrol.services import client_service
from cibercontrol.services.reconciliation import ZERO, apply_abono, money
from cibercontrol.services.status_history_service import create_status_history


logger = logging.getLogger(__name__)


@dataclass
class AbonoResult:
    detail: Row
    debit: Row
    replayed: bool = False


def get_debit(store: RowStore, debit_id: int) -> Row:
    debit = store.get("debits", debit_id)
    if not debit:
        raise NotFoundError("Debt not found")
    return debit


def list_debit_details(store: RowStore, debit_id: int) -> List[Row]:
    return store.select("debits_details", eq={"debts_id": debit_id}, order_by="created_at")


def ledger_balance(store: RowStore, debit: Row) -> Decimal:
    """original_amount menos la suma de abonos registrados."""
    paid = sum((money(d["amount"]) for d in list_debit_details(store, debit["id"])), ZERO)
    return money(money(debit["original_amount"]) - paid)


def debit_balance(store: RowStore, debit_id: int) -> Row:
    """
    Lectura defensiva: recalcula el saldo desde los abonos y corrige la fila
    si quedó desfasada (p.ej. un abono guardado sin actualizar la deuda).
    """
    debit = get_debit(store, debit_id)
    balance = ledger_balance(store, debit)
    settled = balance <= 0
    if money(debit["amount"]) != balance or bool(debit["status"]) != settled:
        logger.warning(
            "debit %s out of sync: stored amount=%s status=%s, ledger=%s",
            debit_id, debit["amount"], debit["status"], balance,
        )
        debit = store.update("debits", debit_id, {"amount": balance, "status": settled})
    return debit


def post_abono(
    store: RowStore,
    debit_id: int,
    amount: Any,
    method: str = "cash",
    detail: Optional[str] = None,
    idempotency_key: Optional[str] = None,
    operator: Optional[str] = None,
) -> AbonoResult:
    """
    Registra un abono sobre una deuda pendiente.

    Con ``idempotency_key`` un reintento de la misma operación devuelve el
    abono ya registrado sin volver a descontarlo.

    Raises:
        ValidationError: monto <= 0, mayor al saldo o método desconocido
        ConflictError: la deuda ya está pagada o cambió durante el abono
    """
    if method not in PAYMENT_METHODS:
        raise ValidationError(f"Invalid payment method: {method}")
    amount = money(amount)

    if idempotency_key:
        previous = store.first("debits_details", eq={"idempotency_key": idempotency_key})
        if previous:
            if previous["debts_id"] != debit_id:
                raise ConflictError("Idempotency key already used for another debt")
            logger.info("abono replay key=%s debit=%s", idempotency_key, debit_id)
            return AbonoResult(detail=previous, debit=get_debit(store, debit_id), replayed=True)

    with store.transaction():
        debit = get_debit(store, debit_id)
        if debit["status"]:
            raise ConflictError("Debt is already settled")

        balance = ledger_balance(store, debit)
        new_balance, settled = apply_abono(balance, amount)

        posted = store.insert(
            "debits_details",
            {
                "debts_id": debit_id,
                "amount": amount,
                "payment_method": method,
                "details": (detail or "").strip() or None,
                "idempotency_key": idempotency_key,
            },
        )
        updated = store.update(
            "debits",
            debit_id,
            {"amount": new_balance, "status": settled},
            expect={"status": False, "amount": debit["amount"]},
        )
        if updated is None:
            raise ConflictError("Debt changed while registering the payment, reload and try again")

        if settled:
            create_status_history(
                store,
                entity_type="debit",
                entity_id=debit_id,
                old_status="outstanding",
                new_status="settled",
                operator=operator,
                notes=f"Abono de {amount} ({method})",
            )

    logger.info("abono debit=%s amount=%s method=%s balance=%s", debit_id, amount, method, new_balance)
    return AbonoResult(detail=posted, debit=updated)


def list_debits(
    store: RowStore,
    client_id: Optional[int] = None,
    status: Optional[bool] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Row]:
    eq: Dict[str, Any] = {}
    if client_id is not None:
        eq["client_id"] = client_id
    if status is not None:
        eq["status"] = status
    gte = lt = None
    bounds = optional_bounds(start_date, end_date)
    if bounds:
        gte, lt = {"created_at": bounds[0]}, {"created_at": bounds[1]}
    return store.select("debits", eq=eq or None, gte=gte, lt=lt, order_by="created_at", desc=True)


def client_debt_summary(
    store: RowStore,
    status: Optional[bool] = False,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """Total adeudado (o pagado) por cliente, mayor primero."""
    debits = list_debits(store, status=status, start_date=start_date, end_date=end_date)
    clients = {c["id"]: c for c in client_service.list_clients(store)}

    grouped: Dict[Any, Dict[str, Any]] = {}
    for debit in debits:
        key = debit["client_id"]
        entry = grouped.get(key)
        if entry is None:
            client = clients.get(key)
            entry = {
                "client_id": key,
                "client_name": client_service.display_name(client) if client else (debit["client_name"] or "Cliente desconocido"),
                "debit_count": 0,
                "total_amount": ZERO,
            }
            grouped[key] = entry
        entry["debit_count"] += 1
        entry["total_amount"] = money(entry["total_amount"] + money(debit["amount"]))

    return sorted(grouped.values(), key=lambda e: e["total_amount"], reverse=True)
