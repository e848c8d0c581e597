"""
Reportes: solo lectura y agregación sobre sesiones, consumos, deudas y
movimientos. Todos los rangos de fecha son días contables (06:00 a 06:00,
hora de Lima), ver ``core.business_day``.
"""
import io
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pandas as pd

from cibercontrol.core.business_day import business_date, business_day_bounds, optional_bounds
from cibercontrol.core.store import Row, RowStore
from cibercontrol.models.accounting_movement import MOVEMENT_EXPENSE, MOVEMENT_INCOME
from cibercontrol.models.rental_session import SESSION_ACTIVE, SESSION_INACTIVE
from cibercontrol.services import client_service
from cibercontrol.services.reconciliation import ZERO, money


def _sum(rows: List[Row], field: str) -> Decimal:
    return money(sum((money(r.get(field)) for r in rows), ZERO))


def cash_report(store: RowStore, start_date: date, end_date: Optional[date] = None) -> Dict[str, Decimal]:
    """
    Reporte de caja del rango.

    - Cobros de sesiones por método y deuda generada
    - Por cobrar: consumos de sesiones que siguen activas
    - Ingresos / egresos manuales
    - Abonos a deudas por método
    - Totales combinados (efectivo en caja, venta, general)
    """
    start, end = business_day_bounds(start_date, end_date)
    time_range = {"gte": {"start_time": start}, "lt": {"start_time": end}}

    sessions = store.select("sessions", **time_range)
    active_ids = [s["id"] for s in sessions if s["status"] == SESSION_ACTIVE]
    pending_consumptions = store.select("consumptions", in_={"session_id": active_ids}) if active_ids else []

    movements = store.select("mov_contable", gte={"created_at": start}, lt={"created_at": end})
    abonos = store.select("debits_details", gte={"created_at": start}, lt={"created_at": end})

    total_yape = _sum(sessions, "yape")
    total_plin = _sum(sessions, "plin")
    total_cash = _sum(sessions, "cash")
    total_debt = _sum(sessions, "debt")
    pending = _sum(pending_consumptions, "amount")

    income = _sum([m for m in movements if m["type"] == MOVEMENT_INCOME], "amount")
    expense = _sum([m for m in movements if m["type"] == MOVEMENT_EXPENSE], "amount")

    abono_yape = _sum([a for a in abonos if a["payment_method"] == "yape"], "amount")
    abono_plin = _sum([a for a in abonos if a["payment_method"] == "plin"], "amount")
    abono_cash = _sum([a for a in abonos if a["payment_method"] == "cash"], "amount")

    total_sale = money(total_cash + total_yape + total_plin + total_debt)

    return {
        "total_yape": total_yape,
        "total_plin": total_plin,
        "total_cash": total_cash,
        "total_debt": total_debt,
        "pending_active_sessions": pending,
        "total_income": income,
        "total_expense": expense,
        "debt_payments_yape": abono_yape,
        "debt_payments_plin": abono_plin,
        "debt_payments_cash": abono_cash,
        "yape_with_debt_payments": money(total_yape + abono_yape),
        "plin_with_debt_payments": money(total_plin + abono_plin),
        "cash_drawer": money(total_cash + abono_cash + income),
        "total_sale": total_sale,
        "total_general": money(total_sale + abono_cash + abono_yape + abono_plin + income - expense),
    }


def sessions_by_month(store: RowStore, year: int, month: int) -> List[Row]:
    return store.rpc("get_sessions_by_month", {"p_year": year, "p_month": month})


def product_sales(
    store: RowStore,
    start_date: date,
    end_date: Optional[date] = None,
    product_name: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Cantidad y monto vendido por producto, más vendido primero."""
    start, end = business_day_bounds(start_date, end_date)
    rows = store.select(
        "consumptions",
        eq={"product_name": product_name} if product_name else None,
        gte={"created_at": start},
        lt={"created_at": end},
    )

    grouped: Dict[str, Dict[str, Any]] = {}
    for row in rows:
        entry = grouped.setdefault(
            row["product_name"],
            {"product_name": row["product_name"], "total_quantity": 0, "total_amount": ZERO},
        )
        entry["total_quantity"] += int(row["quantity"])
        entry["total_amount"] = money(entry["total_amount"] + money(row["amount"]))

    return sorted(grouped.values(), key=lambda e: (-e["total_quantity"], e["product_name"]))


def session_history(
    store: RowStore,
    pc_number: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: Optional[str] = None,
) -> List[Row]:
    """Sesiones del rango con el nombre a mostrar del cliente."""
    eq: Dict[str, Any] = {}
    if pc_number:
        eq["pc_number"] = pc_number
    if status:
        eq["status"] = status
    gte = lt = None
    bounds = optional_bounds(start_date, end_date)
    if bounds:
        gte, lt = {"start_time": bounds[0]}, {"start_time": bounds[1]}

    sessions = store.select("sessions", eq=eq or None, gte=gte, lt=lt, order_by="start_time", desc=True)
    clients = {c["id"]: c for c in client_service.list_clients(store)}
    result = []
    for session in sessions:
        row = dict(session)
        row["client_name"] = session["optional_client"] or client_service.display_name(clients.get(session["client_id"]))
        row["business_date"] = business_date(session["start_time"])
        result.append(row)
    return result


EXPORT_COLUMNS = [
    "id", "business_date", "pc_number", "client_name", "start_time", "end_time",
    "total_amount", "advance_payment", "money_advance", "cash", "yape", "plin",
    "debt", "change", "observation",
]


def export_sessions_xlsx(store: RowStore, start_date: date, end_date: Optional[date] = None) -> bytes:
    """Sesiones cerradas del rango en un archivo Excel."""
    rows = session_history(store, start_date=start_date, end_date=end_date, status=SESSION_INACTIVE)
    data = []
    for row in rows:
        item = {col: row.get(col) for col in EXPORT_COLUMNS}
        for col in ("total_amount", "advance_payment", "money_advance", "cash", "yape", "plin", "debt", "change"):
            item[col] = float(money(item[col]))
        for col in ("start_time", "end_time"):
            if item[col] is not None:
                item[col] = item[col].replace(tzinfo=None)
        data.append(item)

    df = pd.DataFrame(data, columns=EXPORT_COLUMNS)

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Sesiones", index=False)
    return output.getvalue()
