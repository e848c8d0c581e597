import io
from datetime import date, datetime, timezone
from decimal import Decimal

import pandas as pd
import pytest

from cibercontrol.core.business_day import business_date
from cibercontrol.core.errors import ValidationError
from cibercontrol.services import accounting_service, debt_service, report_service


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def closed_sessions(store, make_pc, make_client):
    pc = make_pc("PC03")
    client = make_client("Pedro", "Pepe")

    def closed(start, total, cash="0", yape="0", plin="0", debt="0"):
        return store.insert(
            "sessions",
            {
                "client_id": client["id"],
                "pc_id": pc["id"],
                "pc_number": pc["number"],
                "start_time": start,
                "end_time": start,
                "status": "inactive",
                "total_amount": Decimal(total),
                "cash": Decimal(cash),
                "yape": Decimal(yape),
                "plin": Decimal(plin),
                "debt": Decimal(debt),
            },
        )

    return [
        # 2024-05-01 10:00 Lima
        closed(utc(2024, 5, 1, 15, 0), "10.00", cash="6.00", yape="4.00"),
        # 2024-05-02 02:00 Lima, todavia dia contable 1
        closed(utc(2024, 5, 2, 7, 0), "8.00", plin="5.00", debt="3.00"),
        # 2024-05-02 07:00 Lima, dia 2
        closed(utc(2024, 5, 2, 12, 0), "4.00", cash="4.00"),
    ]


def test_cash_report_uses_business_day(store, closed_sessions):
    report = report_service.cash_report(store, date(2024, 5, 1))

    assert report["total_cash"] == Decimal("6.00")
    assert report["total_yape"] == Decimal("4.00")
    assert report["total_plin"] == Decimal("5.00")
    assert report["total_debt"] == Decimal("3.00")
    assert report["total_sale"] == Decimal("18.00")


def test_cash_report_range_stops_at_end_date_six_am(store, closed_sessions):
    # [01 06:00, 02 06:00): la sesion de las 07:00 del dia 2 queda fuera
    report = report_service.cash_report(store, date(2024, 5, 1), date(2024, 5, 2))
    assert report["total_cash"] == Decimal("6.00")

    report = report_service.cash_report(store, date(2024, 5, 1), date(2024, 5, 3))
    assert report["total_cash"] == Decimal("10.00")


def test_cash_report_combines_movements_and_abonos(store, make_pc, make_client):
    pc = make_pc()
    client = make_client()
    session = store.insert(
        "sessions",
        {"client_id": client["id"], "pc_id": pc["id"], "pc_number": pc["number"], "status": "inactive", "debt": Decimal("4.00")},
    )
    debit = store.insert(
        "debits",
        {"client_id": client["id"], "session_id": session["id"], "amount": Decimal("4.00"), "original_amount": Decimal("4.00"), "status": False},
    )
    debt_service.post_abono(store, debit["id"], "1.00", method="cash")
    debt_service.post_abono(store, debit["id"], "2.00", method="yape")
    accounting_service.add_movement(store, "ingreso", "10.00", "Venta de audifonos")
    accounting_service.add_movement(store, "egreso", "3.00", "Limpieza")

    today = business_date(datetime.now(timezone.utc))
    report = report_service.cash_report(store, today)

    assert report["debt_payments_cash"] == Decimal("1.00")
    assert report["debt_payments_yape"] == Decimal("2.00")
    assert report["total_income"] == Decimal("10.00")
    assert report["total_expense"] == Decimal("3.00")
    assert report["cash_drawer"] == Decimal("11.00")
    assert report["total_general"] == Decimal("14.00")


def test_sessions_by_month_fills_every_day(store, closed_sessions):
    rows = report_service.sessions_by_month(store, 2024, 5)

    assert len(rows) == 31
    by_date = {r["date"]: r for r in rows}
    assert by_date["2024-05-01"]["total_amount"] == 18.0
    assert by_date["2024-05-01"]["debt"] == 3.0
    assert by_date["2024-05-02"]["cash"] == 4.0
    assert by_date["2024-05-15"]["total_amount"] == 0.0


def test_sessions_by_month_without_sessions(store):
    rows = report_service.sessions_by_month(store, 2024, 2)
    assert len(rows) == 29
    assert all(r["total_amount"] == 0.0 for r in rows)


def test_session_history_uses_display_name(store, closed_sessions):
    rows = report_service.session_history(store, pc_number="PC03", start_date=date(2024, 5, 2))

    assert [r["id"] for r in rows] == [closed_sessions[2]["id"]]
    assert rows[0]["client_name"] == "Pepe"
    assert rows[0]["business_date"] == date(2024, 5, 2)


def test_product_sales_groups_by_name(store, make_pc, make_client):
    pc = make_pc()
    session = store.insert("sessions", {"pc_id": pc["id"], "pc_number": pc["number"], "status": "active", "client_id": make_client()["id"]})
    when = utc(2024, 5, 1, 20, 0)
    for name, quantity, price in [("Gaseosa", 2, "2.50"), ("Gaseosa", 1, "2.50"), ("Galletas", 1, "1.00")]:
        store.insert(
            "consumptions",
            {
                "session_id": session["id"],
                "product_name": name,
                "quantity": quantity,
                "price": Decimal(price),
                "amount": Decimal(price) * quantity,
                "created_at": when,
            },
        )

    rows = report_service.product_sales(store, date(2024, 5, 1))

    assert rows[0] == {"product_name": "Gaseosa", "total_quantity": 3, "total_amount": Decimal("7.50")}
    assert rows[1]["product_name"] == "Galletas"


def test_export_sessions_xlsx(store, closed_sessions):
    content = report_service.export_sessions_xlsx(store, date(2024, 5, 1), date(2024, 5, 3))

    df = pd.read_excel(io.BytesIO(content), sheet_name="Sesiones", engine="openpyxl")
    assert list(df.columns) == report_service.EXPORT_COLUMNS
    assert len(df) == 3
    assert df["total_amount"].sum() == pytest.approx(22.0)


def test_end_date_without_start_date_is_rejected(store, closed_sessions):
    with pytest.raises(ValidationError):
        report_service.session_history(store, end_date=date(2024, 5, 2))
    with pytest.raises(ValidationError):
        debt_service.list_debits(store, end_date=date(2024, 5, 2))
    with pytest.raises(ValidationError):
        accounting_service.list_movements(store, end_date=date(2024, 5, 2))
