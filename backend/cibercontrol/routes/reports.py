import io
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from cibercontrol.core.deps import get_store
from cibercontrol.core.serialization_helpers import serialize_row, serialize_rows
from cibercontrol.core.store import RowStore
from cibercontrol.routes.sessions import SessionOut
from cibercontrol.services import report_service


router = APIRouter()


class CashReport(BaseModel):
    total_yape: float
    total_plin: float
    total_cash: float
    total_debt: float
    pending_active_sessions: float  # Por cobrar (sesiones abiertas)
    total_income: float
    total_expense: float
    debt_payments_yape: float
    debt_payments_plin: float
    debt_payments_cash: float
    yape_with_debt_payments: float
    plin_with_debt_payments: float
    cash_drawer: float  # Efectivo en caja: cobros + abonos + ingresos
    total_sale: float
    total_general: float


class DailyTotals(BaseModel):
    date: str
    total_amount: float
    yape: float
    plin: float
    cash: float
    debt: float


class ProductSales(BaseModel):
    product_name: str
    total_quantity: int
    total_amount: float


class SessionHistoryRow(SessionOut):
    client_name: str
    business_date: str


@router.get("/cash", response_model=CashReport)
def cash_report(
    start_date: date = Query(..., description="Día contable inicial (06:00 hora local)"),
    end_date: Optional[date] = Query(None, description="Día contable final (hasta sus 06:00); igual al inicial = un día completo"),
    store: RowStore = Depends(get_store),
):
    return serialize_row(report_service.cash_report(store, start_date, end_date))


@router.get("/sessions/monthly", response_model=List[DailyTotals])
def sessions_by_month(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    store: RowStore = Depends(get_store),
):
    return report_service.sessions_by_month(store, year, month)


@router.get("/products", response_model=List[ProductSales])
def product_sales(
    start_date: date = Query(...),
    end_date: Optional[date] = Query(None),
    product_name: Optional[str] = Query(None),
    store: RowStore = Depends(get_store),
):
    return serialize_rows(report_service.product_sales(store, start_date, end_date, product_name=product_name))


@router.get("/sessions", response_model=List[SessionHistoryRow])
def session_history(
    pc_number: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    status: Optional[str] = Query(None, description="active | inactive"),
    store: RowStore = Depends(get_store),
):
    return serialize_rows(
        report_service.session_history(store, pc_number=pc_number, start_date=start_date, end_date=end_date, status=status)
    )


@router.get("/sessions/export")
def export_sessions(
    start_date: date = Query(...),
    end_date: Optional[date] = Query(None),
    store: RowStore = Depends(get_store),
):
    """Exportar sesiones cerradas a Excel"""
    content = report_service.export_sessions_xlsx(store, start_date, end_date)
    filename = f"sesiones_{start_date.isoformat()}_{(end_date or start_date).isoformat()}.xlsx"
    return StreamingResponse(
        io.BytesIO(content),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
