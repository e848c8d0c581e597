from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query
from pydantic import BaseModel, condecimal

from cibercontrol.core.deps import get_operator, get_store
from cibercontrol.core.serialization_helpers import serialize_row, serialize_rows
from cibercontrol.core.store import RowStore
from cibercontrol.routes.sessions import DebitOut
from cibercontrol.services import debt_service


router = APIRouter()


class DebitDetailOut(BaseModel):
    id: int
    debts_id: int
    amount: float
    payment_method: str
    details: Optional[str]
    idempotency_key: Optional[str]
    created_at: Optional[str]


class AbonoRequest(BaseModel):
    amount: condecimal(max_digits=10, decimal_places=2)
    payment_method: str = "cash"  # cash | yape | plin
    details: Optional[str] = None


class AbonoResponse(BaseModel):
    detail: DebitDetailOut
    debit: DebitOut
    replayed: bool


class ClientDebtSummary(BaseModel):
    client_id: Optional[int]
    client_name: str
    debit_count: int
    total_amount: float


@router.get("/", response_model=List[DebitOut])
def list_debits(
    client_id: Optional[int] = Query(None),
    status: Optional[bool] = Query(None, description="true = pagada, false = pendiente"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    store: RowStore = Depends(get_store),
):
    return serialize_rows(
        debt_service.list_debits(store, client_id=client_id, status=status, start_date=start_date, end_date=end_date)
    )


@router.get("/summary", response_model=List[ClientDebtSummary])
def client_debt_summary(
    status: Optional[bool] = Query(False),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    store: RowStore = Depends(get_store),
):
    """Deuda agrupada por cliente"""
    return serialize_rows(debt_service.client_debt_summary(store, status=status, start_date=start_date, end_date=end_date))


@router.get("/{debit_id}", response_model=DebitOut)
def get_debit(debit_id: int, store: RowStore = Depends(get_store)):
    return serialize_row(debt_service.debit_balance(store, debit_id))


@router.get("/{debit_id}/details", response_model=List[DebitDetailOut])
def list_debit_details(debit_id: int, store: RowStore = Depends(get_store)):
    debt_service.get_debit(store, debit_id)
    return serialize_rows(debt_service.list_debit_details(store, debit_id))


@router.post("/{debit_id}/payments", response_model=AbonoResponse, status_code=201)
def post_abono(
    debit_id: int,
    data: AbonoRequest,
    idempotency_key: Optional[str] = Header(None),
    store: RowStore = Depends(get_store),
    operator: Optional[str] = Depends(get_operator),
):
    """Registrar un abono. Reenviar con el mismo Idempotency-Key no duplica el pago."""
    result = debt_service.post_abono(
        store,
        debit_id,
        data.amount,
        method=data.payment_method,
        detail=data.details,
        idempotency_key=idempotency_key,
        operator=operator,
    )
    return {
        "detail": serialize_row(result.detail),
        "debit": serialize_row(result.debit),
        "replayed": result.replayed,
    }
