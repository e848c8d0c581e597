from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, condecimal

from cibercontrol.core.deps import get_operator, get_store
from cibercontrol.core.serialization_helpers import serialize_row, serialize_rows
from cibercontrol.core.store import RowStore
from cibercontrol.services import consumption_service, session_service
from cibercontrol.services.status_history_service import get_status_history


router = APIRouter()

Money = condecimal(max_digits=10, decimal_places=2)


class SessionOut(BaseModel):
    id: int
    client_id: Optional[int]
    pc_id: Optional[int]
    pc_number: str
    start_time: Optional[str]
    end_time: Optional[str]
    mode: Optional[str]
    status: str
    total_amount: Optional[float]
    advance_payment: float
    money_advance: float
    yape: float
    plin: float
    cash: float
    debt: float
    change: float
    observation: Optional[str]
    optional_client: Optional[str]
    debt_override_reason: Optional[str]
    closed_by: Optional[str]

    class Config:
        from_attributes = True


class DebitOut(BaseModel):
    id: int
    client_id: Optional[int]
    client_name: Optional[str]
    pc_id: Optional[int]
    pc_number: Optional[str]
    session_id: Optional[int]
    amount: float
    original_amount: float
    status: bool
    created_at: Optional[str]


class ConsumptionOut(BaseModel):
    id: int
    session_id: int
    product_name: str
    quantity: int
    price: float
    amount: float
    paid: bool
    created_at: Optional[str]


class SessionSummary(BaseModel):
    session_id: int
    status: str
    total_amount: float
    advance_payment: float
    registered_payments: float
    pending: float
    consumption_count: int


class MoveRequest(BaseModel):
    target_pc_id: int


class CloseRequest(BaseModel):
    cash: Optional[Money] = None
    yape: Optional[Money] = None
    plin: Optional[Money] = None
    money_advance: Optional[Money] = None
    debt_override: Optional[Money] = None
    override_reason: Optional[str] = None
    observation: Optional[str] = None
    optional_client: Optional[str] = None


class CloseResponse(BaseModel):
    session: SessionOut
    debit: DebitOut
    tendered: float
    computed_debt: float
    overridden: bool


class PrepaymentRequest(BaseModel):
    yape: Optional[Money] = None
    plin: Optional[Money] = None
    cash: Optional[Money] = None


class ObservationRequest(BaseModel):
    observation: Optional[str] = None


class AddConsumptionRequest(BaseModel):
    product_id: int
    quantity: int = 1


class StatusHistoryResponse(BaseModel):
    id: int
    entity_type: str
    entity_id: int
    old_status: Optional[str]
    new_status: str
    operator: Optional[str]
    notes: Optional[str]
    created_at: str


@router.get("/{session_id}", response_model=SessionOut)
def get_session(session_id: int, store: RowStore = Depends(get_store)):
    return serialize_row(session_service.get_session(store, session_id))


@router.get("/{session_id}/summary", response_model=SessionSummary)
def get_session_summary(session_id: int, store: RowStore = Depends(get_store)):
    """Resumen de pago: monto total, adelantos y total a pagar"""
    return serialize_row(session_service.session_summary(store, session_id))


@router.post("/{session_id}/move", response_model=SessionOut)
def move_session(session_id: int, data: MoveRequest, store: RowStore = Depends(get_store)):
    return serialize_row(session_service.move_session(store, session_id, data.target_pc_id))


@router.post("/{session_id}/close", response_model=CloseResponse)
def close_session(
    session_id: int,
    data: CloseRequest,
    store: RowStore = Depends(get_store),
    operator: Optional[str] = Depends(get_operator),
):
    """Cobrar: cierra la sesión, libera la PC y registra la deuda si quedó saldo"""
    result = session_service.close_session(
        store,
        session_id,
        cash=data.cash,
        yape=data.yape,
        plin=data.plin,
        money_advance=data.money_advance,
        debt_override=data.debt_override,
        override_reason=data.override_reason,
        observation=data.observation,
        optional_client=data.optional_client,
        operator=operator,
    )
    return {
        "session": serialize_row(result.session),
        "debit": serialize_row(result.debit),
        "tendered": float(result.reconciliation.tendered),
        "computed_debt": float(result.reconciliation.computed_debt),
        "overridden": result.reconciliation.overridden,
    }


@router.delete("/{session_id}", status_code=204)
def delete_session(
    session_id: int,
    store: RowStore = Depends(get_store),
    operator: Optional[str] = Depends(get_operator),
):
    session_service.delete_session(store, session_id, operator=operator)


@router.put("/{session_id}/payments", response_model=SessionOut)
def register_prepayment(session_id: int, data: PrepaymentRequest, store: RowStore = Depends(get_store)):
    session = session_service.register_prepayment(store, session_id, yape=data.yape, plin=data.plin, cash=data.cash)
    return serialize_row(session)


@router.put("/{session_id}/observation", response_model=SessionOut)
def update_observation(session_id: int, data: ObservationRequest, store: RowStore = Depends(get_store)):
    return serialize_row(session_service.update_observation(store, session_id, data.observation))


@router.get("/{session_id}/consumptions", response_model=List[ConsumptionOut])
def list_consumptions(session_id: int, store: RowStore = Depends(get_store)):
    session_service.get_session(store, session_id)
    return serialize_rows(consumption_service.list_consumptions(store, session_id))


@router.post("/{session_id}/consumptions", response_model=ConsumptionOut, status_code=201)
def add_consumption(session_id: int, data: AddConsumptionRequest, store: RowStore = Depends(get_store)):
    consumption = consumption_service.add_product(store, session_id, data.product_id, quantity=data.quantity)
    return serialize_row(consumption)


@router.get("/{session_id}/history", response_model=List[StatusHistoryResponse])
def session_history(session_id: int, store: RowStore = Depends(get_store)):
    return serialize_rows(get_status_history(store, "session", session_id))
