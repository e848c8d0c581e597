from decimal import Decimal

import pytest

from cibercontrol.core.errors import ConflictError, ValidationError
from cibercontrol.services import consumption_service, debt_service, session_service
from cibercontrol.services.status_history_service import get_status_history


@pytest.fixture
def debit(store, make_pc, make_client, make_product):
    """Deuda pendiente de 5.00"""
    pc = make_pc()
    session = session_service.open_session(store, pc["id"], make_client("Maria", "Mari")["id"])
    consumption_service.add_product(store, session["id"], make_product("Hora", "5.00")["id"])
    return session_service.close_session(store, session["id"], cash="0").debit


def amount_of(row):
    return Decimal(str(row["amount"]))


def test_full_abono_settles_debt(store, debit):
    result = debt_service.post_abono(store, debit["id"], "5.00", method="cash")

    assert amount_of(result.debit) == Decimal("0.00")
    assert result.debit["status"] is True
    assert get_status_history(store, "debit", debit["id"])[0]["new_status"] == "settled"


def test_partial_abonos_keep_ledger_consistent(store, debit):
    debt_service.post_abono(store, debit["id"], "2.00", method="yape")
    result = debt_service.post_abono(store, debit["id"], "1.50", method="plin", detail="transferencia")

    assert amount_of(result.debit) == Decimal("1.50")
    assert result.debit["status"] is False
    details = debt_service.list_debit_details(store, debit["id"])
    paid = sum(Decimal(str(d["amount"])) for d in details)
    assert Decimal(str(result.debit["original_amount"])) - paid == amount_of(result.debit)


@pytest.mark.parametrize("amount", ["0", "-1", "5.01"])
def test_abono_out_of_bounds_is_rejected(store, debit, amount):
    with pytest.raises(ValidationError):
        debt_service.post_abono(store, debit["id"], amount)
    assert debt_service.list_debit_details(store, debit["id"]) == []


def test_unknown_payment_method_is_rejected(store, debit):
    with pytest.raises(ValidationError):
        debt_service.post_abono(store, debit["id"], "1.00", method="card")


def test_settled_debt_is_terminal(store, debit):
    debt_service.post_abono(store, debit["id"], "5.00")
    with pytest.raises(ConflictError):
        debt_service.post_abono(store, debit["id"], "1.00")


def test_idempotency_key_replays_first_posting(store, debit):
    first = debt_service.post_abono(store, debit["id"], "2.00", idempotency_key="abono-1")
    replay = debt_service.post_abono(store, debit["id"], "2.00", idempotency_key="abono-1")

    assert replay.replayed
    assert replay.detail["id"] == first.detail["id"]
    assert amount_of(replay.debit) == Decimal("3.00")
    assert len(debt_service.list_debit_details(store, debit["id"])) == 1


def test_debit_balance_repairs_drift(store, debit):
    # Abono guardado sin actualizar la deuda
    store.insert("debits_details", {"debts_id": debit["id"], "amount": Decimal("2.00"), "payment_method": "cash"})

    repaired = debt_service.debit_balance(store, debit["id"])

    assert amount_of(repaired) == Decimal("3.00")
    assert repaired["status"] is False
    assert amount_of(store.get("debits", debit["id"])) == Decimal("3.00")


def test_client_debt_summary_prefers_nickname(store, debit):
    summary = debt_service.client_debt_summary(store)

    assert len(summary) == 1
    assert summary[0]["client_name"] == "Mari"
    assert summary[0]["total_amount"] == Decimal("5.00")
    assert summary[0]["debit_count"] == 1


def test_list_debits_filters_by_status(store, debit):
    assert [d["id"] for d in debt_service.list_debits(store, status=False)] == [debit["id"]]
    assert debt_service.list_debits(store, status=True) == []
