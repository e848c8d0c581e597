"""
Aritmética de cobro de una sesión.

Funciones puras (sin base de datos) para:
- total de la sesión a partir de sus consumos
- adelanto = consumos marcados como pagados
- reparto del cobro entre efectivo / Yape / Plin / adelanto, deuda y vuelto
- saldo de una deuda después de un abono

Regla de cuadre de un cierre sin ajuste manual:

    cash + yape + plin + money_advance + advance_payment + debt - change == total

Si lo entregado no alcanza hay deuda y el vuelto es 0; si sobra, la deuda es 0
y el excedente es vuelto.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping, Optional, Tuple

from cibercontrol.core.errors import ValidationError


CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def money(value: Any) -> Decimal:
    """Normaliza a Decimal con 2 decimales (None -> 0.00)."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        amount = value
    else:
        amount = Decimal(str(value))
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def line_amount(quantity: int, price: Any) -> Decimal:
    return money(Decimal(int(quantity)) * money(price))


def session_total(consumptions: Iterable[Mapping[str, Any]]) -> Decimal:
    """Suma quantity * price de todos los consumos."""
    return money(sum((line_amount(c["quantity"], c["price"]) for c in consumptions), ZERO))


def paid_total(consumptions: Iterable[Mapping[str, Any]]) -> Decimal:
    """Suma de los consumos ya pagados (el adelanto de la sesión)."""
    return money(sum((line_amount(c["quantity"], c["price"]) for c in consumptions if c.get("paid")), ZERO))


@dataclass(frozen=True)
class Tender:
    cash: Decimal = ZERO
    yape: Decimal = ZERO
    plin: Decimal = ZERO
    money_advance: Decimal = ZERO

    @classmethod
    def of(cls, cash=None, yape=None, plin=None, money_advance=None) -> "Tender":
        tender = cls(
            cash=money(cash),
            yape=money(yape),
            plin=money(plin),
            money_advance=money(money_advance),
        )
        for name in ("cash", "yape", "plin", "money_advance"):
            if getattr(tender, name) < 0:
                raise ValidationError(f"{name} cannot be negative")
        return tender

    @property
    def total(self) -> Decimal:
        return money(self.cash + self.yape + self.plin + self.money_advance)


@dataclass(frozen=True)
class Reconciliation:
    total: Decimal
    advance_payment: Decimal
    tendered: Decimal
    computed_debt: Decimal
    debt: Decimal
    change: Decimal
    # Deuda puesta a mano por el cajero, aunque coincida con la calculada
    overridden: bool = False

    def is_balanced(self) -> bool:
        return self.tendered + self.debt - self.change == self.total


def reconcile(
    total: Any,
    tender: Tender,
    advance_payment: Any = ZERO,
    debt_override: Optional[Any] = None,
) -> Reconciliation:
    """
    Calcula deuda y vuelto de un cierre.

    ``debt_override`` reemplaza la deuda calculada (corrección manual del
    cajero); no se valida contra la fórmula, solo que no sea negativa.
    """
    total = money(total)
    advance = money(advance_payment)
    if total < 0:
        raise ValidationError("total cannot be negative")
    if advance < 0:
        raise ValidationError("advance_payment cannot be negative")

    tendered = money(tender.total + advance)
    computed_debt = max(total - tendered, ZERO)
    change = max(tendered - total, ZERO)

    debt = computed_debt
    if debt_override is not None:
        debt = money(debt_override)
        if debt < 0:
            raise ValidationError("debt override cannot be negative")

    return Reconciliation(
        total=total,
        advance_payment=advance,
        tendered=tendered,
        computed_debt=money(computed_debt),
        debt=debt,
        change=money(change),
        overridden=debt_override is not None,
    )


def apply_abono(balance: Any, amount: Any) -> Tuple[Decimal, bool]:
    """
    Nuevo saldo y estado (True = pagada) tras un abono.

    Raises:
        ValidationError: si el abono no es positivo o supera el saldo
    """
    balance = money(balance)
    amount = money(amount)
    if amount <= 0:
        raise ValidationError("Payment amount must be positive")
    if amount > balance:
        raise ValidationError("Payment amount exceeds remaining balance")
    new_balance = money(balance - amount)
    return new_balance, new_balance <= 0
