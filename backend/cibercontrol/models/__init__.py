from .base import Base
from .pc import PC, PCGroup
from .client import Client
from .product import Product
from .rental_session import RentalSession
from .consumption import Consumption
from .debit import Debit, DebitDetail
from .accounting_movement import AccountingMovement
from .status_history import StatusHistory

__all__ = [
    "Base",
    "PC",
    "PCGroup",
    "Client",
    "Product",
    "RentalSession",
    "Consumption",
    "Debit",
    "DebitDetail",
    "AccountingMovement",
    "StatusHistory",
]
