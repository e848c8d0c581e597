from sqlalchemy import Column, Integer, String, Numeric, DateTime

from cibercontrol.models.base import Base, utcnow


MOVEMENT_INCOME = "ingreso"
MOVEMENT_EXPENSE = "egreso"
MOVEMENT_TYPES = (MOVEMENT_INCOME, MOVEMENT_EXPENSE)


class AccountingMovement(Base):
    __tablename__ = "mov_contable"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(20), nullable=False, index=True)  # ingreso | egreso
    amount = Column(Numeric(10, 2), nullable=False)
    detail = Column(String(500), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
