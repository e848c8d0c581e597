from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Boolean

from cibercontrol.models.base import Base, utcnow


PAYMENT_METHODS = ("cash", "yape", "plin")


class Debit(Base):
    __tablename__ = "debits"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True, index=True)
    client_name = Column(String(255), nullable=True)
    pc_id = Column(Integer, ForeignKey("pcs.id", ondelete="SET NULL"), nullable=True)
    pc_number = Column(String(20), nullable=True)
    # Un cierre de sesion genera a lo mucho una deuda
    session_id = Column(Integer, ForeignKey("sessions.id", ondelete="SET NULL"), nullable=True, unique=True)

    # Saldo pendiente
    amount = Column(Numeric(10, 2), nullable=False, default=0)
    original_amount = Column(Numeric(10, 2), nullable=False, default=0)
    # False = debe, True = pagado
    status = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)


class DebitDetail(Base):
    """Abono sobre una deuda."""

    __tablename__ = "debits_details"

    id = Column(Integer, primary_key=True, index=True)
    debts_id = Column(Integer, ForeignKey("debits.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String(20), nullable=False, default="cash")  # cash | yape | plin
    details = Column(String(500), nullable=True)
    idempotency_key = Column(String(100), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
