from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Index, Text, text

from cibercontrol.models.base import Base, utcnow


SESSION_ACTIVE = "active"
SESSION_INACTIVE = "inactive"


class RentalSession(Base):
    __tablename__ = "sessions"
    __table_args__ = (
        # Una sola sesion activa por PC, validado por la base de datos
        Index(
            "uq_sessions_active_pc",
            "pc_id",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True, index=True)
    pc_id = Column(Integer, ForeignKey("pcs.id", ondelete="SET NULL"), nullable=True, index=True)
    pc_number = Column(String(20), nullable=False)  # snapshot, cambia al mover la sesion
    start_time = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    mode = Column(String(20), nullable=True)
    status = Column(String(20), nullable=False, default=SESSION_ACTIVE, index=True)

    # Congelado al cerrar
    total_amount = Column(Numeric(10, 2), nullable=True, default=0)
    # Suma de consumos marcados como pagados (cache, se recalcula en cada cambio)
    advance_payment = Column(Numeric(10, 2), nullable=False, default=0)
    money_advance = Column(Numeric(10, 2), nullable=False, default=0)
    yape = Column(Numeric(10, 2), nullable=False, default=0)
    plin = Column(Numeric(10, 2), nullable=False, default=0)
    cash = Column(Numeric(10, 2), nullable=False, default=0)
    debt = Column(Numeric(10, 2), nullable=False, default=0)
    change = Column(Numeric(10, 2), nullable=False, default=0)

    observation = Column(Text, nullable=True)
    optional_client = Column(String(255), nullable=True)  # apodo para clientes de paso
    debt_override_reason = Column(String(500), nullable=True)
    closed_by = Column(String(255), nullable=True)
