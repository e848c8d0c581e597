from sqlalchemy import Column, Integer, String, DateTime

from cibercontrol.models.base import Base, utcnow


class StatusHistory(Base):
    __tablename__ = "status_history"

    id = Column(Integer, primary_key=True, index=True)

    # Tipo de entidad ("session" o "debit")
    entity_type = Column(String(20), nullable=False, index=True)
    entity_id = Column(Integer, nullable=False, index=True)

    # Información del cambio
    old_status = Column(String(50), nullable=True)
    new_status = Column(String(50), nullable=False)

    # Quien hizo el cambio (cabecera X-Operator), texto libre
    operator = Column(String(255), nullable=True)

    notes = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
