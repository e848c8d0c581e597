from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON

from cibercontrol.models.base import Base, utcnow


PC_AVAILABLE = "available"
PC_OCCUPIED = "occupied"
PC_MAINTENANCE = "maintenance"
PC_STATUSES = {PC_AVAILABLE, PC_OCCUPIED, PC_MAINTENANCE}


class PCGroup(Base):
    __tablename__ = "pcgroups"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=True)  # tarifa / zona: "Gamer", "Normal", ...
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class PC(Base):
    __tablename__ = "pcs"

    id = Column(Integer, primary_key=True, index=True)
    number = Column(String(20), nullable=False, unique=True)  # "PC01"
    status = Column(String(20), nullable=False, default=PC_AVAILABLE, index=True)
    group = Column(Integer, ForeignKey("pcgroups.id", ondelete="SET NULL"), nullable=True, index=True)
    position = Column(JSON, nullable=True)  # {"x": .., "y": ..} solo vista
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
