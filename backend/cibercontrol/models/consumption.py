from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Boolean

from cibercontrol.models.base import Base, utcnow


class Consumption(Base):
    __tablename__ = "consumptions"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    # Nombre y precio copiados del producto al momento de agregarlo
    product_name = Column(String(255), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Numeric(10, 2), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False, default=0)  # quantity * price
    paid = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
