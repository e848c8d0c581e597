from sqlalchemy import Column, Integer, String, Numeric, ForeignKey

from cibercontrol.models.base import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    # Cada grupo de PCs tiene su propia lista (la hora en zona gamer cuesta distinto)
    group = Column(Integer, ForeignKey("pcgroups.id", ondelete="SET NULL"), nullable=True, index=True, default=1)
