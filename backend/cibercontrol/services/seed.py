from decimal import Decimal

from sqlalchemy.orm import Session

from cibercontrol.models.pc import PC, PCGroup
from cibercontrol.models.product import Product
from cibercontrol.models.client import Client


DEMO_GROUPS = ["Normal", "Gamer"]

# (nombre, precio, grupo)
DEMO_PRODUCTS = [
    ("Hora PC Normal", "2.00", 1),
    ("Media hora PC Normal", "1.00", 1),
    ("Hora PC Gamer", "3.50", 2),
    ("Media hora PC Gamer", "2.00", 2),
    ("Gaseosa 500ml", "2.50", None),
    ("Agua 625ml", "1.50", None),
    ("Galletas", "1.00", None),
    ("Impresion B/N", "0.50", None),
]


def seed_demo(db: Session, pcs_per_group: int = 10):
    """PCs, grupos y productos de ejemplo. No hace nada si ya hay PCs."""
    if db.query(PC).first():
        return

    groups = []
    for name in DEMO_GROUPS:
        group = PCGroup(name=name)
        db.add(group)
        groups.append(group)
    db.flush()

    number = 1
    for index, group in enumerate(groups):
        for col in range(pcs_per_group):
            db.add(PC(
                number=f"PC{number:02d}",
                status="available",
                group=group.id,
                position={"x": col * 90, "y": index * 120},
            ))
            number += 1

    for name, price, group_number in DEMO_PRODUCTS:
        group_id = groups[group_number - 1].id if group_number else None
        db.add(Product(name=name, price=Decimal(price), group=group_id))

    db.add(Client(name="Cliente de paso", nickname="Paso"))
    db.commit()
