from typing import List, Optional

from cibercontrol.core.errors import NotFoundError, ValidationError
from cibercontrol.core.store import Row, RowStore
from cibercontrol.services.reconciliation import money


def list_products(store: RowStore, group: Optional[int] = None) -> List[Row]:
    if group is None:
        return store.select("products", order_by="name")
    return store.select("products", eq={"group": group}, order_by="name")


def get_product(store: RowStore, product_id: int) -> Row:
    product = store.get("products", product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


def add_product_to_catalog(store: RowStore, name: str, price, group: Optional[int] = None) -> Row:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Product name is required")
    price = money(price)
    if price < 0:
        raise ValidationError("Product price cannot be negative")
    return store.insert("products", {"name": name, "price": price, "group": group})
