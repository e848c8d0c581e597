from typing import List, Optional

from cibercontrol.core.store import Row, RowStore


def create_status_history(
    store: RowStore,
    entity_type: str,
    entity_id: int,
    old_status: Optional[str],
    new_status: str,
    operator: Optional[str] = None,
    notes: Optional[str] = None,
) -> Row:
    """Helper function to create a status history entry"""
    return store.insert(
        "status_history",
        {
            "entity_type": entity_type,
            "entity_id": entity_id,
            "old_status": old_status,
            "new_status": new_status,
            "operator": operator,
            "notes": notes[:500] if notes else None,
        },
    )


def get_status_history(store: RowStore, entity_type: str, entity_id: int) -> List[Row]:
    return store.select(
        "status_history",
        eq={"entity_type": entity_type, "entity_id": entity_id},
        order_by="created_at",
        desc=True,
    )
