from typing import Any, Dict, List


def renumber(items: List[Dict[str, Any]], order_field="order") -> List[Dict[str, Any]]:
    """
    Re-assigns sequential order values (0..N-1) matching list position.
    """
    for index, item in enumerate(items):
        item[order_field] = index

    return items


def move(items: List[Any], from_index: int, to_index: int) -> List[Any]:
    """
    Move one element, shifting the ones in between. Mirrors an array splice.
    """
    if not 0 <= from_index < len(items):
        raise IndexError(f"from_index {from_index} out of range")

    to_index = max(0, min(to_index, len(items) - 1))
    item = items.pop(from_index)
    items.insert(to_index, item)

    return items
