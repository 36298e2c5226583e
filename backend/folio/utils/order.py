from typing import Any, List, Sequence
from folio.domain.invariants.exceptions import InvariantViolation
from folio.extensions import db

def compact_order(query, order_field="position"):
    """
    Re-assigns sequential order values (1..N) for a scoped query.
    """
    model = query.column_descriptions[0]["entity"]
    items = query.order_by(getattr(model, order_field).asc()).all()
    compact_positions(items, order_field)
    db.session.flush()
    return items


def compact_positions(items: Sequence[Any], order_field="position"):
    """Renumber already ordered items 1..N."""
    for index, item in enumerate(items, start=1):
        setattr(item, order_field, index)


def next_position(items: Sequence[Any], order_field="position") -> int:
    positions = [getattr(item, order_field) or 0 for item in items]
    return max(positions, default=0) + 1


def move_to(items: Sequence[Any], item, position: int, order_field="position"):
    """
    Move `item` to the 1-based `position` among `items` (its rank scope) and
    renumber the whole scope. Out of range positions are clamped.
    """
    ordered: List[Any] = sorted(
        (i for i in items if i is not item),
        key=lambda i: getattr(i, order_field) or 0,
    )
    index = min(max(position, 1), len(ordered) + 1) - 1
    ordered.insert(index, item)
    compact_positions(ordered, order_field)
    return ordered


def apply_order(items: Sequence[Any], keys: Sequence[Any], key_fn, order_field="position"):
    """
    Batch position rewrite: `keys` is the new order of the whole scope,
    expressed with `key_fn(item)` (identifier, id, ...).
    """
    by_key = {key_fn(item): item for item in items}

    if len(keys) != len(set(keys)):
        raise InvariantViolation(f"Duplicate entries in new order: {list(keys)}")

    if set(keys) != set(by_key):
        raise InvariantViolation(
            f"New order must list every sibling exactly once: expected {sorted(map(str, by_key))}"
        )

    ordered = [by_key[key] for key in keys]
    compact_positions(ordered, order_field)
    return ordered
