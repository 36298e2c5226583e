from typing import Dict, List
from folio.utils.text import is_blank
from .exceptions import InvariantViolation, ValidationError
from .field import IDENTIFIER_FORMAT, IDENTIFIER_MESSAGE, add_error, field_errors, merge_errors


def part_errors(part) -> Dict[str, List[str]]:
    """Errors of a part, its fields and (recursively) its subparts."""
    errors: Dict[str, List[str]] = {}

    if not part.is_subpart:
        if is_blank(part.identifier):
            add_error(errors, "identifier", "can't be blank")
        elif not IDENTIFIER_FORMAT.match(part.identifier):
            add_error(errors, "identifier", IDENTIFIER_MESSAGE)
        elif _identifier_taken(part):
            add_error(errors, "identifier", "has already been taken")

    seen = set()
    for field in part.fields:
        key = field.identifier or "?"
        if field.identifier and field.identifier in seen:
            add_error(errors, f"fields.{key}.identifier", "has already been taken")
        seen.add(field.identifier)
        merge_errors(errors, field_errors(field), f"fields.{key}")

    for index, subpart in enumerate(part.subparts, start=1):
        merge_errors(errors, part_errors(subpart), f"subparts.{index}")

    return errors


def _identifier_taken(part) -> bool:
    if part.page is None:
        return False
    wanted = part.identifier.lower()
    return any(
        other is not part and (other.identifier or "").lower() == wanted
        for other in part.page.parts
    )


def assert_part(part):
    errors = part_errors(part)
    if errors:
        raise ValidationError(errors)


def assert_positions(items, label="Part"):
    """Positions of one rank scope must read 1..N with no gaps or duplicates."""
    positions = [item.position for item in items]
    if not positions:
        return

    expected = list(range(1, len(positions) + 1))
    if sorted(positions) != expected:
        raise InvariantViolation(
            f"{label} positions are not consecutive starting from 1: {positions}"
        )
