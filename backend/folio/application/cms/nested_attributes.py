from typing import Any, Dict, Iterable, List, Optional
from folio.domain.invariants.exceptions import InvariantViolation, ValidationError
from folio.models.field import FIELD_TYPES, FileField
from folio.models.page_part import PagePart
from folio.utils.order import compact_positions, next_position
from folio.utils.text import is_blank

PART_ATTRIBUTES = ("identifier", "label", "repeatable", "position")
DESTROY_VALUES = {True, "1", "true", "t"}


def _wants_destroy(attrs: Dict[str, Any]) -> bool:
    value = attrs.get("_destroy")
    return value in DESTROY_VALUES or (isinstance(value, str) and value.lower() in DESTROY_VALUES)


def _all_blank(attrs: Dict[str, Any]) -> bool:
    for key, value in attrs.items():
        if key == "_destroy":
            continue
        if isinstance(value, (list, dict)):
            if value:
                return False
        elif not is_blank(value):
            return False
    return True


def _find(records, record_id):
    if record_id is None:
        return None
    for record in records:
        if record.id == record_id:
            return record
    raise InvariantViolation(f"{record_id} does not belong to this collection")


def collect_media(part) -> List[str]:
    """References of every stored upload below `part` (fields and subparts)."""
    media = [f.raw_value for f in part.fields if isinstance(f, FileField) and f.raw_value]
    for subpart in part.subparts:
        media.extend(collect_media(subpart))
    return media


def assign_parts_attributes(
    collection: List[PagePart],
    items: Optional[Iterable[Dict[str, Any]]],
    media_to_cleanup: Optional[List[str]] = None,
) -> None:
    """
    Create, update or destroy parts of `collection` (page.parts or
    part.subparts) from a list of attribute dicts:

        {"id": ..., "identifier": "intro", "label": ..., "repeatable": False,
         "position": 2, "_destroy": False,
         "fields": [...], "subparts": [...]}

    Entries without an id are created, entries whose values are all blank are
    ignored. Positions of the collection are renumbered 1..N afterwards.
    """
    if media_to_cleanup is None:
        media_to_cleanup = []

    for attrs in items or ():
        if _all_blank(attrs):
            continue

        part = _find(collection, attrs.get("id"))

        if _wants_destroy(attrs):
            if part is not None:
                media_to_cleanup.extend(collect_media(part))
                collection.remove(part)
            continue

        if part is None:
            part = PagePart()
            part.position = next_position(collection)
            collection.append(part)

        for key in PART_ATTRIBUTES:
            if key in attrs:
                setattr(part, key, attrs[key])

        assign_fields_attributes(part, attrs.get("fields"), media_to_cleanup)
        assign_parts_attributes(part.subparts, attrs.get("subparts"), media_to_cleanup)

    compact_positions(sorted(collection, key=lambda p: p.position or 0))


def assign_fields_attributes(
    part: PagePart,
    items: Optional[Iterable[Dict[str, Any]]],
    media_to_cleanup: Optional[List[str]] = None,
) -> None:
    """
    {"id": ..., "identifier": "title", "type": "string", "required": True,
     "value": "Hello", "_destroy": False}
    """
    if media_to_cleanup is None:
        media_to_cleanup = []

    for attrs in items or ():
        field = _find(part.fields, attrs.get("id"))

        if _wants_destroy(attrs):
            if field is not None:
                if isinstance(field, FileField) and field.raw_value:
                    media_to_cleanup.append(field.raw_value)
                part.fields.remove(field)
            continue

        if field is None:
            field_class = FIELD_TYPES.get(attrs.get("type"))
            if field_class is None:
                raise ValidationError({
                    f"fields.{attrs.get('identifier') or '?'}.type": ["is not included in the list"]
                })
            field = field_class()
            part.fields.append(field)

        if "identifier" in attrs:
            field.identifier = attrs["identifier"]
        if "required" in attrs:
            field.required = bool(attrs["required"])
        if "value" in attrs:
            if isinstance(field, FileField) and field.raw_value and field.raw_value != attrs["value"]:
                media_to_cleanup.append(field.raw_value)
            field.value = attrs["value"]
