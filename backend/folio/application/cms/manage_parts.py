from typing import Any, Dict, Optional
from flask import current_app
from folio.extensions import db
from folio.models.field import Field, FileField
from folio.models.page_part import PagePart
from folio.domain.invariants.exceptions import InvariantViolation, ValidationError
from folio.domain.invariants.field import assert_field
from folio.domain.invariants.page_part import assert_part
from folio.utils.media import delete_file
from folio.utils.order import compact_positions, next_position
from folio.utils.transaction import transactional
from .nested_attributes import collect_media


def add_subpart(
    *,
    part_id: str,
    values: Optional[Dict[str, Any]] = None,
) -> PagePart:
    """
    Append a new subpart (e.g. a slide) to a repeatable part, copying the
    fields of its first subpart and filling them from `values`.
    """
    part = db.session.get(PagePart, part_id)
    if not part:
        raise ValueError("PagePart not found")

    subpart = part.spawn_subpart()
    if subpart is None:
        raise InvariantViolation(f"Part {part.identifier} does not take new subparts")

    with transactional():
        for identifier, value in (values or {}).items():
            field = subpart.field(identifier)
            if field is None:
                raise ValidationError({f"fields.{identifier}": ["is not a field of this part"]})
            field.value = value

        subpart.position = next_position(part.subparts)
        part.subparts.append(subpart)
        assert_part(subpart)
        db.session.flush()

        current_app.logger.info(f"Subpart {subpart.position} added to part {part.identifier}")

    return subpart


def delete_part(
    *,
    part_id: str,
) -> None:
    """Delete a part (or subpart) with everything below it, renumbering its siblings."""
    part = db.session.get(PagePart, part_id)
    if not part:
        raise ValueError("PagePart not found")

    media_to_cleanup = collect_media(part)
    remaining = [p for p in part.rank_scope() if p is not part]

    with transactional():
        # delete-orphan cascades from the owning collection
        if part.parent is not None:
            part.parent.subparts.remove(part)
        elif part.page is not None:
            part.page.parts.remove(part)
        else:
            db.session.delete(part)
        compact_positions(sorted(remaining, key=lambda p: p.position))
        db.session.flush()

        current_app.logger.info(f"Part {part_id} deleted")

    for media_url in media_to_cleanup:
        delete_file(media_url)


def update_field(
    *,
    field_id: str,
    value: Any,
) -> Field:
    """
    Assign and validate a single field value. On failure nothing is written
    and the field reads its previous value again.
    """
    field = db.session.get(Field, field_id)
    if not field:
        raise ValueError("Field not found")

    previous = field.raw_value

    with transactional():
        field.value = value
        assert_field(field)
        db.session.flush()

    if isinstance(field, FileField) and previous and previous != field.raw_value:
        delete_file(previous)

    return field


def attach_file(
    *,
    field_id: str,
    upload,
) -> Field:
    """Store an uploaded file on a file or image field."""
    field = db.session.get(Field, field_id)
    if not isinstance(field, FileField):
        raise ValueError("File field not found")

    previous = field.raw_value

    try:
        reference = field.attach(upload)
    except ValueError as exc:
        db.session.rollback()
        raise ValidationError({"value": [str(exc)]}) from exc

    try:
        with transactional():
            assert_field(field)
            db.session.flush()
    except ValidationError:
        delete_file(reference)
        raise

    if previous and previous != reference:
        delete_file(previous)

    current_app.logger.info(f"File attached to field {field.identifier}: {reference}")
    return field
