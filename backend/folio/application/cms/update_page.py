from typing import Any, Dict
from flask import current_app
from sqlalchemy.exc import IntegrityError
from folio.extensions import db
from folio.models.page import Page
from folio.domain.invariants.exceptions import InvariantViolation, PersistenceError
from folio.domain.invariants.page import assert_page
from folio.domain.tree import clear_arranged_pages
from folio.utils.media import delete_file
from folio.utils.order import compact_positions, move_to, next_position
from folio.utils.transaction import transactional
from .nested_attributes import assign_parts_attributes
from .page_attributes import assign_page_attributes


def update_page(
    *,
    page_id: str,
    data: Dict[str, Any],
) -> Page:
    """
    Update a page and its nested parts/fields.

    Design rules:
    - Only whitelisted attributes are mutable
    - No silent no-op updates
    - Invariants always revalidated, all or nothing
    - A slug change keeps the previous slug for redirects
    """
    page = db.session.get(Page, page_id)

    if not page:
        raise ValueError("Page not found")

    old_path = page.path
    media_to_cleanup = []

    try:
        # assignment can raise as well, so it runs inside the transaction
        with transactional(after_commit=[clear_arranged_pages, page.clear_cached_attributes]):
            changed_fields = assign_page_attributes(page, data)

            if "parts" in data:
                assign_parts_attributes(page.parts, data["parts"], media_to_cleanup)
                changed_fields.append("parts")

            if "position" in data or data.get("is_root"):
                changed_fields.append("position")

            if not changed_fields:
                # Explicitly fail instead of silently succeeding
                raise InvariantViolation("No valid fields provided for update")

            assert_page(page)

            if page.path != old_path:
                with db.session.no_autoflush:
                    previous = Page.query.filter(Page.path == old_path, Page.id != page.id).all()
                    siblings = Page.query.filter(Page.path == page.path, Page.id != page.id).all()
                compact_positions(sorted(previous, key=lambda p: p.position))
                page.position = next_position(siblings)
            else:
                siblings = page.siblings()

            if data.get("is_root"):
                move_to(siblings, page, 1)
            elif data.get("position"):
                move_to(siblings, page, int(data["position"]))

            db.session.flush()

            current_app.logger.info(
                f"Page {page.identifier} updated ({', '.join(changed_fields)})"
            )

    except IntegrityError as exc:
        db.session.rollback()
        raise PersistenceError("A page with this identifier or url already exists") from exc

    for media_url in media_to_cleanup:
        delete_file(media_url)

    return page
