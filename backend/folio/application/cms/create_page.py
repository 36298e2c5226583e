from typing import Any, Dict
from flask import current_app
from sqlalchemy.exc import IntegrityError
from folio.extensions import db
from folio.models.page import Page
from folio.domain.invariants.exceptions import PersistenceError
from folio.domain.invariants.page import assert_page
from folio.domain.tree import clear_arranged_pages
from folio.utils.order import move_to, next_position
from folio.utils.transaction import transactional
from .nested_attributes import assign_parts_attributes
from .page_attributes import assign_page_attributes


def create_page(
    *,
    data: Dict[str, Any],
) -> Page:
    """
    Create a page with its parts and fields in one transaction.

    Edge cases handled:
    - Missing title (derived from identifier) or slug (derived from title)
    - Duplicate slug within the path, duplicate identifier
    - Invalid nested parts/fields (nothing is written)
    - "is_root" / "position" insert the page at that rank among its siblings
    """
    page = Page()

    try:
        with transactional(after_commit=[clear_arranged_pages]):
            # the unsaved page is already on template.pages, no flush before add
            with db.session.no_autoflush:
                assign_page_attributes(page, data)
                assign_parts_attributes(page.parts, data.get("parts"))

                # 🔒 Domain invariants (single source of truth)
                assert_page(page)

                siblings = Page.query.filter(Page.path == page.path).all()

            if data.get("is_root"):
                move_to(siblings, page, 1)
            elif data.get("position"):
                move_to(siblings, page, int(data["position"]))
            else:
                page.position = next_position(siblings)

            db.session.add(page)
            db.session.flush()  # ensures page.id is available

            current_app.logger.info(f"Page {page.identifier} created at {page.url}")

        return page

    except IntegrityError as exc:
        # Unique constraints: (path, slug) and identifier
        db.session.rollback()
        raise PersistenceError("A page with this identifier or url already exists") from exc
