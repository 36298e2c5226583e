from typing import List, Sequence
from flask import current_app
from folio.extensions import db
from folio.models.page import Page
from folio.models.page_part import PagePart
from folio.domain.invariants.exceptions import InvariantViolation
from folio.domain.invariants.page_part import assert_positions
from folio.domain.tree import clear_arranged_pages
from folio.utils.order import apply_order
from folio.utils.text import normalize_path
from folio.utils.transaction import transactional


def reorder_pages(
    *,
    path: str,
    identifiers: Sequence[str],
) -> List[Page]:
    """
    Batch position rewrite for the pages sharing `path`.

    `identifiers` is the complete new sibling order, positions become 1..N.
    """
    path = normalize_path(path) or "/"
    siblings = Page.query.filter(Page.path == path).all()

    with transactional(after_commit=[clear_arranged_pages]):
        ordered = apply_order(siblings, list(identifiers), key_fn=lambda p: p.identifier)
        assert_positions(ordered, label="Page")
        db.session.flush()

        current_app.logger.info(f"Reordered {len(ordered)} pages under {path}")

    return ordered


def reorder_parts(
    *,
    part_ids: Sequence[str],
) -> List[PagePart]:
    """
    Batch position rewrite for parts of one rank scope: the top-level parts of
    a page, or the subparts of one part.
    """
    part_ids = list(part_ids)
    if not part_ids:
        return []

    parts = PagePart.query.filter(PagePart.id.in_(part_ids)).all()
    if len(parts) != len(set(part_ids)):
        raise InvariantViolation("Unknown part in new order")

    scopes = {(p.page_id, p.parent_part_id) for p in parts}
    if len(scopes) != 1:
        raise InvariantViolation("Parts from different pages or parents cannot be reordered together")

    scope = parts[0].rank_scope()

    with transactional():
        ordered = apply_order(scope, part_ids, key_fn=lambda p: p.id)
        assert_positions(ordered)
        db.session.flush()

        current_app.logger.info(f"Reordered {len(ordered)} parts")

    return ordered
