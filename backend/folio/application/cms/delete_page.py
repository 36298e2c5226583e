from flask import current_app
from folio.extensions import db
from folio.models.page import Page
from folio.domain.tree import clear_arranged_pages
from folio.utils.media import delete_file
from folio.utils.order import compact_order
from folio.utils.transaction import transactional
from .nested_attributes import collect_media


def delete_page(
    *,
    page_id: str,
) -> None:
    """
    Hard-delete a page with its parts, subparts and fields.

    Notes:
    - Child pages are left in place (their path still points at the old url)
    - Remaining siblings are renumbered 1..N
    - Uploaded files are removed once the transaction committed
    """
    page = db.session.get(Page, page_id)

    if not page:
        raise ValueError("Page not found")

    media_to_cleanup = []
    for part in page.parts:
        media_to_cleanup.extend(collect_media(part))

    path, identifier = page.path, page.identifier

    with transactional(after_commit=[clear_arranged_pages]):
        db.session.delete(page)
        db.session.flush()

        compact_order(Page.query.filter(Page.path == path))

        current_app.logger.info(f"Page {identifier} deleted")

    for media_url in media_to_cleanup:
        delete_file(media_url)
