from typing import Dict, List
from sqlalchemy import func
from slugify import slugify
from folio.extensions import db
from folio.models.page import Page
from folio.utils.text import is_blank
from .exceptions import ValidationError
from .field import IDENTIFIER_FORMAT, IDENTIFIER_MESSAGE, add_error, merge_errors
from .page_part import part_errors


def apply_defaults(page):
    """Fill what a page can derive by itself before it gets validated."""
    if is_blank(page.path):
        page.path = "/"
    if is_blank(page.title) and not is_blank(page.identifier):
        page.title = slugify(page.identifier, separator="_")
    if is_blank(page.slug) and not is_blank(page.title):
        page.slug = _unique_slug(page, slugify(page.title))


def _unique_slug(page, base):
    if not base:
        return None
    candidate, suffix = base, 0
    while _slug_taken(page, candidate):
        suffix += 1
        candidate = f"{base}-{suffix}"
    return candidate


def _slug_taken(page, slug) -> bool:
    query = Page.query.filter(
        Page.path == page.path,
        func.lower(Page.slug) == slug.lower(),
    )
    if page.id is not None:
        query = query.filter(Page.id != page.id)
    return db.session.query(query.exists()).scalar()


def _identifier_taken(page) -> bool:
    query = Page.query.filter(func.lower(Page.identifier) == page.identifier.lower())
    if page.id is not None:
        query = query.filter(Page.id != page.id)
    return db.session.query(query.exists()).scalar()


def page_errors(page) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}

    with db.session.no_autoflush:
        apply_defaults(page)

        for attr in ("title", "path"):
            if is_blank(getattr(page, attr)):
                add_error(errors, attr, "can't be blank")

        if page.template is None and page.template_id is None:
            add_error(errors, "template", "can't be blank")

        if is_blank(page.slug):
            add_error(errors, "slug", "can't be blank")
        elif not is_blank(page.path) and _slug_taken(page, page.slug):
            add_error(errors, "slug", "has already been taken")

        if is_blank(page.identifier):
            add_error(errors, "identifier", "can't be blank")
        elif not IDENTIFIER_FORMAT.match(page.identifier):
            add_error(errors, "identifier", IDENTIFIER_MESSAGE)
        elif _identifier_taken(page):
            add_error(errors, "identifier", "has already been taken")

        for part in page.parts:
            merge_errors(errors, part_errors(part), f"parts.{part.identifier or part.position}")

    return errors


def assert_page(page):
    errors = page_errors(page)
    if errors:
        raise ValidationError(errors)
