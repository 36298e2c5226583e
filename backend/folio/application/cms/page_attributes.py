from typing import Any, Dict, List
from folio.extensions import db
from folio.models.page import Page
from folio.models.template import Template

ALLOWED_PAGE_FIELDS = {"identifier", "title", "slug"}


def resolve_template(data: Dict[str, Any]):
    if data.get("template_id"):
        return db.session.get(Template, data["template_id"])
    if data.get("template"):
        return Template.query.filter_by(identifier=data["template"]).first()
    return None


def assign_page_attributes(page: Page, data: Dict[str, Any]) -> List[str]:
    """
    Apply whitelisted page attributes from `data`, returns the changed names.

    Placement accepts "path", "parent_url" or "parent_identifier", "is_root"
    moves the page to "/"; descendants keep their own path strings when a page
    moves.
    """
    changed: List[str] = []

    for field in sorted(ALLOWED_PAGE_FIELDS):
        if field in data and getattr(page, field) != data[field]:
            setattr(page, field, data[field])
            changed.append(field)

    for seo_key in ("seo", "meta_seo"):
        if seo_key in data and (page.meta_seo or {}) != (data[seo_key] or {}):
            page.seo = data[seo_key]
            changed.append("meta_seo")
            break

    if "template_id" in data or "template" in data:
        template = resolve_template(data)
        if template is not page.template:
            page.template = template
            page.template_id = template.id if template is not None else None
            changed.append("template")

    old_path = page.path
    if "parent_identifier" in data:
        parent = None
        if data["parent_identifier"]:
            parent = Page.query.filter_by(identifier=data["parent_identifier"]).first()
        page.set_parent(parent)
    elif "parent_url" in data:
        page.set_parent(Page.find_by_url(data["parent_url"]))
    elif "path" in data:
        page.path = data["path"]
    if data.get("is_root"):
        # the root page always lives on "/"
        page.path = "/"
    if page.path != old_path:
        changed.append("path")

    return changed
