from flask import jsonify, redirect, url_for
from folio.domain.tree import arrange
from folio.models.page import Page
from folio.normalizers.page import normalize_page
from folio.normalizers.resolved import normalize_resolved
from folio.normalizers.tree import normalize_tree
from . import v1_bp


@v1_bp.route("/pages/tree", methods=["GET"])
def page_tree():
    return jsonify(normalize_tree(arrange()))


@v1_bp.route("/pages/by-url/", defaults={"url": ""}, methods=["GET"])
@v1_bp.route("/pages/by-url/<path:url>", methods=["GET"])
def page_by_url(url):
    page = Page.find_by_url(f"/{url}")
    if page is None:
        return jsonify({"error": "Page not found"}), 404

    if page.using_slug_backup:
        # Old slug: send clients to the canonical url
        return redirect(url_for("v1.page_by_url", url=page.url.strip("/")), code=301)

    return jsonify(normalize_page(page))


@v1_bp.route("/pages/<identifier>/resolve/<dotted_path>", methods=["GET"])
def resolve_content(identifier, dotted_path):
    page = Page.query.filter_by(identifier=identifier).first()
    if page is None:
        return jsonify({"error": "Page not found"}), 404

    result = page.resolve(dotted_path)
    if result is None:
        return jsonify({"error": f"Nothing found at {dotted_path}"}), 404

    return jsonify(normalize_resolved(result))
