from flask import request, jsonify
from flask_jwt_extended import jwt_required
from folio.application.cms.reorder import reorder_pages, reorder_parts
from folio.normalizers.page import normalize_page_summary
from folio.utils.decorators import admin_required
from . import v1_bp


@v1_bp.route("/admin/pages/reorder", methods=["POST"])
@jwt_required()
@admin_required
def reorder_pages_endpoint():
    data = request.get_json(silent=True) or {}

    identifiers = data.get("identifiers")
    if not isinstance(identifiers, list):
        return jsonify({"error": "identifiers must be a list"}), 400

    pages = reorder_pages(path=data.get("path", "/"), identifiers=identifiers)

    return jsonify({
        "items": [normalize_page_summary(p) for p in pages]
    }), 200


@v1_bp.route("/admin/parts/reorder", methods=["POST"])
@jwt_required()
@admin_required
def reorder_parts_endpoint():
    data = request.get_json(silent=True) or {}

    ids = data.get("ids")
    if not isinstance(ids, list):
        return jsonify({"error": "ids must be a list"}), 400

    parts = reorder_parts(part_ids=ids)

    return jsonify({
        "items": [{"id": p.id, "identifier": p.identifier, "position": p.position} for p in parts]
    }), 200
