from flask import current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from folio.extensions import db
from . import v1_bp

@v1_bp.route('/health', methods=['GET'])
def health_check():
    try:
        db.session.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        current_app.logger.error(f"Health check database failure: {e}")
        database = "unavailable"

    return jsonify({
        "status": "ok" if database == "ok" else "degraded",
        "service": "folio",
        "database": database
    }), 200 if database == "ok" else 503
