from flask import jsonify
from folio.domain.invariants.exceptions import InvariantViolation, ValidationError

def register_error_handlers(app):
    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        response = jsonify({
            "error": "ValidationError",
            "message": str(error),
            "errors": error.errors
        })
        response.status_code = 422
        return response

    @app.errorhandler(InvariantViolation)
    def handle_invariant_violation(error):
        response = jsonify({
            "error": type(error).__name__,
            "message": str(error)
        })
        response.status_code = 400
        return response
