from flask import jsonify
from exam_builder.domain.invariants.exceptions import GroupingError, InvariantViolation

def register_error_handlers(app):
    @app.errorhandler(GroupingError)
    def handle_grouping_error(error):
        response = jsonify({
            "error": "GroupingError",
            "message": str(error)
        })
        response.status_code = 400
        return response

    @app.errorhandler(InvariantViolation)
    def handle_invariant_violation(error):
        response = jsonify({
            "error": "InvariantViolation",
            "message": str(error)
        })
        response.status_code = 400
        return response
