# exam_builder/api/v1/exams.py
from flask import request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from exam_builder.utils.decorators import roles_required
from exam_builder.blocks.registry import catalog
from exam_builder.models.exam import Exam
from exam_builder.models.audit_log import AuditLog
from exam_builder.normalizers.exam import normalize_exam
from exam_builder.normalizers.question import normalize_question
from exam_builder.normalizers.pagination import normalize_pagination
from exam_builder.normalizers.audit import normalize_audit_log
from exam_builder.application.exams._lookup import get_exam
from exam_builder.application.exams.create_exam import create_exam as create_exam_service
from exam_builder.application.exams.update_exam import update_exam as update_exam_service
from exam_builder.application.exams.delete_exam import delete_exam as delete_exam_service
from exam_builder.application.exams.publish_exam import publish_exam as publish_exam_service
from exam_builder.application.exams.publish_exam import unpublish_exam as unpublish_exam_service
from exam_builder.application.exams.save_exam_questions import save_exam_questions
from exam_builder.application.exams.exam_blocks import load_exam_blocks, save_exam_blocks
from . import v1_bp

AUTHOR_ROLES = ("admin", "teacher")


# ------------------------
# Block templates
# ------------------------

@v1_bp.route("/block-templates", methods=["GET"])
@jwt_required()
@roles_required(*AUTHOR_ROLES)
def list_block_templates():
    return jsonify(catalog()), 200


# ------------------------
# Exams
# ------------------------

@v1_bp.route("/exams", methods=["POST"])
@jwt_required()
@roles_required(*AUTHOR_ROLES)
def create_exam():
    data = request.get_json(silent=True) or {}

    try:
        exam = create_exam_service(actor_id=get_jwt_identity(), data=data)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify({
        "id": exam.id,
        "message": "Exam created successfully"
    }), 201

@v1_bp.route("/exams", methods=["GET"])
@jwt_required()
@roles_required(*AUTHOR_ROLES)
def list_exams():
    status = request.args.get("status")  # draft | published | None
    page_num = request.args.get("page", 1, type=int)
    per_page = request.args.get("per_page", 10, type=int)

    query = Exam.query.filter_by(deleted_at=None)
    if status:
        query = query.filter_by(status=status)

    pagination = query.order_by(Exam.created_at.desc()).paginate(page=page_num, per_page=per_page, error_out=False)

    return jsonify(
        normalize_pagination(
            pagination.items,
            normalize_exam,
            page=page_num,
            per_page=per_page,
            total=pagination.total,
        )
    )

@v1_bp.route("/exams/<exam_id>", methods=["GET"])
@jwt_required()
@roles_required(*AUTHOR_ROLES)
def get_exam_detail(exam_id):
    exam = get_exam(exam_id)
    return jsonify(normalize_exam(exam, include_questions=True))

@v1_bp.route("/exams/<exam_id>", methods=["PUT"])
@jwt_required()
@roles_required(*AUTHOR_ROLES)
def update_exam(exam_id):
    data = request.get_json(silent=True) or {}

    try:
        update_exam_service(exam_id=exam_id, actor_id=get_jwt_identity(), data=data)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify({"message": "Exam updated successfully"}), 200

@v1_bp.route("/exams/<exam_id>", methods=["DELETE"])
@jwt_required()
@roles_required(*AUTHOR_ROLES)
def delete_exam(exam_id):
    delete_exam_service(exam_id=exam_id, actor_id=get_jwt_identity())
    return jsonify({"message": "Exam deleted successfully"}), 200

@v1_bp.route("/exams/<exam_id>/publish", methods=["POST"])
@jwt_required()
@roles_required(*AUTHOR_ROLES)
def publish_exam(exam_id):
    try:
        result = publish_exam_service(exam_id=exam_id, actor_id=get_jwt_identity())
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 409

    return jsonify({"message": "Exam published", **result}), 200

@v1_bp.route("/exams/<exam_id>/unpublish", methods=["POST"])
@jwt_required()
@roles_required(*AUTHOR_ROLES)
def unpublish_exam(exam_id):
    try:
        result = unpublish_exam_service(exam_id=exam_id, actor_id=get_jwt_identity())
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 409

    return jsonify({"message": "Exam unpublished", **result}), 200


# ------------------------
# Questions / blocks
# ------------------------

@v1_bp.route("/exams/<exam_id>/blocks", methods=["GET"])
@jwt_required()
@roles_required(*AUTHOR_ROLES)
def get_exam_blocks(exam_id):
    return jsonify(load_exam_blocks(exam_id=exam_id)), 200

@v1_bp.route("/exams/<exam_id>/blocks", methods=["PUT"])
@jwt_required()
@roles_required(*AUTHOR_ROLES)
def replace_exam_blocks(exam_id):
    data = request.get_json(silent=True) or {}
    blocks = data.get("blocks")

    if not isinstance(blocks, list) or not all(isinstance(b, dict) for b in blocks):
        return jsonify({"error": "blocks must be a list of objects"}), 400

    result = save_exam_blocks(exam_id=exam_id, blocks=blocks, actor_id=get_jwt_identity())

    return jsonify({"message": "Exam saved", **result}), 200

@v1_bp.route("/exams/<exam_id>/questions", methods=["PUT"])
@jwt_required()
@roles_required(*AUTHOR_ROLES)
def replace_exam_questions(exam_id):
    data = request.get_json(silent=True) or {}
    rows = data.get("questions")

    if not isinstance(rows, list):
        return jsonify({"error": "questions must be a list"}), 400

    questions = save_exam_questions(exam_id=exam_id, rows=rows, actor_id=get_jwt_identity())

    current_app.logger.debug("Stored %d raw question rows for exam %s", len(questions), exam_id)

    return jsonify({
        "message": "Questions replaced",
        "questions": [normalize_question(q) for q in questions],
    }), 200

@v1_bp.route("/exams/<exam_id>/history", methods=["GET"])
@jwt_required()
@roles_required(*AUTHOR_ROLES)
def exam_history(exam_id):
    limit = min(request.args.get("limit", 20, type=int), 100)

    logs = (
        AuditLog.query
        .filter_by(entity_type="exam", entity_id=exam_id)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(limit)
        .all()
    )

    return jsonify([normalize_audit_log(log) for log in logs]), 200
