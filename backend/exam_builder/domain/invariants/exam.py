from exam_builder.blocks.extractors import QUESTION_TYPES
from .exceptions import InvariantViolation

def assert_question_row(row):
    if not isinstance(row, dict):
        raise InvariantViolation("Each question row must be an object.")

    if row.get("type") not in QUESTION_TYPES:
        raise InvariantViolation(
            f"Invalid question type: {row.get('type')!r}"
        )

    if not isinstance(row.get("question", ""), str):
        raise InvariantViolation("Question text must be a string.")

    options = row.get("options")
    if options is not None and not isinstance(options, (dict, list)):
        raise InvariantViolation("Options must be an object, a list or null.")

    points = row.get("points", 0)
    if not isinstance(points, int) or isinstance(points, bool) or points < 0:
        raise InvariantViolation(f"Invalid points value: {points!r}")

    order = row.get("order")
    if not isinstance(order, int) or isinstance(order, bool):
        raise InvariantViolation(f"Invalid order value: {order!r}")

def assert_question_rows(rows):
    if not isinstance(rows, list):
        raise InvariantViolation("Questions must be a list.")

    for row in rows:
        assert_question_row(row)

    orders = [row.get("order") for row in rows]
    expected = list(range(len(orders)))

    if sorted(orders) != expected:
        raise InvariantViolation(
            f"Question orders are not consecutive starting from 0: {orders}"
        )

def assert_exam(exam, publish=False):
    questions = exam.questions

    if publish and not questions:
        raise InvariantViolation("Cannot publish an exam without questions.")

    orders = [question.order for question in questions]
    if sorted(orders) != list(range(len(orders))):
        raise InvariantViolation(
            f"Question orders are not consecutive starting from 0: {orders}"
        )
