from .question import normalize_question

def normalize_exam(exam, include_questions=False):
    data = {
        "id": exam.id,
        "title": exam.title,
        "description": exam.description,
        "status": exam.status,
        "timeLimit": exam.time_limit,
        "passingScore": exam.passing_score,
        "points": exam.points,
        "createdBy": exam.created_by,
        "createdAt": exam.created_at.isoformat() if exam.created_at else None,
        "updatedAt": exam.updated_at.isoformat() if exam.updated_at else None,
    }

    if include_questions:
        questions = sorted(exam.questions, key=lambda q: q.order)
        data["questions"] = [
            normalize_question(q) for q in questions
        ]

    return data
