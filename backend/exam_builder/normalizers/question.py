def normalize_question(question):
    """ExamQuestion -> wire row (camelCase keys, as the editor and decoders expect)."""
    return {
        "id": question.id,
        "type": question.type,
        "question": question.question or "",
        "options": question.options,
        "correctAnswer": question.correct_answer,
        "explanation": question.explanation or "",
        "points": question.points,
        "order": question.order,
        "difficulty": question.difficulty,
        "tags": question.tags or [],
        "caseSensitive": bool(question.case_sensitive),
        "partialCredit": bool(question.partial_credit),
        "minLength": question.min_length,
        "maxLength": question.max_length,
        "audioUrl": question.audio_url,
        "maxAudioPlays": question.max_audio_plays,
    }
