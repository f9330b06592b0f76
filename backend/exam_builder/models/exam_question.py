from exam_builder.extensions import db
from .base import BaseModel

class ExamQuestion(BaseModel):
    __tablename__ = "exam_questions"

    exam_id = db.Column(db.String(36), db.ForeignKey("exams.id"), nullable=False)
    type = db.Column(db.String(32), nullable=False)  # MULTIPLE_CHOICE, ESSAY, ...
    question = db.Column(db.Text, nullable=False, default="")
    options = db.Column(db.JSON, nullable=True)  # list of texts, tagged object or null
    correct_answer = db.Column(db.JSON, nullable=True)  # string, list of strings or null
    explanation = db.Column(db.Text, default="")
    points = db.Column(db.Integer, nullable=False, default=0)
    order = db.Column(db.Integer, nullable=False, default=0)
    difficulty = db.Column(db.String(16), nullable=False, default="MEDIUM")
    tags = db.Column(db.JSON, default=list)
    case_sensitive = db.Column(db.Boolean, default=False)
    partial_credit = db.Column(db.Boolean, default=False)

    # Legacy columns still read by exam-taking views
    min_length = db.Column(db.Integer, nullable=True)
    max_length = db.Column(db.Integer, nullable=True)
    audio_url = db.Column(db.String(512), nullable=True)
    max_audio_plays = db.Column(db.Integer, nullable=True)

    exam = db.relationship("Exam", back_populates="questions")

    __table_args__ = (
        db.Index("idx_exam_question_exam_order", "exam_id", "order"),
    )
