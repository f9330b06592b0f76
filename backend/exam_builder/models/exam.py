from exam_builder.extensions import db
from .base import BaseModel
from .soft_delete_mixin import SoftDeleteMixin

class Exam(BaseModel, SoftDeleteMixin):
    __tablename__ = "exams"

    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(50), default="draft", index=True)  # draft | published
    time_limit = db.Column(db.Integer, nullable=True)  # minutes
    passing_score = db.Column(db.Integer, nullable=True)
    points = db.Column(db.Integer, nullable=False, default=0)
    created_by = db.Column(db.String(36), nullable=True)

    # Relationship to questions (ordered, replaced wholesale on every save)
    questions = db.relationship(
        "ExamQuestion",
        back_populates="exam",
        order_by="ExamQuestion.order",
        cascade="all, delete-orphan"
    )
