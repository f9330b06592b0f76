from .exam import Exam
from .exam_question import ExamQuestion
from .audit_log import AuditLog
