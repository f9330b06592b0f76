# exam_builder/models/soft_delete_mixin.py
from exam_builder.extensions import db
from .base import local_time_now

class SoftDeleteMixin:
    deleted_at = db.Column(db.DateTime, nullable=True)

    def soft_delete(self):
        self.deleted_at = local_time_now()

    @property
    def is_deleted(self):
        return self.deleted_at is not None
