# TDX Feedback Models
# Feedback record and in-memory storage

import itertools
import threading
from dataclasses import dataclass
from datetime import datetime, timezone

MAX_CONTEXT_LENGTH = 10000


@dataclass
class Feedback:
    """A single feedback submission"""

    message: str
    context: str = None
    id: int = None
    created_at: datetime = None

    def validate(self):
        """Return a list of validation error messages (empty when valid)"""
        errors = []
        if self.message is None or not str(self.message).strip():
            errors.append("Message can't be blank")
        if self.context is not None and len(str(self.context)) > MAX_CONTEXT_LENGTH:
            errors.append(f"Context is too long (maximum is {MAX_CONTEXT_LENGTH} characters)")
        return errors

    def is_valid(self):
        return not self.validate()

    def to_dict(self):
        return {
            'id': self.id,
            'message': self.message,
            'context': self.context,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }


class FeedbackStore:
    """Thread-safe in-memory feedback storage.

    Stands in for the host application's database; ids are assigned on save.
    """

    def __init__(self):
        self._records = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def save(self, feedback):
        """Store the feedback, assigning an id and timestamp if missing"""
        with self._lock:
            if feedback.id is None:
                feedback.id = next(self._ids)
            if feedback.created_at is None:
                feedback.created_at = datetime.now(timezone.utc)
            self._records[feedback.id] = feedback
        return feedback

    def get(self, feedback_id):
        return self._records.get(feedback_id)

    def list_all(self):
        """All feedback, oldest first"""
        return sorted(self._records.values(), key=lambda record: record.id)

    def count(self):
        return len(self._records)
