from app.models.base import Base, TimestampMixin
from app.models.case import Case, CaseReport, Feedback, Message
from app.models.department import Department, Subspecialty
from app.models.user import User

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Core Models
    "User",
    "Department",
    "Subspecialty",
    "Case",
    "Message",
    "Feedback",
    "CaseReport",
]
