from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.department import Department
    from app.models.user import User


class Case(Base, TimestampMixin):
    """A generated clinical case and the student's work on it.

    The model-generated part (diagnosis, primary info, opening line, patient
    or pediatric profile) is written once at creation. The student's plans
    and final answers are filled in as the clerking progresses and frozen
    when the case is completed.
    """

    __tablename__ = "cases"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    department_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    diagnosis: Mapped[str] = mapped_column(String(255), nullable=False)
    primary_info: Mapped[str] = mapped_column(Text, nullable=False)
    opening_line: Mapped[str] = mapped_column(Text, nullable=False)
    is_pediatric: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    difficulty_level: Mapped[str] = mapped_column(
        String(20), nullable=False, default="standard"
    )
    mode: Mapped[str] = mapped_column(
        String(20), nullable=False, default="clerking",
        comment="clerking or osce"
    )
    case_profile: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSON, nullable=True,
        comment="patientProfile or pediatricProfile as returned by the model"
    )

    preliminary_diagnosis: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    examination_plan: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    investigation_plan: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    final_diagnosis: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    management_plan: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    examination_results: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    investigation_results: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )

    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    user: Mapped["User"] = relationship(back_populates="cases")
    department: Mapped[Optional["Department"]] = relationship()
    messages: Mapped[list["Message"]] = relationship(
        back_populates="case",
        cascade="all, delete-orphan",
        order_by="Message.timestamp",
    )
    feedback: Mapped[Optional["Feedback"]] = relationship(
        back_populates="case", cascade="all, delete-orphan", uselist=False
    )
    report: Mapped[Optional["CaseReport"]] = relationship(
        back_populates="case", cascade="all, delete-orphan", uselist=False
    )

    @property
    def time_spent_minutes(self) -> int:
        if not self.completed_at or not self.created_at:
            return 0
        delta = self.completed_at - self.created_at
        return max(0, round(delta.total_seconds() / 60))

    def __repr__(self) -> str:
        return f"<Case(id={self.id}, user_id={self.user_id}, diagnosis='{self.diagnosis}')>"


class Message(Base):
    """Single line of the clerking transcript."""

    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    case_id: Mapped[int] = mapped_column(
        ForeignKey("cases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender: Mapped[str] = mapped_column(
        String(20), nullable=False,
        comment="student, patient, parent, system"
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    speaker_label: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    case: Mapped["Case"] = relationship(back_populates="messages")

    def __repr__(self) -> str:
        preview = self.text[:50] + "..." if len(self.text) > 50 else self.text
        return f"<Message(id={self.id}, sender='{self.sender}', text='{preview}')>"


class Feedback(Base, TimestampMixin):
    """Teaching feedback produced when a case is completed."""

    __tablename__ = "feedback"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    case_id: Mapped[int] = mapped_column(
        ForeignKey("cases.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    diagnosis: Mapped[str] = mapped_column(String(255), nullable=False)
    key_learning_point: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    what_you_did_well: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    what_could_be_improved: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    clinical_tip: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    clinical_reasoning: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    missed_opportunities: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    clinical_pearls: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    case: Mapped["Case"] = relationship(back_populates="feedback")


class CaseReport(Base, TimestampMixin):
    """Summary sections generated concurrently after completion."""

    __tablename__ = "case_reports"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    case_id: Mapped[int] = mapped_column(
        ForeignKey("cases.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    clinical_summary: Mapped[str] = mapped_column(Text, nullable=False)
    key_findings: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    investigations: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    management_plan: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    clinical_opportunities: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    clinical_pearls: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    generated_fields: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list,
        comment="Sections produced by the model; the rest are fallbacks"
    )

    case: Mapped["Case"] = relationship(back_populates="report")
