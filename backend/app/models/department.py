from typing import Optional

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin


class Department(Base, TimestampMixin):
    """Clinical department a case can be generated for."""

    __tablename__ = "departments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    subspecialties: Mapped[list["Subspecialty"]] = relationship(
        back_populates="department",
        cascade="all, delete-orphan",
        order_by="Subspecialty.name",
    )

    def __repr__(self) -> str:
        return f"<Department(id={self.id}, name='{self.name}')>"


class Subspecialty(Base, TimestampMixin):
    __tablename__ = "subspecialties"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    department_id: Mapped[int] = mapped_column(
        ForeignKey("departments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    department: Mapped["Department"] = relationship(back_populates="subspecialties")

    def __repr__(self) -> str:
        return f"<Subspecialty(id={self.id}, name='{self.name}')>"
