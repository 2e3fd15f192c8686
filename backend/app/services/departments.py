"""Department catalogue, ordering and repositories."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models import Department, Subspecialty

# name, description, subspecialties
DEPARTMENT_CATALOGUE: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    ("Obstetrics", "Care during pregnancy, childbirth, and postpartum.", ()),
    ("Gynecology", "Health of the female reproductive system.", ()),
    (
        "Pediatrics",
        "Medical care of infants, children, and adolescents.",
        (
            "Neonatology",
            "Pediatric Cardiology",
            "Pediatric Endocrinology",
            "Pediatric Neurology",
            "Pediatric Oncology",
            "Pediatric Emergency Medicine",
            "Pediatric Psychiatry",
            "Pediatric Community Medicine",
            "Pediatric Nephrology",
            "Pediatric Gastroenterology",
            "Pediatric Hematology",
            "Pediatric Infectious Diseases",
            "Pediatric Pulmonology",
        ),
    ),
    (
        "Internal Medicine",
        "Comprehensive medical care for adults.",
        (
            "Cardiology",
            "Endocrinology",
            "Rheumatology",
            "Neurology",
            "Nephrology",
            "Gastroenterology",
            "Respiratory",
            "Dermatology",
            "Psychiatry",
            "Infectious Diseases",
        ),
    ),
    (
        "Surgery",
        "Surgical treatment and procedures.",
        (
            "General Surgery",
            "ENT Surgery",
            "Ophthalmology",
            "Anesthesiology",
            "Orthopedics",
            "Neurosurgery",
            "Plastic Surgery",
            "Urology",
            "Cardiothoracic Surgery",
            "Pediatric Surgery",
        ),
    ),
    ("Dentistry", "Oral health and dental care.", ()),
)

_PINNED_FIRST = ("Obstetrics", "Gynecology")
_PINNED_LAST = "Dentistry"


def department_sort_key(name: str, subspecialty_count: int) -> tuple:
    """Obstetrics and Gynecology first, Dentistry last.

    Everything in between lists departments with subspecialties ahead of
    those without, then alphabetically.
    """
    if name in _PINNED_FIRST:
        return (0, _PINNED_FIRST.index(name), "")
    if name == _PINNED_LAST:
        return (3, 0, "")
    return (1 if subspecialty_count else 2, 0, name.lower())


def sort_departments(departments: Iterable) -> list:
    return sorted(
        departments,
        key=lambda dept: department_sort_key(dept.name, len(dept.subspecialties)),
    )


class DepartmentRepository(Protocol):
    async def list_departments(self) -> list:
        ...

    async def find_department(self, name: str):
        ...


class SQLDepartmentRepository:
    """Department repository backed by SQLAlchemy."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_departments(self) -> list[Department]:
        result = await self.db.execute(
            select(Department)
            .options(selectinload(Department.subspecialties))
            .order_by(Department.name)
        )
        return sort_departments(result.scalars().all())

    async def find_department(self, name: str) -> Optional[Department]:
        """Find a department by its own name or by one of its subspecialties."""
        result = await self.db.execute(
            select(Department)
            .options(selectinload(Department.subspecialties))
            .where(Department.name == name)
        )
        department = result.scalar_one_or_none()
        if department:
            return department
        result = await self.db.execute(
            select(Department)
            .options(selectinload(Department.subspecialties))
            .join(Subspecialty)
            .where(Subspecialty.name == name)
        )
        return result.scalars().first()


async def seed_departments(session: AsyncSession) -> int:
    """Insert catalogue departments that are missing. Returns how many were created."""
    result = await session.execute(select(Department.name))
    existing = set(result.scalars().all())
    created = 0
    for name, description, subspecialties in DEPARTMENT_CATALOGUE:
        if name in existing:
            continue
        session.add(
            Department(
                name=name,
                description=description,
                subspecialties=[Subspecialty(name=sub) for sub in subspecialties],
            )
        )
        created += 1
    await session.flush()
    return created


@dataclass
class InMemorySubspecialty:
    id: int
    name: str


@dataclass
class InMemoryDepartment:
    id: int
    name: str
    description: Optional[str] = None
    subspecialties: list[InMemorySubspecialty] = field(default_factory=list)


class InMemoryDepartmentRepository:
    """In-memory repository preloaded with the department catalogue."""

    def __init__(self):
        self._departments: list[InMemoryDepartment] = []
        sub_id = 1
        for dept_id, (name, description, subspecialties) in enumerate(DEPARTMENT_CATALOGUE, start=1):
            subs = []
            for sub in subspecialties:
                subs.append(InMemorySubspecialty(id=sub_id, name=sub))
                sub_id += 1
            self._departments.append(
                InMemoryDepartment(id=dept_id, name=name, description=description, subspecialties=subs)
            )

    async def list_departments(self) -> list[InMemoryDepartment]:
        return sort_departments(self._departments)

    async def find_department(self, name: str) -> Optional[InMemoryDepartment]:
        for department in self._departments:
            if department.name == name:
                return department
        for department in self._departments:
            if any(sub.name == name for sub in department.subspecialties):
                return department
        return None
