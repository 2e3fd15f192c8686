from typing import Optional

from pydantic import Field

from app.schemas.base import CamelModel


class SubspecialtyResponse(CamelModel):
    id: int
    name: str


class DepartmentResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    subspecialties: list[SubspecialtyResponse] = Field(default_factory=list)


class DepartmentListResponse(CamelModel):
    departments: list[DepartmentResponse]
