from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.departments import DepartmentListResponse, DepartmentResponse
from app.services.departments import DepartmentRepository, SQLDepartmentRepository

router = APIRouter(prefix="/departments", tags=["Departments"])

CACHE_CONTROL = "public, max-age=3600, stale-while-revalidate=86400"


def get_department_repo(db: AsyncSession = Depends(get_db)) -> DepartmentRepository:
    return SQLDepartmentRepository(db)


@router.get("", response_model=DepartmentListResponse)
async def list_departments(
    response: Response,
    repo: DepartmentRepository = Depends(get_department_repo),
):
    """List departments with their subspecialties in display order."""
    departments = await repo.list_departments()
    response.headers["Cache-Control"] = CACHE_CONTROL
    return DepartmentListResponse(
        departments=[DepartmentResponse.model_validate(d) for d in departments]
    )
