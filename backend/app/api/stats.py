from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.cases import get_case_repo
from app.api.deps import require_fields
from app.schemas.cases import DepartmentCount, UserStatsResponse
from app.services.cases import CaseRepository

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("", response_model=UserStatsResponse)
async def get_user_stats(
    user_id: Optional[int] = Query(None, alias="userId"),
    repo: CaseRepository = Depends(get_case_repo),
):
    """Case totals, completion rate and per-department counts for a student."""
    require_fields("userId parameter is required", user_id)
    stats = await repo.get_user_stats(user_id)
    return UserStatsResponse(
        user_id=user_id,
        total_cases=stats.total_cases,
        completed_cases=stats.completed_cases,
        completion_rate=stats.completion_rate,
        department_breakdown=[
            DepartmentCount(department=name, count=count)
            for name, count in stats.department_breakdown
        ],
    )
