from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_fields
from app.database import get_db
from app.schemas.users import UserResponse, UserUpdate, UserUpsert
from app.services.users import SQLUserRepository, UserRepository

router = APIRouter(prefix="/users", tags=["Users"])


def get_user_repo(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return SQLUserRepository(db)


@router.post("", response_model=UserResponse)
async def create_or_get_user(
    payload: UserUpsert,
    response: Response,
    repo: UserRepository = Depends(get_user_repo),
):
    """Return the user with this e-mail, creating it on first sign-in."""
    require_fields("Email is required", payload.email)
    user = await repo.get_by_email(payload.email)
    if user is None:
        user = await repo.create_user(payload.email, payload.name, payload.country)
        response.status_code = status.HTTP_201_CREATED
    return UserResponse.model_validate(user)


@router.get("/{email}", response_model=UserResponse)
async def get_user(email: str, repo: UserRepository = Depends(get_user_repo)):
    user = await repo.get_by_email(email)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse.model_validate(user)


@router.patch("/{email}", response_model=UserResponse)
async def update_user(
    email: str,
    payload: UserUpdate,
    repo: UserRepository = Depends(get_user_repo),
):
    """Update profile fields chosen during onboarding."""
    require_fields("Country is required", payload.country)
    user = await repo.get_by_email(email)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    user = await repo.update_user(user, name=payload.name, country=payload.country)
    return UserResponse.model_validate(user)
