"""Signed-in user's profile endpoints."""

from fastapi import APIRouter, Depends

from api.dependencies import require_principal
from api.schemas.users import UserProfileEnvelope, UserProfileResponse, UserProfileUpdate
from api.services import users as user_service
from core.security import Principal

router = APIRouter(prefix="/api/user", tags=["users"])


@router.get("/profile", response_model=UserProfileEnvelope, summary="Get Profile")
async def get_profile(principal: Principal = Depends(require_principal)) -> UserProfileEnvelope:
    """The caller's profile; the User row is created on first access."""
    user = await user_service.get_profile(principal)
    return UserProfileEnvelope(user=UserProfileResponse.model_validate(user))


@router.put("/profile", response_model=UserProfileEnvelope, summary="Update Profile")
async def update_profile(
    body: UserProfileUpdate,
    principal: Principal = Depends(require_principal),
) -> UserProfileEnvelope:
    """
    Update profile fields. Only keys present in the body are written;
    a blank string clears the field.
    """
    user = await user_service.update_profile(principal, body.model_dump(exclude_unset=True))
    return UserProfileEnvelope(
        message="Profile updated successfully",
        user=UserProfileResponse.model_validate(user),
    )
