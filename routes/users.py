from fastapi import APIRouter

from dependencies import Users, CurrentUser
from models.user import ProfileUpdate, User

router = APIRouter()


@router.get("/profile")
async def get_profile(current_user: CurrentUser) -> User:
    """Get the current user's profile"""
    return current_user


@router.put("/profile")
async def update_profile(users: Users, update: ProfileUpdate, current_user: CurrentUser) -> User:
    """Update the current user's bio and avatar"""
    return users.update_profile(current_user.id, update)


@router.get("/{user_id}")
async def get_user(users: Users, user_id: str) -> User:
    return users.get_by_id(user_id)
