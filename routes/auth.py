from typing import Dict, Any

from fastapi import APIRouter, status

from dependencies import Users, CurrentUser
from models.token import AuthResponse, LoginRequest
from models.user import RegisterRequest

router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, users: Users) -> AuthResponse:
    user, token = await users.register(request.username, request.email, request.password)
    return AuthResponse(user=user, token=token)


@router.post("/login")
async def login(request: LoginRequest, users: Users) -> AuthResponse:
    user, token = await users.authenticate(request.email, request.password)
    return AuthResponse(user=user, token=token)


@router.get("/verify")
async def verify_session(current_user: CurrentUser) -> Dict[str, Any]:
    """Check that the bearer token is still good"""
    return {
        "valid": True,
        "user": current_user,
    }
