from typing import Annotated

from fastapi import Request, Depends

from errors import AuthenticationError, InvalidTokenError, NotFoundError
from models.auth import Anonymous, AuthContext, Authenticated
from models.user import User
from services.comments import CommentLog
from services.posts import PostRepository
from services.s3 import S3Service
from services.tokens import TokenService
from services.users import UserService


async def get_token_service(request: Request) -> TokenService:
    """Get token service from app state"""
    return request.app.state.token_service


async def get_user_service(request: Request) -> UserService:
    """Get user service from app state"""
    return request.app.state.user_service


async def get_post_repository(request: Request) -> PostRepository:
    """Get post repository from app state"""
    return request.app.state.post_repository


async def get_comment_log(request: Request) -> CommentLog:
    """Get comment log from app state"""
    return request.app.state.comment_log


async def get_s3_service(request: Request) -> S3Service:
    """Get S3 service from app state"""
    return request.app.state.s3_service


async def get_auth_context(
        request: Request,
        tokens: Annotated[TokenService, Depends(get_token_service)],
        users: Annotated[UserService, Depends(get_user_service)],
) -> AuthContext:
    """
    Resolve the Authorization header into the caller's identity.

    No header means an anonymous caller. A header that is present but
    malformed, carries a bad token, or names a user that no longer exists
    is rejected outright.
    """
    authorization = request.headers.get("Authorization")
    if not authorization:
        return Anonymous()

    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid authorization header")

    token = authorization[len("Bearer "):].strip()
    if not token:
        raise AuthenticationError("Invalid authorization header")

    user_id = tokens.verify(token)
    try:
        user = users.get_by_id(user_id)
    except NotFoundError:
        raise InvalidTokenError()

    request.state.user = user
    return Authenticated(user=user)


async def get_current_user(auth: Annotated[AuthContext, Depends(get_auth_context)]) -> User:
    """Require an authenticated caller and return their user record"""
    if not auth.is_authenticated:
        raise AuthenticationError()
    return auth.user


# Type annotations for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
Users = Annotated[UserService, Depends(get_user_service)]
Posts = Annotated[PostRepository, Depends(get_post_repository)]
Comments = Annotated[CommentLog, Depends(get_comment_log)]
S3 = Annotated[S3Service, Depends(get_s3_service)]
