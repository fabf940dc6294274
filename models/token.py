from pydantic import BaseModel, EmailStr

from models.user import User


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    user: User
    token: str
