from pydantic import EmailStr, Field

from app.schemas.base import APIModel


# Properties for admin login
class AdminLogin(APIModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


# Principal summary returned to client
class Admin(APIModel):
    id: int
    email: str
    name: str


# Token response
class Token(APIModel):
    message: str = "Login successful"
    token: str
    token_type: str = "bearer"
    admin: Admin


class TokenVerification(APIModel):
    valid: bool = True
    admin: Admin
