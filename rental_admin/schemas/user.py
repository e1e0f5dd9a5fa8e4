from pydantic import BaseModel, EmailStr
from typing import Optional


class SignInRequest(BaseModel):
    email: EmailStr
    name: Optional[str] = None


class Token(BaseModel):
    access_token: str
    token_type: str
    role: str


class SessionResponse(BaseModel):
    id: int
    email: str
    role: str
