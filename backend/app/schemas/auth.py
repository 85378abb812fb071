# app/schemas/auth.py
from pydantic import BaseModel, Field

from app.schemas.user import UserOut


class RegisterIn(BaseModel):
    name: str = Field(max_length=100)
    email: str = Field(max_length=255)
    password: str = Field(max_length=128)


class LoginIn(BaseModel):
    email: str
    password: str


class AuthOut(BaseModel):
    user: UserOut
    token: str


class MessageOut(BaseModel):
    message: str
