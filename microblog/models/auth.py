"""Login models."""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    password: str = Field(default="", max_length=4096)


class LoginResponse(BaseModel):
    message: str
