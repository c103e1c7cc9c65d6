"""Authentication schemas for the To-dogether backend."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """Minimal user profile as returned by ``users/me``."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int | str = Field(..., description="User id")
    username: str = Field(..., description="Login name")
    color_code: str | None = Field(default=None, alias="colorCode")
    couple_id: int | str | None = Field(default=None, alias="coupleId")


class SessionRecord(BaseModel):
    """Persisted session: the single record kept in durable storage."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str | None = Field(default=None, alias="accessToken")
    refresh_token: str | None = Field(default=None, alias="refreshToken")


class TokenResponse(BaseModel):
    """Body of a successful login or register call."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    access_token: str | None = Field(default=None, alias="accessToken")
    refresh_token: str | None = Field(default=None, alias="refreshToken")
    username: str | None = None
    user_id: int | str | None = Field(default=None, alias="userId")
    invite_token: str | None = Field(default=None, alias="inviteToken")


class RegisterRequest(BaseModel):
    """Registration payload. ``invite_token`` pairs the account with a partner."""

    model_config = ConfigDict(populate_by_name=True)

    username: str
    password: str
    invite_token: str | None = Field(default=None, alias="inviteToken")

    def to_payload(self) -> dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


class AuthSuccess(BaseModel):
    """Credentials accepted."""

    success: Literal[True] = True
    user: User
    invite_token: str | None = None


class AuthFailure(BaseModel):
    """Credentials rejected by the backend. Display ``message`` inline."""

    success: Literal[False] = False
    message: str


AuthResult = AuthSuccess | AuthFailure
