from pydantic import BaseModel

from .common import RowId


class UserSummary(BaseModel):
    id: int
    name: str
    color: str


class UserOut(BaseModel):
    id: int
    name: str
    color: str
    avatar_image: str | None = None
    created_at: str
    updated_at: str
    last_login: str | None = None


class CreateUserRequest(BaseModel):
    name: str
    color: str
    avatar_image: str | None = None


class SelectUserRequest(BaseModel):
    id: RowId


class UpdateUserRequest(BaseModel):
    name: str | None = None
    color: str | None = None
    avatar_image: str | None = None
