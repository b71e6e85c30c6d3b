from pydantic import BaseModel

from .common import RowId


class ListUserOut(BaseModel):
    id: int
    name: str
    color: str
    avatar_image: str | None = None


class ListBookOut(BaseModel):
    id: int
    cover_image: str | None = None
    status_name: str | None = None


class ListOut(BaseModel):
    id: int
    user_id: int
    type_id: int
    name: str
    created_at: str
    updated_at: str
    user: ListUserOut
    books: list[ListBookOut] = []


class CreateListRequest(BaseModel):
    name: str
    type_id: RowId
    books: list[RowId]


class UpdateListRequest(BaseModel):
    name: str | None = None
    type_id: RowId | None = None
    books: list[RowId] | None = None
