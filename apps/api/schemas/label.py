from pydantic import BaseModel


class LabelOut(BaseModel):
    """A tag or a genre."""

    id: int
    user_id: int
    name: str
    color: str
    created_at: str
    updated_at: str


class CreateLabelRequest(BaseModel):
    name: str
    color: str


class UpdateLabelRequest(BaseModel):
    name: str | None = None
    color: str | None = None
