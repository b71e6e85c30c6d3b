from pydantic import BaseModel


class JournalOut(BaseModel):
    id: int
    book_id: int
    user_id: int
    title: str
    content: str
    created_at: str
    updated_at: str


class CreateJournalRequest(BaseModel):
    title: str
    content: str


class UpdateJournalRequest(BaseModel):
    title: str | None = None
    content: str | None = None
