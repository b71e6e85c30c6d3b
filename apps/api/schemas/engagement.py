from pydantic import BaseModel


class RatingRequest(BaseModel):
    rating: float


class RatingOut(BaseModel):
    id: int
    user_id: int
    book_id: int
    rating: float
    created_at: str
    updated_at: str


class StatusRequest(BaseModel):
    status_id: int


class StatusOut(BaseModel):
    id: int
    user_id: int
    book_id: int
    status_id: int
    status_name: str | None = None
    created_at: str
    updated_at: str
