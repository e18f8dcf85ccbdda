# app/posts/schemas.py
from pydantic import BaseModel, Field
from datetime import datetime


class PostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    body: str | None = None


class PostOut(BaseModel):
    id: int
    title: str
    body: str | None
    created_at: datetime | None = None

    # 🏷️ conteos por tipo (solo tipos con marcas) + atajos de los 3 botones
    marks_count: dict[str, int]
    likes_count: int
    favorites_count: int
    bookmarks_count: int

    # tipos que el viewer tiene puestos en este post
    marked: list[str]

    class Config:
        from_attributes = True
