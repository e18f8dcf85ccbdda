# app/marks/schemas.py
from pydantic import BaseModel


class MarkCountsOut(BaseModel):
    post_id: int
    counts: dict[str, int]  # {"like": 3, "love": 1, ...}
