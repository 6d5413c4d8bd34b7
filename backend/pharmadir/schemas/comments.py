# pharmadir/schemas/comments.py
"""
Pydantic schemas for pharmacy comments.
"""
from typing import Optional
from pydantic import BaseModel, Field

class CommentIn(BaseModel):
    """Request model for a new comment."""
    text: str = Field(min_length=1, max_length=2000)
    starRating: int = Field(ge=1, le=5)  # 1 to 5 stars

class CommentOut(BaseModel):
    """A stored comment."""
    id: str
    ownerUid: str
    authorName: Optional[str] = None
    text: str
    starRating: int
    createdAt: Optional[str] = None  # ISO timestamp assigned by the store
