# pharmadir/schemas/favorites.py
"""
Pydantic schemas for the favorites endpoints.
"""
from typing import List
from pydantic import BaseModel, Field, constr

class FavoritesIn(BaseModel):
    """Pharmacy ids to add to or remove from the caller's favorites."""
    favorites: List[constr(strip_whitespace=True, min_length=1, max_length=128)] = Field(min_length=1)

class FavoritesOut(BaseModel):
    """Current favorites of the caller."""
    favorites: List[str]
