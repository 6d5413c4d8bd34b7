# pharmadir/schemas/pharmacies.py
"""
Pydantic schemas for the pharmacy catalogue.
"""
from typing import Optional
from pydantic import BaseModel, Field

class PharmacyIn(BaseModel):
    """Request model for creating or replacing a pharmacy (admin only)."""
    name: str = Field(min_length=1, max_length=200)
    address: str = Field(min_length=1, max_length=300)
    city: Optional[str] = None
    phone: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

class PharmacyOut(PharmacyIn):
    """A pharmacy as returned by the API."""
    id: str
    updatedAt: Optional[str] = None
