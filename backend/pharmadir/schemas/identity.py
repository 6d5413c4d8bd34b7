# pharmadir/schemas/identity.py
"""
Identity types shared by the resolver, the services and the routers.
"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel

class Role(str, Enum):
    """Role stored on the profile document and embedded in session tokens."""
    USER = "USER"
    ADMIN = "ADMIN"

class UserIdentity(BaseModel):
    """
    Verified identity of the caller, produced by the identity resolver.
    Every authorized operation receives one of these, never a raw token.
    """
    uid: str  # Provider account id, also the profile document id
    email: str
    displayName: Optional[str] = None
    emailVerified: bool = False
    role: Role = Role.USER
