# pharmadir/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
"""
from typing import Optional
from pydantic import BaseModel, Field

class RegisterIn(BaseModel):
    """Request model for account registration."""
    email: str
    password: str
    name: str = Field(min_length=1, max_length=128)  # Display name

class LoginIn(BaseModel):
    """Request model for login."""
    email: str
    password: str

class EmailIn(BaseModel):
    """Request model for forgot-password and resend-verification."""
    email: str

class ResetPasswordIn(BaseModel):
    """Request model for completing a password reset."""
    token: str  # Reset token taken from the emailed link
    newPassword: str

class UserOut(BaseModel):
    """Profile summary returned on login."""
    name: Optional[str] = None
    email: str
    role: str = "USER"

class LoginOut(BaseModel):
    """Response model for a successful login."""
    token: str  # Session token, sent back as "Authorization: Bearer <token>"
    user: UserOut

class MessageOut(BaseModel):
    """Generic message response."""
    message: str
