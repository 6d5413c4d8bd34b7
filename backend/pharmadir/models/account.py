# pharmadir/models/account.py
"""
Database model for identity-provider accounts.
Holds the credential side of a user (email, password hash, verification
flag). The profile side (role, favorites) lives in the document store under
users/<uid>.
"""
import uuid
from tortoise import fields, models

class Account(models.Model):
    """
    Account database model used by the local identity provider.

    Security:
    - Password is stored as an argon2 hash
    - Email is unique and stored lowercased
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # uid, immutable once created
    email = fields.CharField(max_length=256, unique=True, index=True)
    password_hash = fields.CharField(max_length=255)
    display_name = fields.CharField(max_length=128, null=True)
    email_verified = fields.BooleanField(default=False)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "accounts"
