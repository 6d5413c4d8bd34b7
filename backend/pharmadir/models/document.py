# pharmadir/models/document.py
"""
Database model for store documents.
Each row is one document addressed by its full path
("users/<uid>", "pharmacies/<id>/comments/<cid>"). The JSON payload is the
document body; `version` grows by one on every write and backs the store's
compare-and-set.
"""
from tortoise import fields, models

class StoredDocument(models.Model):
    """
    Document database model.

    Relationships:
    - None at the ORM level; subcollections are expressed through the
      `collection` path prefix (e.g. "pharmacies/p1/comments").
    """
    id = fields.IntField(pk=True)
    path = fields.CharField(max_length=512, unique=True, index=True)  # "<collection>/<doc_id>"
    collection = fields.CharField(max_length=480, index=True)  # Collection path, may be nested
    doc_id = fields.CharField(max_length=128)  # Last path segment
    data = fields.JSONField(default=dict)  # Document body
    version = fields.IntField(default=1)  # Incremented on every write
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "documents"
