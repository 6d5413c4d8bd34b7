# pharmadir/models/__init__.py
"""
Database models module initialization.

Models exported:
- StoredDocument: one document of the document store
- Account: identity-provider account (credential side of a user)
"""
from .document import StoredDocument
from .account import Account
