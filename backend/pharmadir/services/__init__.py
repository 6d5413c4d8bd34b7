"""
Services Module

- Document store: interface + Tortoise-backed implementation
- Identity provider: interface + local (database) implementation
- Mailer: verification / password reset emails
- Auth, identity resolution, favorites, comments, pharmacies
"""

from .store_base import (
    SERVER_TIMESTAMP,
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
    StoreConflictError,
)
from .store_tortoise import TortoiseDocumentStore
from .identity_base import (
    AccountNotFoundError,
    IdentityProvider,
    ProviderAccount,
    ProviderError,
)
from .identity_local import LocalIdentityProvider
from .mailer import (
    HttpMailer,
    LoggingMailer,
    MailDeliveryError,
    NotificationDispatcher,
    build_mailer,
)
from .auth_service import AuthService
from .identity_resolver import IdentityResolver
from .favorites_service import FavoritesService
from .comments_service import CommentsService
from .pharmacy_service import PharmacyService

__all__ = [
    # Document store
    "SERVER_TIMESTAMP",
    "DocumentNotFoundError",
    "DocumentSnapshot",
    "DocumentStore",
    "StoreConflictError",
    "TortoiseDocumentStore",
    # Identity provider
    "AccountNotFoundError",
    "IdentityProvider",
    "ProviderAccount",
    "ProviderError",
    "LocalIdentityProvider",
    # Mail
    "HttpMailer",
    "LoggingMailer",
    "MailDeliveryError",
    "NotificationDispatcher",
    "build_mailer",
    # Use cases
    "AuthService",
    "IdentityResolver",
    "FavoritesService",
    "CommentsService",
    "PharmacyService",
]
