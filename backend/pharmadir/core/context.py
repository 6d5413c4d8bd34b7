# pharmadir/core/context.py
"""
Application context: every service instance, built once at startup and
handed to request handlers through `app.state.context`. Components receive
their collaborators through their constructors; nothing below this module
reaches for a global.
"""
import datetime as dt
from dataclasses import dataclass

from pharmadir.config import Settings
from pharmadir.core.security import TokenSigner
from pharmadir.services.auth_service import AuthService
from pharmadir.services.comments_service import CommentsService
from pharmadir.services.favorites_service import FavoritesService
from pharmadir.services.identity_base import IdentityProvider
from pharmadir.services.identity_local import LocalIdentityProvider
from pharmadir.services.identity_resolver import IdentityResolver
from pharmadir.services.mailer import NotificationDispatcher, build_mailer
from pharmadir.services.pharmacy_service import PharmacyService
from pharmadir.services.store_base import DocumentStore
from pharmadir.services.store_tortoise import TortoiseDocumentStore


@dataclass
class AppContext:
    settings: Settings
    store: DocumentStore
    signer: TokenSigner
    provider: IdentityProvider
    mailer: NotificationDispatcher
    auth: AuthService
    resolver: IdentityResolver
    favorites: FavoritesService
    comments: CommentsService
    pharmacies: PharmacyService


def build_context(
    settings: Settings,
    store: DocumentStore | None = None,
    provider: IdentityProvider | None = None,
    mailer: NotificationDispatcher | None = None,
) -> AppContext:
    """
    Wire all services together.

    store, provider and mailer default to the database-backed implementations
    and the mailer chosen by configuration; tests pass their own.
    """
    signer = TokenSigner(settings.jwt_secret, settings.jwt_alg)
    store = store or TortoiseDocumentStore()
    provider = provider or LocalIdentityProvider(
        signer,
        action_base_url=settings.public_api_url,
        verify_ttl=dt.timedelta(minutes=settings.verify_token_expire_minutes),
        reset_ttl=dt.timedelta(minutes=settings.reset_token_expire_minutes),
    )
    mailer = mailer or build_mailer(settings)
    return AppContext(
        settings=settings,
        store=store,
        signer=signer,
        provider=provider,
        mailer=mailer,
        auth=AuthService(
            provider,
            store,
            signer,
            mailer,
            client_url=settings.client_url,
            access_ttl=dt.timedelta(minutes=settings.access_token_expire_minutes),
        ),
        resolver=IdentityResolver(signer, provider),
        favorites=FavoritesService(store, max_attempts=settings.favorites_max_attempts),
        comments=CommentsService(store),
        pharmacies=PharmacyService(store),
    )
