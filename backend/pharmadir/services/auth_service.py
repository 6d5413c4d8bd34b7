"""
Credential & Token Gateway: registration, login, email verification and
password recovery.

Provider account and profile document are written separately, without a
transaction: if the profile write fails after the account was created, the
provider account is left orphaned and the same email cannot register again.
"""
import datetime as dt
import logging

from pharmadir.core.errors import InvalidInputError, NotFoundError, UnauthorizedError
from pharmadir.core.security import TOKEN_ACCESS, TOKEN_RESET, TokenError, TokenSigner
from pharmadir.schemas.identity import Role
from .identity_base import AccountNotFoundError, IdentityProvider, ProviderError
from .mailer import MailDeliveryError, NotificationDispatcher
from .guarded import read_modify_write
from .store_base import SERVER_TIMESTAMP, DocumentStore

logger = logging.getLogger("uvicorn.error")

USERS = "users"

REGISTERED_MESSAGE = "Registration successful! Please check your email for verification."
REGISTERED_NO_MAIL_MESSAGE = (
    "Registration successful, but the verification email could not be sent. "
    "Please request a new verification email."
)
RESET_REQUESTED_MESSAGE = "If an account exists, password reset instructions will be sent."
VERIFICATION_RESENT_MESSAGE = "If the account exists and is not verified yet, a new verification email will be sent."
PASSWORD_RESET_MESSAGE = "Password has been successfully reset. You can now login."
INVALID_CREDENTIALS = "Invalid credentials"
INVALID_RESET_TOKEN = "Invalid or expired reset token"
PROFILE_NOT_FOUND = "User profile not found"
RESET_CLAIM_ATTEMPTS = 5


def _timestamp(value) -> float | None:
    """Epoch seconds of a stored ISO timestamp (None if absent or unreadable)."""
    if not value:
        return None
    try:
        parsed = dt.datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed.timestamp()


class AuthService:
    """Identity-lifecycle operations on top of the provider, store, signer and mailer"""

    def __init__(
        self,
        provider: IdentityProvider,
        store: DocumentStore,
        signer: TokenSigner,
        mailer: NotificationDispatcher,
        client_url: str,
        access_ttl: dt.timedelta,
    ):
        self.provider = provider
        self.store = store
        self.signer = signer
        self.mailer = mailer
        self.client_url = client_url.rstrip("/")
        self.access_ttl = access_ttl

    # -------- registration / verification --------
    async def register(self, email: str, password: str, display_name: str) -> dict:
        try:
            account = await self.provider.create_account(email, password, display_name)
        except ProviderError as exc:
            logger.warning("[auth] registration rejected for %s: %s", email, exc.message)
            raise InvalidInputError(exc.message)

        await self.store.set(USERS, account.uid, {
            "email": account.email,
            "displayName": account.display_name,
            "role": Role.USER.value,
            "favorites": [],
            "createdAt": SERVER_TIMESTAMP,
        })

        if not await self._send_verification(account.email, account.display_name):
            return {"message": REGISTERED_NO_MAIL_MESSAGE}
        return {"message": REGISTERED_MESSAGE}

    async def _send_verification(self, email: str, name: str | None) -> bool:
        try:
            link = await self.provider.generate_verification_link(email, f"{self.client_url}/verify-email")
            await self.mailer.send_verification_email(email, link, name or "")
        except (ProviderError, MailDeliveryError) as exc:
            logger.error("[auth] verification email for %s failed: %s", email, exc)
            return False
        return True

    async def verify_email(self, token: str) -> dict:
        try:
            account = await self.provider.confirm_email_verification(token)
        except ProviderError as exc:
            logger.warning("[auth] email verification failed: %s", exc.message)
            raise InvalidInputError("Invalid or expired verification link")
        return {"message": "Email verified. You can now login.", "email": account.email}

    async def resend_verification(self, email: str) -> dict:
        try:
            account = await self.provider.get_account_by_email(email)
        except AccountNotFoundError:
            logger.info("[auth] resend verification for unknown email %s", email)
            return {"message": VERIFICATION_RESENT_MESSAGE}
        if not account.email_verified:
            await self._send_verification(account.email, account.display_name)
        return {"message": VERIFICATION_RESENT_MESSAGE}

    # -------- login --------
    async def login(self, email: str, password: str) -> dict:
        try:
            account = await self.provider.get_account_by_email(email)
        except AccountNotFoundError:
            logger.info("[auth] login for unknown email %s", email)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not await self.provider.verify_password(account.email, password):
            logger.info("[auth] wrong password for %s", account.email)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not account.email_verified:
            raise UnauthorizedError("Email is not verified")

        profile = await self.store.get(USERS, account.uid)
        if profile is None:
            logger.error("[auth] account %s has no profile document", account.uid)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        role = profile.data.get("role") or Role.USER.value
        # Role is embedded so authorized calls need no profile read; it goes stale until re-login
        token = self.signer.sign(
            {"sub": account.uid, "email": account.email, "role": role, "typ": TOKEN_ACCESS},
            self.access_ttl,
        )
        return {
            "token": token,
            "user": {"name": account.display_name, "email": account.email, "role": role},
        }

    # -------- password recovery --------
    async def forgot_password(self, email: str) -> dict:
        """
        Send a reset link if the account exists.

        The answer is identical whatever happens, so it cannot be used to
        probe which emails are registered.
        """
        try:
            account = await self.provider.get_account_by_email(email)
            link = await self.provider.generate_reset_link(account.email, f"{self.client_url}/reset-password")
            await self.mailer.send_password_reset_email(account.email, link, account.display_name or "")
        except Exception as exc:
            logger.warning("[auth] forgot password for %s not sent: %s", email, exc)
        return {"message": RESET_REQUESTED_MESSAGE}

    async def reset_password(self, token: str, new_password: str) -> dict:
        try:
            claims = self.signer.verify(token, purpose=TOKEN_RESET)
        except TokenError as exc:
            logger.warning("[auth] reset token rejected: %s", exc)
            raise InvalidInputError(INVALID_RESET_TOKEN)
        email = claims.get("email")
        if not email:
            raise InvalidInputError(INVALID_RESET_TOKEN)

        try:
            account = await self.provider.get_account_by_email(email)
        except AccountNotFoundError:
            logger.warning("[auth] reset token for unknown account %s", email)
            raise InvalidInputError(INVALID_RESET_TOKEN)

        issued = claims.get("issued", claims.get("iat", 0))

        def claim(profile: dict) -> dict:
            # A token issued before the last reset has been used already (or superseded)
            last_reset = _timestamp(profile.get("lastPasswordReset"))
            if last_reset is not None and issued <= last_reset:
                logger.warning("[auth] replayed reset token for %s", account.email)
                raise InvalidInputError(INVALID_RESET_TOKEN)
            return {"lastPasswordReset": SERVER_TIMESTAMP}

        # The token is claimed before the password changes; of concurrent uses only one wins
        try:
            await read_modify_write(self.store, USERS, account.uid, claim, RESET_CLAIM_ATTEMPTS, PROFILE_NOT_FOUND)
        except NotFoundError:
            logger.error("[auth] reset for account %s which has no profile document", account.uid)
            raise InvalidInputError(INVALID_RESET_TOKEN)

        try:
            await self.provider.update_account(account.uid, password=new_password)
        except ProviderError as exc:
            # The token is spent by now; a new link is needed
            logger.warning("[auth] password update for %s failed: %s", account.email, exc.message)
            raise InvalidInputError("Failed to reset password. Please request a new reset link.")

        return {"message": PASSWORD_RESET_MESSAGE}
