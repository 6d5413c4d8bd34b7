"""
Local identity provider backed by the `accounts` table.

Passwords are argon2 hashes (passlib); verification and reset links carry
JWTs minted by the shared TokenSigner, so the reset token can be checked by
the auth service with the same signer.
"""
import datetime as dt
import uuid
from typing import Optional
from urllib.parse import urlencode

from tortoise.exceptions import IntegrityError

from pharmadir.core.security import (
    TOKEN_RESET,
    TOKEN_VERIFY,
    TokenError,
    TokenSigner,
    hash_password,
    verify_password as password_matches,
)
from pharmadir.models.account import Account
from .identity_base import AccountNotFoundError, IdentityProvider, ProviderAccount, ProviderError

MIN_PASSWORD_LENGTH = 6


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _to_account(row: Account) -> ProviderAccount:
    return ProviderAccount(
        uid=str(row.id),
        email=row.email,
        display_name=row.display_name,
        email_verified=row.email_verified,
    )


class LocalIdentityProvider(IdentityProvider):
    """Identity provider storing accounts in the application database"""

    def __init__(
        self,
        signer: TokenSigner,
        action_base_url: str,
        verify_ttl: dt.timedelta,
        reset_ttl: dt.timedelta,
    ):
        self.signer = signer
        self.action_base_url = action_base_url.rstrip("/")
        self.verify_ttl = verify_ttl
        self.reset_ttl = reset_ttl

    async def _row_by_email(self, email: str) -> Account:
        row = await Account.get_or_none(email=normalize_email(email))
        if row is None:
            raise AccountNotFoundError()
        return row

    async def _row_by_uid(self, uid: str) -> Account:
        try:
            key = uuid.UUID(str(uid))
        except ValueError:
            raise AccountNotFoundError()
        row = await Account.get_or_none(id=key)
        if row is None:
            raise AccountNotFoundError()
        return row

    async def create_account(self, email: str, password: str, display_name: Optional[str] = None) -> ProviderAccount:
        email = normalize_email(email)
        local, _, domain = email.partition("@")
        if not local or "." not in domain:
            raise ProviderError("The email address is improperly formatted.")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ProviderError(f"The password must be a string with at least {MIN_PASSWORD_LENGTH} characters.")
        if await Account.filter(email=email).exists():
            raise ProviderError("The email address is already in use by another account.")
        try:
            row = await Account.create(
                email=email,
                password_hash=hash_password(password),
                display_name=(display_name or "").strip() or None,
            )
        except IntegrityError:
            # Lost a race against a concurrent registration of the same email
            raise ProviderError("The email address is already in use by another account.")
        return _to_account(row)

    async def get_account_by_email(self, email: str) -> ProviderAccount:
        return _to_account(await self._row_by_email(email))

    async def get_account(self, uid: str) -> ProviderAccount:
        return _to_account(await self._row_by_uid(uid))

    async def update_account(
        self,
        uid: str,
        password: Optional[str] = None,
        email_verified: Optional[bool] = None,
        display_name: Optional[str] = None,
    ) -> ProviderAccount:
        row = await self._row_by_uid(uid)
        if password is not None:
            if len(password) < MIN_PASSWORD_LENGTH:
                raise ProviderError(f"The password must be a string with at least {MIN_PASSWORD_LENGTH} characters.")
            row.password_hash = hash_password(password)
        if email_verified is not None:
            row.email_verified = email_verified
        if display_name is not None:
            row.display_name = display_name.strip() or None
        await row.save()
        return _to_account(row)

    async def verify_password(self, email: str, password: str) -> bool:
        row = await Account.get_or_none(email=normalize_email(email))
        if row is None:
            return False
        return password_matches(password or "", row.password_hash)

    async def generate_verification_link(self, email: str, redirect_url: str) -> str:
        row = await self._row_by_email(email)
        token = self.signer.sign({"email": row.email, "typ": TOKEN_VERIFY}, self.verify_ttl)
        query = urlencode({"token": token, "continueUrl": redirect_url})
        return f"{self.action_base_url}/api/v1/auth/verify-email?{query}"

    async def generate_reset_link(self, email: str, redirect_url: str) -> str:
        row = await self._row_by_email(email)
        # "issued" keeps sub-second precision so a reset can invalidate earlier tokens
        issued = dt.datetime.now(dt.timezone.utc).timestamp()
        token = self.signer.sign({"email": row.email, "typ": TOKEN_RESET, "issued": issued}, self.reset_ttl)
        return f"{redirect_url}?{urlencode({'token': token})}"

    async def confirm_email_verification(self, token: str) -> ProviderAccount:
        try:
            claims = self.signer.verify(token, purpose=TOKEN_VERIFY)
        except TokenError as exc:
            raise ProviderError("The verification link is invalid or has expired.") from exc
        row = await self._row_by_email(claims.get("email") or "")
        if not row.email_verified:
            row.email_verified = True
            await row.save()
        return _to_account(row)
