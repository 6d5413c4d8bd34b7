"""
Identity Resolver: turns an Authorization header into a verified UserIdentity.

This is the only place that accepts a raw session token. Services below it
receive the resolved identity.
"""
import logging
from typing import Optional

from pharmadir.core.errors import InvalidInputError, NotFoundError, UnauthorizedError
from pharmadir.core.security import TOKEN_ACCESS, TokenError, TokenSigner
from pharmadir.schemas.identity import Role, UserIdentity
from .identity_base import AccountNotFoundError, IdentityProvider

logger = logging.getLogger("uvicorn.error")

INVALID_TOKEN = "Invalid or expired token"


def extract_bearer(header_value: Optional[str]) -> str:
    """
    Strip the "Bearer " scheme from an Authorization header value.

    Raises:
        UnauthorizedError: No header at all (AUTH_REQUIRED)
        InvalidInputError: Header present but not a bearer credential
    """
    if not header_value or not header_value.strip():
        raise UnauthorizedError("AUTH_REQUIRED")
    scheme, _, token = header_value.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise InvalidInputError("Invalid authorization header")
    return token.strip()


class IdentityResolver:
    """Verifies session tokens and resolves them against the identity provider"""

    def __init__(self, signer: TokenSigner, provider: IdentityProvider):
        self.signer = signer
        self.provider = provider

    async def resolve(self, authorization: Optional[str]) -> UserIdentity:
        token = extract_bearer(authorization)
        try:
            claims = self.signer.verify(token, purpose=TOKEN_ACCESS)
        except TokenError as exc:
            logger.info("[auth] token rejected: %s", exc)
            raise InvalidInputError(INVALID_TOKEN)

        email = claims.get("email")
        if not email:
            raise InvalidInputError(INVALID_TOKEN)

        try:
            account = await self.provider.get_account_by_email(email)
        except AccountNotFoundError:
            logger.warning("[auth] token for missing account %s", email)
            raise NotFoundError("User not found")

        # The email now belongs to a different account than the one the token was minted for
        if claims.get("sub") and claims["sub"] != account.uid:
            logger.warning("[auth] token subject %s does not match account %s", claims["sub"], account.uid)
            raise InvalidInputError(INVALID_TOKEN)

        try:
            role = Role(claims.get("role") or Role.USER.value)
        except ValueError:
            raise InvalidInputError(INVALID_TOKEN)

        return UserIdentity(
            uid=account.uid,
            email=account.email,
            displayName=account.display_name,
            emailVerified=account.email_verified,
            role=role,
        )
