# pharmadir/core/security.py
"""
Security module for authentication.
Handles password hashing (used by the local identity provider) and signing /
verification of the JWTs behind session, reset and verification tokens.
"""
import datetime as dt
import jwt  # PyJWT
from passlib.context import CryptContext

# Password hashing context
# Argon2 is a modern, secure password hashing algorithm
pwd_context = CryptContext(
    schemes=["argon2"],  # Use Argon2 for password hashing
    deprecated="auto",   # Automatically handle deprecated schemes
)

# Token purposes, stored in the "typ" claim
TOKEN_ACCESS = "access"
TOKEN_RESET = "reset"
TOKEN_VERIFY = "verify"


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain, hashed)


class TokenError(Exception):
    """Raised when a token cannot be verified (signature, expiry, purpose)."""


class TokenSigner:
    """
    Signs and verifies HS256 JWTs with a shared secret.

    Every token carries "iat" and "exp"; validity is a function of signature
    and expiry only, nothing is stored server-side.
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    def sign(self, claims: dict, expires_in: dt.timedelta) -> str:
        """
        Create a signed token.

        Args:
            claims: Payload claims (e.g. sub, email, role, typ)
            expires_in: Lifetime of the token

        Returns:
            Encoded JWT token string
        """
        now = dt.datetime.now(dt.timezone.utc)
        payload = {
            **claims,
            "iat": now,                # Issued at timestamp
            "exp": now + expires_in,   # Expiration timestamp
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str, purpose: str | None = None) -> dict:
        """
        Decode and validate a token.

        Args:
            token: JWT token string
            purpose: Expected "typ" claim; None accepts any purpose

        Returns:
            Decoded payload dictionary

        Raises:
            TokenError: If the token is malformed, expired, badly signed or
                was issued for another purpose
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as exc:
            raise TokenError(str(exc)) from exc
        if purpose is not None and payload.get("typ") != purpose:
            raise TokenError(f"expected a {purpose} token")
        return payload
