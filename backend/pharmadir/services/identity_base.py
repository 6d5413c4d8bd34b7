"""
Identity Provider Abstract Interface

The provider owns account credentials and the email-verification flag, and
produces the action links (email verification, password reset) sent to users.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


class ProviderError(Exception):
    """Provider-side failure; `message` is the provider's own wording."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AccountNotFoundError(ProviderError):
    def __init__(self, message: str = "There is no user record corresponding to the provided identifier."):
        super().__init__(message)


@dataclass
class ProviderAccount:
    """Account as seen through the provider"""
    uid: str
    email: str
    display_name: Optional[str] = None
    email_verified: bool = False


class IdentityProvider(ABC):
    """Identity Provider Abstract Base Class"""

    @abstractmethod
    async def create_account(self, email: str, password: str, display_name: Optional[str] = None) -> ProviderAccount:
        """Create an account (ProviderError on duplicate email or weak password)"""
        pass

    @abstractmethod
    async def get_account_by_email(self, email: str) -> ProviderAccount:
        """Look an account up by email (AccountNotFoundError if absent)"""
        pass

    @abstractmethod
    async def get_account(self, uid: str) -> ProviderAccount:
        """Look an account up by uid (AccountNotFoundError if absent)"""
        pass

    @abstractmethod
    async def update_account(
        self,
        uid: str,
        password: Optional[str] = None,
        email_verified: Optional[bool] = None,
        display_name: Optional[str] = None,
    ) -> ProviderAccount:
        """Update the given fields; None leaves a field unchanged"""
        pass

    @abstractmethod
    async def verify_password(self, email: str, password: str) -> bool:
        """Check a password; False for unknown accounts"""
        pass

    @abstractmethod
    async def generate_verification_link(self, email: str, redirect_url: str) -> str:
        """Link that marks the email verified, then continues to redirect_url"""
        pass

    @abstractmethod
    async def generate_reset_link(self, email: str, redirect_url: str) -> str:
        """Link to redirect_url carrying a password reset token"""
        pass

    @abstractmethod
    async def confirm_email_verification(self, token: str) -> ProviderAccount:
        """Consume a verification token and mark the account verified"""
        pass
