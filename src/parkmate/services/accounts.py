"""Account registration and login via the identity provider."""

from dataclasses import dataclass
from typing import Protocol

from parkmate.domain.accounts import AccountRecord
from parkmate.domain.errors import ValidationError


class IdentityProvider(Protocol):
    """Interface for account creation and credential checks."""

    def create_account(
        self, email: str, password: str, profile: dict[str, object]
    ) -> AccountRecord:
        """Create an account and return it."""

    def authenticate(self, email: str, password: str) -> AccountRecord:
        """Verify credentials and return the account."""


@dataclass
class AccountService:
    """Application service for account lifecycle actions."""

    identity_provider: IdentityProvider

    def register(  # noqa: PLR0913
        self,
        email: str,
        password: str,
        name: str | None = None,
        phone: str | None = None,
        role: str = "user",
    ) -> AccountRecord:
        """Create an account with its profile metadata."""
        if not email or not password:
            raise ValidationError("email and password are required")
        profile: dict[str, object] = {"name": name, "phone": phone, "role": role}
        return self.identity_provider.create_account(email, password, profile)

    def login(self, email: str, password: str) -> AccountRecord:
        """Return the account for valid credentials."""
        if not email or not password:
            raise ValidationError("email and password are required")
        return self.identity_provider.authenticate(email, password)
