"""Supabase Auth identity provider."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from supabase import AuthError, Client

from parkmate.domain.accounts import AccountRecord
from parkmate.domain.errors import ValidationError
from parkmate.services.accounts import IdentityProvider


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Account creation and sign-in backed by Supabase Auth."""

    client: Client

    def create_account(
        self, email: str, password: str, profile: dict[str, object]
    ) -> AccountRecord:
        """Sign up a user with profile metadata."""
        try:
            response = self.client.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"data": profile},
                }
            )
        except AuthError as exc:
            raise ValidationError(exc.message) from exc
        if response.user is None:
            raise ValidationError("Failed to register user")
        return _to_account(response.user)

    def authenticate(self, email: str, password: str) -> AccountRecord:
        """Sign in with email and password."""
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as exc:
            raise ValidationError(exc.message) from exc
        if response.user is None:
            raise ValidationError("Invalid login credentials")
        return _to_account(response.user)


def _to_account(user: Any) -> AccountRecord:
    metadata = user.user_metadata or {}
    return AccountRecord(
        id=UUID(str(user.id)),
        email=user.email,
        profile=dict(metadata),
    )
