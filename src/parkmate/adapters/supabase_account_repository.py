"""Supabase account profile queries."""

from dataclasses import dataclass

from supabase import Client

from parkmate.services.queries import AccountRepository


@dataclass
class SupabaseAccountRepository(AccountRepository):
    """Supabase implementation for account profiles."""

    client: Client

    def list_profiles(self) -> list[dict[str, object]]:
        """Return profile rows from the users table."""
        response = self.client.table("users").select("id, email, name").execute()
        return response.data or []
