"""Supabase-backed user-vehicle link repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from parkmate.domain.vehicles import UserVehicleLink
from parkmate.services.ledger import UserVehicleRepository


@dataclass
class SupabaseUserVehicleRepository(UserVehicleRepository):
    """Supabase implementation for user-vehicle links."""

    client: Client

    def create_link(self, user_id: UUID, number_plate: str) -> None:
        """Insert a user-vehicle link."""
        self.client.table("user_vehicles").insert(
            {"user_id": str(user_id), "number_plate": number_plate}
        ).execute()

    def list_plates(self, user_id: UUID) -> list[str]:
        """Return the plates linked to a user."""
        response = (
            self.client.table("user_vehicles")
            .select("number_plate")
            .eq("user_id", str(user_id))
            .execute()
        )
        return [str(row["number_plate"]) for row in response.data or []]

    def list_links(self) -> list[UserVehicleLink]:
        """Return every user-vehicle link."""
        response = (
            self.client.table("user_vehicles")
            .select("user_id, number_plate")
            .execute()
        )
        return [
            UserVehicleLink(
                user_id=UUID(str(row["user_id"])),
                number_plate=str(row["number_plate"]),
            )
            for row in response.data or []
        ]
