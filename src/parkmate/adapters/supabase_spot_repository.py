"""Supabase-backed parking spot repository."""

from dataclasses import dataclass

from supabase import Client

from parkmate.domain.spots import Spot, SpotId, SpotStatus
from parkmate.services.spots import SpotRepository

_COLUMNS = "id, status, location"


@dataclass
class SupabaseSpotRepository(SpotRepository):
    """Supabase implementation for parking spots."""

    client: Client

    def get_spot(self, spot_id: SpotId) -> Spot | None:
        """Return a spot by id, if present."""
        response = (
            self.client.table("parking_spots")
            .select(_COLUMNS)
            .eq("id", spot_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _row_to_spot(response.data[0])

    def find_available_spot(self) -> Spot | None:
        """Return the available spot with the lowest id."""
        response = (
            self.client.table("parking_spots")
            .select(_COLUMNS)
            .eq("status", SpotStatus.AVAILABLE.value)
            .order("id")
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _row_to_spot(response.data[0])

    def mark_occupied_if_available(self, spot_id: SpotId) -> bool:
        """Conditionally occupy the spot; True when a row was updated."""
        response = (
            self.client.table("parking_spots")
            .update({"status": SpotStatus.OCCUPIED.value})
            .eq("id", spot_id)
            .eq("status", SpotStatus.AVAILABLE.value)
            .execute()
        )
        return bool(response.data)

    def mark_available(self, spot_id: SpotId) -> None:
        """Set the spot status to available."""
        self.client.table("parking_spots").update(
            {"status": SpotStatus.AVAILABLE.value}
        ).eq("id", spot_id).execute()

    def list_spots(self) -> list[Spot]:
        """Return every spot ordered by id."""
        response = (
            self.client.table("parking_spots").select(_COLUMNS).order("id").execute()
        )
        return [_row_to_spot(row) for row in response.data or []]

    def list_spots_by_ids(self, spot_ids: list[SpotId]) -> list[Spot]:
        """Return the spots with the given ids."""
        if not spot_ids:
            return []
        response = (
            self.client.table("parking_spots")
            .select(_COLUMNS)
            .in_("id", spot_ids)
            .execute()
        )
        return [_row_to_spot(row) for row in response.data or []]


def _row_to_spot(row: dict[str, object]) -> Spot:
    location = row.get("location")
    return Spot(
        id=row["id"],  # type: ignore[arg-type]
        status=SpotStatus(str(row["status"])),
        location=str(location) if location is not None else None,
    )
