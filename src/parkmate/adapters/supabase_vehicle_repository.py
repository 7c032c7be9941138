"""Supabase-backed vehicle session repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from postgrest.exceptions import APIError
from supabase import Client

from parkmate.domain.errors import ConflictError, StoreError
from parkmate.domain.spots import SpotId
from parkmate.domain.vehicles import VehicleSession
from parkmate.services.ledger import VehicleSessionRepository

_COLUMNS = "id, number_plate, entry_time, exit_time, spot_id, user_id, image_url"
_UNIQUE_VIOLATION = "23505"


@dataclass
class SupabaseVehicleRepository(VehicleSessionRepository):
    """Supabase implementation for vehicle sessions."""

    client: Client

    def create_session(  # noqa: PLR0913
        self,
        number_plate: str,
        spot_id: SpotId,
        entry_time: datetime,
        user_id: UUID | None,
        image_url: str | None,
    ) -> VehicleSession:
        """Insert an open session row and return it."""
        payload: dict[str, object] = {
            "number_plate": number_plate,
            "entry_time": entry_time.isoformat(),
            "spot_id": spot_id,
            "user_id": str(user_id) if user_id else None,
        }
        if image_url:
            payload["image_url"] = image_url
        try:
            response = self.client.table("vehicles").insert(payload).execute()
        except APIError as exc:
            if exc.code == _UNIQUE_VIOLATION:
                raise ConflictError(
                    f"Vehicle {number_plate} is already parked"
                ) from exc
            raise
        if not response.data:
            raise StoreError("Failed to record vehicle entry")
        return _row_to_session(response.data[0])

    def get_open_session(self, number_plate: str) -> VehicleSession | None:
        """Return the open session for a plate, if present."""
        response = (
            self.client.table("vehicles")
            .select(_COLUMNS)
            .eq("number_plate", number_plate)
            .is_("exit_time", "null")
            .order("entry_time", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _row_to_session(response.data[0])

    def close_session_if_open(
        self, session_id: UUID, exit_time: datetime
    ) -> VehicleSession | None:
        """Set exit_time on the session while it is still null."""
        response = (
            self.client.table("vehicles")
            .update({"exit_time": exit_time.isoformat()})
            .eq("id", str(session_id))
            .is_("exit_time", "null")
            .execute()
        )
        if not response.data:
            return None
        return _row_to_session(response.data[0])

    def list_open_sessions(self) -> list[VehicleSession]:
        """Return every session without an exit time."""
        response = (
            self.client.table("vehicles")
            .select(_COLUMNS)
            .is_("exit_time", "null")
            .order("entry_time")
            .execute()
        )
        return [_row_to_session(row) for row in response.data or []]

    def list_open_sessions_for_owner(
        self, user_id: UUID, number_plates: list[str]
    ) -> list[VehicleSession]:
        """Return open sessions owned by the user or matching the plates."""
        rows: dict[str, dict[str, object]] = {}
        owned = (
            self.client.table("vehicles")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .is_("exit_time", "null")
            .execute()
        )
        for row in owned.data or []:
            rows[str(row["id"])] = row
        if number_plates:
            linked = (
                self.client.table("vehicles")
                .select(_COLUMNS)
                .in_("number_plate", number_plates)
                .is_("exit_time", "null")
                .execute()
            )
            for row in linked.data or []:
                rows[str(row["id"])] = row
        sessions = [_row_to_session(row) for row in rows.values()]
        return sorted(sessions, key=lambda session: session.entry_time)

    def assign_owner(self, number_plate: str, user_id: UUID) -> int:
        """Set user_id on every session for the plate."""
        response = (
            self.client.table("vehicles")
            .update({"user_id": str(user_id)})
            .eq("number_plate", number_plate)
            .execute()
        )
        return len(response.data or [])


def _parse_timestamp(value: object) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _row_to_session(row: dict[str, object]) -> VehicleSession:
    exit_time = row.get("exit_time")
    user_id = row.get("user_id")
    image_url = row.get("image_url")
    return VehicleSession(
        id=UUID(str(row["id"])),
        number_plate=str(row["number_plate"]),
        entry_time=_parse_timestamp(row["entry_time"]),
        exit_time=_parse_timestamp(exit_time) if exit_time else None,
        spot_id=row["spot_id"],  # type: ignore[arg-type]
        user_id=UUID(str(user_id)) if user_id else None,
        image_url=str(image_url) if image_url else None,
    )
