"""Domain models for vehicle sessions."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from parkmate.domain.spots import SpotId

UNKNOWN_LOCATION = "Unknown"


@dataclass(frozen=True)
class VehicleSession:
    """One vehicle occupying one spot from entry to exit."""

    id: UUID
    number_plate: str
    entry_time: datetime
    spot_id: SpotId
    exit_time: datetime | None = None
    user_id: UUID | None = None
    image_url: str | None = None

    @property
    def is_open(self) -> bool:
        return self.exit_time is None


@dataclass(frozen=True)
class SessionView:
    """Session joined with its spot location for display."""

    number_plate: str
    entry_time: datetime
    spot_id: SpotId
    location: str


@dataclass(frozen=True)
class UserVehicleLink:
    """Registered owner of a plate."""

    user_id: UUID
    number_plate: str


@dataclass(frozen=True)
class EntryResult:
    """Outcome of a completed entry."""

    session: VehicleSession
    spot_id: SpotId
