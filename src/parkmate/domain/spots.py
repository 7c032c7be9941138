"""Domain models for parking spots."""

from dataclasses import dataclass
from enum import StrEnum

SpotId = int | str


class SpotStatus(StrEnum):
    """Occupancy status of a spot."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"


@dataclass(frozen=True)
class Spot:
    """A provisioned parking spot."""

    id: SpotId
    status: SpotStatus
    location: str | None = None

    @property
    def is_available(self) -> bool:
        return self.status is SpotStatus.AVAILABLE
