"""Spot allocation and release."""

import logging
from dataclasses import dataclass, replace
from typing import Protocol

from parkmate.domain.errors import NoCapacityError
from parkmate.domain.spots import Spot, SpotId, SpotStatus

logger = logging.getLogger(__name__)


class SpotRepository(Protocol):
    """Persistence interface for parking spots."""

    def get_spot(self, spot_id: SpotId) -> Spot | None:
        """Return a spot by id, if present."""

    def find_available_spot(self) -> Spot | None:
        """Return the available spot with the lowest id, if any."""

    def mark_occupied_if_available(self, spot_id: SpotId) -> bool:
        """Occupy the spot only if it is still available.

        Returns True when exactly this call flipped the status.
        """

    def mark_available(self, spot_id: SpotId) -> None:
        """Set the spot status to available."""

    def list_spots(self) -> list[Spot]:
        """Return every spot."""

    def list_spots_by_ids(self, spot_ids: list[SpotId]) -> list[Spot]:
        """Return the spots with the given ids."""


@dataclass
class SpotAllocator:
    """Reserves spots for incoming vehicles and frees them on exit."""

    repository: SpotRepository
    max_attempts: int = 10

    def allocate(self, preferred_spot_id: SpotId | None = None) -> Spot:
        """Occupy the preferred spot or any available one and return it."""
        if preferred_spot_id is not None:
            preferred = self._occupy_preferred(preferred_spot_id)
            if preferred is not None:
                return preferred
            logger.info(
                "Preferred spot unavailable, falling back",
                extra={"spot_id": preferred_spot_id},
            )

        for _ in range(self.max_attempts):
            candidate = self.repository.find_available_spot()
            if candidate is None:
                break
            if self.repository.mark_occupied_if_available(candidate.id):
                return replace(candidate, status=SpotStatus.OCCUPIED)
            logger.info(
                "Spot taken concurrently, reselecting",
                extra={"spot_id": candidate.id},
            )
        raise NoCapacityError("No available spot")

    def _occupy_preferred(self, spot_id: SpotId) -> Spot | None:
        """Occupy the requested spot; None when it cannot be read or taken.

        A failed read (for example an id of the wrong type for the store) is
        treated like a missing spot so the caller falls back.
        """
        try:
            preferred = self.repository.get_spot(spot_id)
        except Exception:
            logger.warning(
                "Preferred spot lookup failed",
                exc_info=True,
                extra={"spot_id": spot_id},
            )
            return None
        if preferred is None or not preferred.is_available:
            return None
        if not self.repository.mark_occupied_if_available(preferred.id):
            return None
        return replace(preferred, status=SpotStatus.OCCUPIED)

    def release(self, spot_id: SpotId) -> None:
        """Mark the spot available; releasing a free spot is a no-op."""
        self.repository.mark_available(spot_id)
