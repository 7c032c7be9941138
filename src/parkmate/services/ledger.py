"""Vehicle session ledger."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from parkmate.domain.errors import ConflictError, NotFoundError
from parkmate.domain.spots import SpotId
from parkmate.domain.vehicles import (
    UNKNOWN_LOCATION,
    SessionView,
    UserVehicleLink,
    VehicleSession,
)
from parkmate.services.plates import normalize_plate
from parkmate.services.spots import SpotRepository

logger = logging.getLogger(__name__)


class VehicleSessionRepository(Protocol):
    """Persistence interface for vehicle sessions."""

    def create_session(  # noqa: PLR0913
        self,
        number_plate: str,
        spot_id: SpotId,
        entry_time: datetime,
        user_id: UUID | None,
        image_url: str | None,
    ) -> VehicleSession:
        """Insert a new open session and return it."""

    def get_open_session(self, number_plate: str) -> VehicleSession | None:
        """Return the open session for a plate, if present."""

    def close_session_if_open(
        self, session_id: UUID, exit_time: datetime
    ) -> VehicleSession | None:
        """Set exit_time only while it is still null.

        Returns the updated session, or None when another caller closed it.
        """

    def list_open_sessions(self) -> list[VehicleSession]:
        """Return every session without an exit time."""

    def list_open_sessions_for_owner(
        self, user_id: UUID, number_plates: list[str]
    ) -> list[VehicleSession]:
        """Return open sessions owned by the user or matching the plates."""

    def assign_owner(self, number_plate: str, user_id: UUID) -> int:
        """Set user_id on every session for the plate; return rows updated."""


class UserVehicleRepository(Protocol):
    """Persistence interface for user-vehicle links."""

    def create_link(self, user_id: UUID, number_plate: str) -> None:
        """Insert a link between a user and a plate."""

    def list_plates(self, user_id: UUID) -> list[str]:
        """Return the plates linked to a user."""

    def list_links(self) -> list[UserVehicleLink]:
        """Return every user-vehicle link."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SessionLedger:
    """Creates and closes vehicle sessions."""

    session_repository: VehicleSessionRepository
    user_vehicle_repository: UserVehicleRepository
    spot_repository: SpotRepository
    clock: Callable[[], datetime] = field(default=_utc_now)

    def open(
        self,
        number_plate: str,
        spot_id: SpotId,
        user_id: UUID | None = None,
        image_url: str | None = None,
    ) -> VehicleSession:
        """Record an entry for a plate that has no open session."""
        self.ensure_not_parked(number_plate)
        return self.session_repository.create_session(
            number_plate=number_plate,
            spot_id=spot_id,
            entry_time=self.clock(),
            user_id=user_id,
            image_url=image_url,
        )

    def ensure_not_parked(self, number_plate: str) -> None:
        """Raise ConflictError when the plate already occupies a spot."""
        if self.session_repository.get_open_session(number_plate) is not None:
            raise ConflictError(f"Vehicle {number_plate} is already parked")

    def close(self, number_plate: str) -> VehicleSession:
        """Record the exit of the plate's open session."""
        session = self.session_repository.get_open_session(number_plate)
        if session is None:
            raise NotFoundError("Vehicle not found or already exited")
        closed = self.session_repository.close_session_if_open(
            session.id, self.clock()
        )
        if closed is None:
            logger.info(
                "Session closed concurrently", extra={"session_id": str(session.id)}
            )
            raise NotFoundError("Vehicle not found or already exited")
        return closed

    def list_open_by_user(self, user_id: UUID) -> list[SessionView]:
        """Return the user's open sessions with their spot locations."""
        plates = self.user_vehicle_repository.list_plates(user_id)
        sessions = self.session_repository.list_open_sessions_for_owner(
            user_id, plates
        )
        if not sessions:
            return []
        spot_ids = list(dict.fromkeys(session.spot_id for session in sessions))
        locations = {
            spot.id: spot.location
            for spot in self.spot_repository.list_spots_by_ids(spot_ids)
        }
        return [
            SessionView(
                number_plate=session.number_plate,
                entry_time=session.entry_time,
                spot_id=session.spot_id,
                location=locations.get(session.spot_id) or UNKNOWN_LOCATION,
            )
            for session in sessions
        ]

    def link_owner(self, user_id: UUID, number_plate: str) -> None:
        """Link a plate to a user, then backfill the owner on its sessions.

        The link insert and the backfill are separate writes. A failed link
        raises; a failed backfill is logged and the link is kept.
        """
        number_plate = normalize_plate(number_plate)
        self.user_vehicle_repository.create_link(user_id, number_plate)
        try:
            updated = self.session_repository.assign_owner(number_plate, user_id)
        except Exception:
            logger.exception(
                "Owner backfill failed",
                extra={"user_id": str(user_id), "plate": number_plate},
            )
            return
        logger.info(
            "Owner backfilled",
            extra={"user_id": str(user_id), "plate": number_plate, "rows": updated},
        )
