"""Read-only projections over spots, sessions and accounts."""

from collections import defaultdict
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from parkmate.domain.accounts import AccountSummary
from parkmate.services.ledger import UserVehicleRepository, VehicleSessionRepository
from parkmate.services.spots import SpotRepository


class AccountRepository(Protocol):
    """Persistence interface for account profiles."""

    def list_profiles(self) -> list[dict[str, object]]:
        """Return profile rows with id, email and name."""


@dataclass
class SessionQueryService:
    """Listing endpoints for admins and dashboards."""

    spot_repository: SpotRepository
    session_repository: VehicleSessionRepository
    user_vehicle_repository: UserVehicleRepository
    account_repository: AccountRepository

    def list_spots(self) -> list[dict[str, object]]:
        """Return all spots."""
        return [
            {"id": spot.id, "status": str(spot.status), "location": spot.location}
            for spot in self.spot_repository.list_spots()
        ]

    def list_occupied_vehicles(self) -> list[dict[str, object]]:
        """Return every vehicle currently parked."""
        return [
            {
                "number_plate": session.number_plate,
                "entry_time": session.entry_time.isoformat(),
                "spot_id": session.spot_id,
            }
            for session in self.session_repository.list_open_sessions()
        ]

    def list_accounts_with_vehicles(self) -> list[AccountSummary]:
        """Return account profiles with their linked plates."""
        plates_by_user: dict[UUID, list[str]] = defaultdict(list)
        for link in self.user_vehicle_repository.list_links():
            plates_by_user[link.user_id].append(link.number_plate)

        summaries = []
        for row in self.account_repository.list_profiles():
            user_id = UUID(str(row["id"]))
            email = row.get("email")
            name = row.get("name")
            summaries.append(
                AccountSummary(
                    id=user_id,
                    email=str(email) if email is not None else None,
                    name=str(name) if name is not None else None,
                    vehicles=plates_by_user.get(user_id, []),
                )
            )
        return summaries
