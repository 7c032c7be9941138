"""Domain models for accounts."""

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class AccountRecord:
    """Account as exposed by the identity provider."""

    id: UUID
    email: str | None
    profile: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class AccountSummary:
    """Profile row with the plates linked to it."""

    id: UUID
    email: str | None
    name: str | None
    vehicles: list[str]
