"""Pydantic models for request payloads."""

from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, StringConstraints

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class EntryRequest(BaseModel):
    """Vehicle entry payload."""

    imageUrl: str | None = None  # noqa: N815
    userId: UUID | None = None  # noqa: N815
    numberPlate: str | None = None  # noqa: N815
    spotId: int | str | None = None  # noqa: N815


class ExitRequest(BaseModel):
    """Vehicle exit payload."""

    numberPlate: RequiredText  # noqa: N815


class RegisterVehicleRequest(BaseModel):
    """User-vehicle link payload."""

    userId: UUID  # noqa: N815
    numberPlate: RequiredText  # noqa: N815


class RegisterRequest(BaseModel):
    """Account registration payload."""

    email: RequiredText
    password: RequiredText
    name: str | None = None
    phone: str | None = None
    role: str = "user"


class LoginRequest(BaseModel):
    """Account login payload."""

    email: RequiredText
    password: RequiredText
