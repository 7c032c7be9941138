"""Domain models for billing and payment orders."""

from dataclasses import dataclass
from decimal import Decimal

from parkmate.domain.vehicles import VehicleSession


@dataclass(frozen=True)
class BillingQuote:
    """Computed charge for a closed session."""

    duration_hours: Decimal
    amount_minor_units: int
    currency: str
    receipt: str

    @property
    def amount_major_units(self) -> float:
        return self.amount_minor_units / 100


@dataclass(frozen=True)
class PaymentOrder:
    """Order created by the payment-order issuer."""

    order_id: str
    amount_minor_units: int
    currency: str
    receipt: str


@dataclass(frozen=True)
class BilledExit:
    """Quote together with the order issued for it."""

    quote: BillingQuote
    order: PaymentOrder


@dataclass(frozen=True)
class ExitResult:
    """Outcome of a completed exit."""

    session: VehicleSession
    quote: BillingQuote
    order: PaymentOrder
