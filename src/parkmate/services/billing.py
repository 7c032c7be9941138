"""Duration and fee computation plus payment-order issuing."""

import asyncio
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from parkmate.domain.billing import BilledExit, BillingQuote, PaymentOrder
from parkmate.domain.errors import PaymentError, ValidationError
from parkmate.domain.vehicles import VehicleSession

logger = logging.getLogger(__name__)

_SECONDS_PER_HOUR = Decimal(3600)
_ONE_DECIMAL = Decimal("0.1")


class PaymentOrderIssuer(Protocol):
    """Interface for the payment-order issuer."""

    async def create_order(
        self, amount_minor_units: int, currency: str, receipt: str
    ) -> PaymentOrder:
        """Create a payable order and return it."""


@dataclass
class BillingEngine:
    """Computes what a closed session owes and requests an order for it."""

    issuer: PaymentOrderIssuer
    hourly_rate_minor_units: int = 1000
    minimum_charge_minor_units: int = 1000
    currency: str = "INR"
    timeout_seconds: float = 5.0

    def quote(self, session: VehicleSession) -> BillingQuote:
        """Return the charge for a session that has an exit time."""
        if session.exit_time is None:
            raise ValidationError("Session has not exited")
        duration_hours = duration_in_hours(session.entry_time, session.exit_time)
        return BillingQuote(
            duration_hours=duration_hours,
            amount_minor_units=amount_due(
                duration_hours,
                self.hourly_rate_minor_units,
                self.minimum_charge_minor_units,
            ),
            currency=self.currency,
            receipt=receipt_for(session),
        )

    async def issue_order(self, quote: BillingQuote) -> PaymentOrder:
        """Request a payment order for the quote."""
        try:
            order = await asyncio.wait_for(
                self.issuer.create_order(
                    amount_minor_units=quote.amount_minor_units,
                    currency=quote.currency,
                    receipt=quote.receipt,
                ),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as exc:
            raise PaymentError(
                "Failed to create payment order: timed out", quote=quote
            ) from exc
        except Exception as exc:
            raise PaymentError(
                f"Failed to create payment order: {exc}", quote=quote
            ) from exc
        logger.info(
            "Payment order issued",
            extra={"order_id": order.order_id, "receipt": quote.receipt},
        )
        return order

    async def bill(self, session: VehicleSession) -> BilledExit:
        """Quote the session and issue its order."""
        quote = self.quote(session)
        order = await self.issue_order(quote)
        return BilledExit(quote=quote, order=order)


def duration_in_hours(entry_time: datetime, exit_time: datetime) -> Decimal:
    """Elapsed hours rounded half away from zero to one decimal place."""
    elapsed = exit_time - entry_time
    seconds = Decimal(elapsed.days * 86400 + elapsed.seconds) + Decimal(
        elapsed.microseconds
    ) / Decimal(1_000_000)
    return (seconds / _SECONDS_PER_HOUR).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)


def amount_due(
    duration_hours: Decimal, hourly_rate_minor_units: int, minimum_minor_units: int
) -> int:
    """Charge in minor units, never below the minimum charge."""
    raw_amount = math.ceil(duration_hours * hourly_rate_minor_units)
    return max(raw_amount, minimum_minor_units)


def receipt_for(session: VehicleSession) -> str:
    """Receipt reference derived from the first segment of the session id."""
    short_id = str(session.id).split("-")[0]
    return f"exit_{short_id}"
