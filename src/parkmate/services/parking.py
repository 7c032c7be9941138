"""Entry and exit flows across the parking components."""

import logging
from dataclasses import dataclass
from uuid import UUID

from parkmate.domain.billing import ExitResult
from parkmate.domain.errors import PaymentError
from parkmate.domain.spots import SpotId
from parkmate.domain.vehicles import EntryResult
from parkmate.services.billing import BillingEngine
from parkmate.services.ledger import SessionLedger
from parkmate.services.plates import PlateResolver, normalize_plate
from parkmate.services.spots import SpotAllocator

logger = logging.getLogger(__name__)


@dataclass
class ParkingService:
    """Coordinates plate resolution, allocation, the ledger and billing."""

    plate_resolver: PlateResolver
    spot_allocator: SpotAllocator
    ledger: SessionLedger
    billing_engine: BillingEngine

    async def enter(
        self,
        number_plate: str | None = None,
        image_url: str | None = None,
        user_id: UUID | None = None,
        spot_id: SpotId | None = None,
    ) -> EntryResult:
        """Resolve the plate, occupy a spot and open a session."""
        plate = await self.plate_resolver.resolve(number_plate, image_url)
        self.ledger.ensure_not_parked(plate)

        spot = self.spot_allocator.allocate(spot_id)
        try:
            session = self.ledger.open(
                plate, spot.id, user_id=user_id, image_url=image_url
            )
        except Exception:
            logger.warning(
                "Session open failed, releasing spot", extra={"spot_id": spot.id}
            )
            self.spot_allocator.release(spot.id)
            raise
        logger.info(
            "Vehicle entered",
            extra={"plate": plate, "spot_id": spot.id, "session_id": str(session.id)},
        )
        return EntryResult(session=session, spot_id=spot.id)

    async def exit(self, number_plate: str) -> ExitResult:
        """Close the plate's session, free its spot and issue a payment order.

        The exit and release are persisted before the order is requested and
        are kept when the order fails; PaymentError carries the quote so the
        order can be reissued out of band.
        """
        session = self.ledger.close(normalize_plate(number_plate))
        quote = self.billing_engine.quote(session)
        self.spot_allocator.release(session.spot_id)
        try:
            order = await self.billing_engine.issue_order(quote)
        except PaymentError:
            logger.exception(
                "Payment order failed after exit",
                extra={
                    "session_id": str(session.id),
                    "receipt": quote.receipt,
                    "amount_minor_units": quote.amount_minor_units,
                },
            )
            raise
        return ExitResult(session=session, quote=quote, order=order)
