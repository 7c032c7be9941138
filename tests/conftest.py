"""Shared test fixtures."""

import threading
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from parkmate.config import Settings
from parkmate.containers import AppContainer
from parkmate.domain.accounts import AccountRecord
from parkmate.domain.billing import PaymentOrder
from parkmate.domain.errors import ValidationError
from parkmate.domain.spots import Spot, SpotId, SpotStatus
from parkmate.domain.vehicles import UserVehicleLink, VehicleSession
from parkmate.services.accounts import AccountService, IdentityProvider
from parkmate.services.billing import BillingEngine, PaymentOrderIssuer
from parkmate.services.ledger import (
    SessionLedger,
    UserVehicleRepository,
    VehicleSessionRepository,
)
from parkmate.services.parking import ParkingService
from parkmate.services.plates import ImageFetcher, OcrClient, PlateResolver
from parkmate.services.queries import AccountRepository, SessionQueryService
from parkmate.services.spots import SpotAllocator, SpotRepository

T0 = datetime(2024, 5, 1, 9, 0, tzinfo=UTC)


@dataclass
class FakeClock:
    """Clock returning a controllable instant."""

    now: datetime = T0

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@dataclass
class InMemorySpotRepository(SpotRepository):
    """In-memory spot repository with atomic conditional updates."""

    spots: dict[SpotId, Spot] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def add(self, spot_id: SpotId, location: str | None = None, occupied=False) -> Spot:
        spot = Spot(
            id=spot_id,
            status=SpotStatus.OCCUPIED if occupied else SpotStatus.AVAILABLE,
            location=location,
        )
        self.spots[spot_id] = spot
        return spot

    def get_spot(self, spot_id: SpotId) -> Spot | None:
        return self.spots.get(spot_id)

    def find_available_spot(self) -> Spot | None:
        available = [spot for spot in self.spots.values() if spot.is_available]
        if not available:
            return None
        return min(available, key=lambda spot: spot.id)

    def mark_occupied_if_available(self, spot_id: SpotId) -> bool:
        with self.lock:
            spot = self.spots.get(spot_id)
            if spot is None or not spot.is_available:
                return False
            self.spots[spot_id] = replace(spot, status=SpotStatus.OCCUPIED)
            return True

    def mark_available(self, spot_id: SpotId) -> None:
        with self.lock:
            spot = self.spots.get(spot_id)
            if spot is not None:
                self.spots[spot_id] = replace(spot, status=SpotStatus.AVAILABLE)

    def list_spots(self) -> list[Spot]:
        return sorted(self.spots.values(), key=lambda spot: spot.id)

    def list_spots_by_ids(self, spot_ids: list[SpotId]) -> list[Spot]:
        return [self.spots[spot_id] for spot_id in spot_ids if spot_id in self.spots]


@dataclass
class InMemoryVehicleSessionRepository(VehicleSessionRepository):
    """In-memory vehicle session repository for tests."""

    sessions: dict[UUID, VehicleSession] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock)
    fail_assign_owner: bool = False

    def create_session(  # noqa: PLR0913
        self,
        number_plate: str,
        spot_id: SpotId,
        entry_time: datetime,
        user_id: UUID | None,
        image_url: str | None,
    ) -> VehicleSession:
        session = VehicleSession(
            id=uuid4(),
            number_plate=number_plate,
            entry_time=entry_time,
            spot_id=spot_id,
            user_id=user_id,
            image_url=image_url,
        )
        self.sessions[session.id] = session
        return session

    def get_open_session(self, number_plate: str) -> VehicleSession | None:
        for session in self.sessions.values():
            if session.number_plate == number_plate and session.is_open:
                return session
        return None

    def close_session_if_open(
        self, session_id: UUID, exit_time: datetime
    ) -> VehicleSession | None:
        with self.lock:
            session = self.sessions.get(session_id)
            if session is None or not session.is_open:
                return None
            closed = replace(session, exit_time=exit_time)
            self.sessions[session_id] = closed
            return closed

    def list_open_sessions(self) -> list[VehicleSession]:
        return [session for session in self.sessions.values() if session.is_open]

    def list_open_sessions_for_owner(
        self, user_id: UUID, number_plates: list[str]
    ) -> list[VehicleSession]:
        return [
            session
            for session in self.sessions.values()
            if session.is_open
            and (session.user_id == user_id or session.number_plate in number_plates)
        ]

    def assign_owner(self, number_plate: str, user_id: UUID) -> int:
        if self.fail_assign_owner:
            raise RuntimeError("backfill unavailable")
        updated = 0
        for session_id, session in list(self.sessions.items()):
            if session.number_plate == number_plate:
                self.sessions[session_id] = replace(session, user_id=user_id)
                updated += 1
        return updated


@dataclass
class InMemoryUserVehicleRepository(UserVehicleRepository):
    """In-memory user-vehicle link repository for tests."""

    links: list[UserVehicleLink] = field(default_factory=list)

    def create_link(self, user_id: UUID, number_plate: str) -> None:
        self.links.append(UserVehicleLink(user_id=user_id, number_plate=number_plate))

    def list_plates(self, user_id: UUID) -> list[str]:
        return [link.number_plate for link in self.links if link.user_id == user_id]

    def list_links(self) -> list[UserVehicleLink]:
        return list(self.links)


@dataclass
class InMemoryAccountRepository(AccountRepository):
    """In-memory account profile repository for tests."""

    profiles: list[dict[str, object]] = field(default_factory=list)

    def list_profiles(self) -> list[dict[str, object]]:
        return self.profiles


@dataclass
class FakeIdentityProvider(IdentityProvider):
    """Identity provider keeping accounts in memory."""

    accounts: dict[str, tuple[str, AccountRecord]] = field(default_factory=dict)

    def create_account(
        self, email: str, password: str, profile: dict[str, object]
    ) -> AccountRecord:
        if email in self.accounts:
            raise ValidationError("User already registered")
        account = AccountRecord(id=uuid4(), email=email, profile=profile)
        self.accounts[email] = (password, account)
        return account

    def authenticate(self, email: str, password: str) -> AccountRecord:
        stored = self.accounts.get(email)
        if stored is None or stored[0] != password:
            raise ValidationError("Invalid login credentials")
        return stored[1]


@dataclass
class FakeImageFetcher(ImageFetcher):
    """Image fetcher returning static bytes."""

    content: bytes = b"fake-image-bytes"
    error: Exception | None = None
    requested: list[str] = field(default_factory=list)

    async def fetch(self, image_url: str) -> bytes:
        self.requested.append(image_url)
        if self.error is not None:
            raise self.error
        return self.content


@dataclass
class FakeOcrClient(OcrClient):
    """OCR client returning a fixed text."""

    text: str = "KA01AB1234"
    error: Exception | None = None
    calls: int = 0

    async def recognize(self, image_bytes: bytes) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.text


@dataclass
class FakePaymentIssuer(PaymentOrderIssuer):
    """Payment issuer recording created orders."""

    error: Exception | None = None
    orders: list[PaymentOrder] = field(default_factory=list)

    async def create_order(
        self, amount_minor_units: int, currency: str, receipt: str
    ) -> PaymentOrder:
        if self.error is not None:
            raise self.error
        order = PaymentOrder(
            order_id=f"order_{len(self.orders) + 1}",
            amount_minor_units=amount_minor_units,
            currency=currency,
            receipt=receipt,
        )
        self.orders.append(order)
        return order


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        razorpay_key_id="rzp_test_key",
        razorpay_key_secret="rzp_test_secret",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def spot_repository() -> InMemorySpotRepository:
    repository = InMemorySpotRepository()
    repository.add(1, location="Level 1 - A1")
    repository.add(2, location="Level 1 - A2")
    return repository


@pytest.fixture
def session_repository() -> InMemoryVehicleSessionRepository:
    return InMemoryVehicleSessionRepository()


@pytest.fixture
def user_vehicle_repository() -> InMemoryUserVehicleRepository:
    return InMemoryUserVehicleRepository()


@pytest.fixture
def account_repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def ocr_client() -> FakeOcrClient:
    return FakeOcrClient()


@pytest.fixture
def image_fetcher() -> FakeImageFetcher:
    return FakeImageFetcher()


@pytest.fixture
def payment_issuer() -> FakePaymentIssuer:
    return FakePaymentIssuer()


@pytest.fixture
def ledger(
    session_repository: InMemoryVehicleSessionRepository,
    user_vehicle_repository: InMemoryUserVehicleRepository,
    spot_repository: InMemorySpotRepository,
    clock: FakeClock,
) -> SessionLedger:
    return SessionLedger(
        session_repository=session_repository,
        user_vehicle_repository=user_vehicle_repository,
        spot_repository=spot_repository,
        clock=clock,
    )


@pytest.fixture
def parking_service(
    spot_repository: InMemorySpotRepository,
    ledger: SessionLedger,
    image_fetcher: FakeImageFetcher,
    ocr_client: FakeOcrClient,
    payment_issuer: FakePaymentIssuer,
) -> ParkingService:
    return ParkingService(
        plate_resolver=PlateResolver(
            image_fetcher=image_fetcher, ocr_client=ocr_client
        ),
        spot_allocator=SpotAllocator(spot_repository),
        ledger=ledger,
        billing_engine=BillingEngine(issuer=payment_issuer),
    )


@pytest.fixture
def container(
    settings: Settings,
    parking_service: ParkingService,
    spot_repository: InMemorySpotRepository,
    session_repository: InMemoryVehicleSessionRepository,
    user_vehicle_repository: InMemoryUserVehicleRepository,
    account_repository: InMemoryAccountRepository,
) -> AppContainer:
    query_service = SessionQueryService(
        spot_repository=spot_repository,
        session_repository=session_repository,
        user_vehicle_repository=user_vehicle_repository,
        account_repository=account_repository,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        plate_resolver=parking_service.plate_resolver,
        spot_allocator=parking_service.spot_allocator,
        session_ledger=parking_service.ledger,
        billing_engine=parking_service.billing_engine,
        parking_service=parking_service,
        query_service=query_service,
        account_service=AccountService(FakeIdentityProvider()),
        close_resources=close_resources,
    )
