"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from parkmate.adapters.http_image_fetcher import HttpxImageFetcher
from parkmate.adapters.openai_ocr_client import OpenAIOcrClient
from parkmate.adapters.razorpay_client import HttpxRazorpayClient
from parkmate.adapters.supabase_account_repository import SupabaseAccountRepository
from parkmate.adapters.supabase_identity_provider import SupabaseIdentityProvider
from parkmate.adapters.supabase_spot_repository import SupabaseSpotRepository
from parkmate.adapters.supabase_user_vehicle_repository import (
    SupabaseUserVehicleRepository,
)
from parkmate.adapters.supabase_vehicle_repository import SupabaseVehicleRepository
from parkmate.adapters.tesseract_ocr_client import TesseractOcrClient
from parkmate.config import Settings
from parkmate.services.accounts import AccountService
from parkmate.services.billing import BillingEngine
from parkmate.services.ledger import SessionLedger
from parkmate.services.parking import ParkingService
from parkmate.services.plates import OcrClient, PlateResolver
from parkmate.services.queries import SessionQueryService
from parkmate.services.spots import SpotAllocator


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    plate_resolver: PlateResolver
    spot_allocator: SpotAllocator
    session_ledger: SessionLedger
    billing_engine: BillingEngine
    parking_service: ParkingService
    query_service: SessionQueryService
    account_service: AccountService
    close_resources: Callable[[], Awaitable[None]]


def build_ocr_client(settings: Settings) -> OcrClient:
    """Create the OCR client selected by settings."""
    if settings.ocr_backend == "tesseract":
        return TesseractOcrClient(
            lang=settings.tesseract_lang,
            timeout_seconds=settings.ocr_timeout_seconds,
        )
    if settings.ocr_backend == "openai":
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required for the openai OCR backend")
        return OpenAIOcrClient.create(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout_seconds=settings.ocr_timeout_seconds,
        )
    raise ValueError(f"Unknown OCR backend: {settings.ocr_backend}")


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    spot_repository = SupabaseSpotRepository(supabase_client)
    vehicle_repository = SupabaseVehicleRepository(supabase_client)
    user_vehicle_repository = SupabaseUserVehicleRepository(supabase_client)
    account_repository = SupabaseAccountRepository(supabase_client)

    image_fetcher = HttpxImageFetcher.create(
        timeout_seconds=resolved_settings.image_fetch_timeout_seconds
    )
    ocr_client = build_ocr_client(resolved_settings)
    payment_client = HttpxRazorpayClient.create(
        key_id=resolved_settings.razorpay_key_id,
        key_secret=resolved_settings.razorpay_key_secret,
        base_url=resolved_settings.razorpay_base_url,
        timeout_seconds=resolved_settings.payment_timeout_seconds,
    )

    plate_resolver = PlateResolver(
        image_fetcher=image_fetcher,
        ocr_client=ocr_client,
        fetch_timeout_seconds=resolved_settings.image_fetch_timeout_seconds,
        ocr_timeout_seconds=resolved_settings.ocr_timeout_seconds,
    )
    spot_allocator = SpotAllocator(
        repository=spot_repository,
        max_attempts=resolved_settings.max_allocation_attempts,
    )
    session_ledger = SessionLedger(
        session_repository=vehicle_repository,
        user_vehicle_repository=user_vehicle_repository,
        spot_repository=spot_repository,
    )
    billing_engine = BillingEngine(
        issuer=payment_client,
        hourly_rate_minor_units=resolved_settings.hourly_rate_minor_units,
        minimum_charge_minor_units=resolved_settings.minimum_charge_minor_units,
        currency=resolved_settings.currency,
        timeout_seconds=resolved_settings.payment_timeout_seconds,
    )
    parking_service = ParkingService(
        plate_resolver=plate_resolver,
        spot_allocator=spot_allocator,
        ledger=session_ledger,
        billing_engine=billing_engine,
    )
    query_service = SessionQueryService(
        spot_repository=spot_repository,
        session_repository=vehicle_repository,
        user_vehicle_repository=user_vehicle_repository,
        account_repository=account_repository,
    )
    account_service = AccountService(SupabaseIdentityProvider(supabase_client))

    async def close_resources() -> None:
        await image_fetcher.close()
        await payment_client.close()
        if isinstance(ocr_client, OpenAIOcrClient):
            await ocr_client.close()

    return AppContainer(
        settings=resolved_settings,
        plate_resolver=plate_resolver,
        spot_allocator=spot_allocator,
        session_ledger=session_ledger,
        billing_engine=billing_engine,
        parking_service=parking_service,
        query_service=query_service,
        account_service=account_service,
        close_resources=close_resources,
    )
