"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from postgrest.exceptions import APIError

from parkmate.api.schemas import (
    EntryRequest,
    ExitRequest,
    LoginRequest,
    RegisterRequest,
    RegisterVehicleRequest,
)
from parkmate.app_logging import configure_logging
from parkmate.config import parse_cors_origins
from parkmate.containers import AppContainer
from parkmate.domain.accounts import AccountRecord
from parkmate.domain.billing import ExitResult
from parkmate.domain.errors import ParkingError, ValidationError

_MISSING_ERROR_TYPES = {"missing", "string_too_short"}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="ParkMate", lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_cors_origins(container.settings.cors_allowed_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ParkingError)
    async def parking_error_handler(
        request: Request, exc: ParkingError
    ) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _format_validation_errors(exc.errors())},
        )

    @app.exception_handler(APIError)
    async def store_error_handler(request: Request, exc: APIError) -> JSONResponse:
        logger.warning("Store request failed", extra={"code": exc.code})
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": exc.message or "Store request failed"},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception(
            "Unhandled error",
            exc_info=exc,
            extra={"method": request.method, "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "ParkMate Backend"

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/register", status_code=status.HTTP_201_CREATED)
    async def register(payload: RegisterRequest, request: Request) -> dict[str, object]:
        """Create an account through the identity provider."""
        state_container: AppContainer = request.app.state.container
        logger.info(
            "Register request",
            extra={
                "email": payload.email,
                "account_name": payload.name,
                "role": payload.role,
            },
        )
        account = state_container.account_service.register(
            email=payload.email,
            password=payload.password,
            name=payload.name,
            phone=payload.phone,
            role=payload.role,
        )
        return {"message": "User registered", "user": _serialize_account(account)}

    @app.post("/login")
    async def login(payload: LoginRequest, request: Request) -> dict[str, object]:
        """Verify credentials and return the account."""
        state_container: AppContainer = request.app.state.container
        logger.info("Login request", extra={"email": payload.email})
        account = state_container.account_service.login(
            payload.email, payload.password
        )
        return {"user": _serialize_account(account)}

    @app.post("/entry")
    async def vehicle_entry(
        payload: EntryRequest, request: Request
    ) -> dict[str, object]:
        """Record a vehicle entering and the spot it was given."""
        state_container: AppContainer = request.app.state.container
        logger.info(
            "Entry request",
            extra={
                "image_url": payload.imageUrl,
                "user_id": str(payload.userId) if payload.userId else None,
                "plate": payload.numberPlate,
                "spot_id": payload.spotId,
            },
        )
        result = await state_container.parking_service.enter(
            number_plate=payload.numberPlate,
            image_url=payload.imageUrl,
            user_id=payload.userId,
            spot_id=payload.spotId,
        )
        return {
            "message": "Vehicle entered",
            "numberPlate": result.session.number_plate,
            "spotId": result.spot_id,
        }

    @app.post("/exit")
    async def vehicle_exit(payload: ExitRequest, request: Request) -> dict[str, object]:
        """Close the plate's session and issue a payment order."""
        state_container: AppContainer = request.app.state.container
        logger.info("Exit request", extra={"plate": payload.numberPlate})
        result = await state_container.parking_service.exit(payload.numberPlate)
        return _serialize_exit(result)

    @app.post("/register-vehicle", status_code=status.HTTP_201_CREATED)
    async def register_vehicle(
        payload: RegisterVehicleRequest, request: Request
    ) -> dict[str, str]:
        """Link a plate to a user and attribute its past sessions."""
        state_container: AppContainer = request.app.state.container
        logger.info(
            "Register vehicle request",
            extra={"user_id": str(payload.userId), "plate": payload.numberPlate},
        )
        state_container.session_ledger.link_owner(payload.userId, payload.numberPlate)
        return {"message": "Vehicle registered"}

    @app.get("/my-parkings")
    async def my_parkings(
        request: Request, userId: UUID | None = None  # noqa: N803
    ) -> dict[str, object]:
        """Return the user's current parkings."""
        state_container: AppContainer = request.app.state.container
        logger.info(
            "My parkings request", extra={"user_id": str(userId) if userId else None}
        )
        if userId is None:
            raise ValidationError("userId is required")
        views = state_container.session_ledger.list_open_by_user(userId)
        return {
            "parkings": [
                {
                    "number_plate": view.number_plate,
                    "entry_time": view.entry_time.isoformat(),
                    "spot_id": view.spot_id,
                    "location": view.location,
                }
                for view in views
            ]
        }

    @app.get("/spots")
    async def list_spots(request: Request) -> dict[str, object]:
        """Return all parking spots."""
        state_container: AppContainer = request.app.state.container
        return {"spots": state_container.query_service.list_spots()}

    @app.get("/vehicles")
    async def list_vehicles(request: Request) -> dict[str, object]:
        """Return every vehicle currently parked."""
        state_container: AppContainer = request.app.state.container
        return {"vehicles": state_container.query_service.list_occupied_vehicles()}

    @app.get("/users")
    async def list_users(request: Request) -> dict[str, object]:
        """Return accounts with their registered plates."""
        state_container: AppContainer = request.app.state.container
        accounts = state_container.query_service.list_accounts_with_vehicles()
        return {
            "users": [
                {
                    "id": str(account.id),
                    "email": account.email,
                    "name": account.name,
                    "vehicles": account.vehicles,
                }
                for account in accounts
            ]
        }

    return app


def _serialize_exit(result: ExitResult) -> dict[str, object]:
    session = result.session
    return {
        "numberPlate": session.number_plate,
        "entryTime": session.entry_time.isoformat(),
        "exitTime": session.exit_time.isoformat() if session.exit_time else None,
        "durationHours": float(result.quote.duration_hours),
        "spotId": session.spot_id,
        "payment": {
            "orderId": result.order.order_id,
            "amount": result.quote.amount_major_units,
            "currency": result.quote.currency,
        },
    }


def _serialize_account(account: AccountRecord) -> dict[str, object]:
    return {
        "id": str(account.id),
        "email": account.email,
        "user_metadata": account.profile,
    }


def _format_validation_errors(errors: list[dict]) -> str:
    """Collapse pydantic errors into one client-facing message."""
    missing: list[str] = []
    invalid: list[str] = []
    for error in errors:
        location = [
            str(part)
            for part in error.get("loc", ())
            if part not in {"body", "query"}
        ]
        field = ".".join(location) or "request body"
        if error.get("type") in _MISSING_ERROR_TYPES:
            missing.append(field)
        else:
            invalid.append(f"{field}: {error.get('msg', 'invalid value')}")
    if missing:
        verb = "is" if len(missing) == 1 else "are"
        return f"{' and '.join(missing)} {verb} required"
    return "; ".join(invalid) or "Invalid request"
