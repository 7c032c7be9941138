"""ASGI entrypoint for the ParkMate API."""

from parkmate.api.app import create_app
from parkmate.containers import build_container

app = create_app(build_container())
