"""Serverless entrypoint serving the ParkMate API on Vercel."""

import sys
from pathlib import Path

_SOURCE_DIR = Path(__file__).resolve().parent.parent / "src"
if _SOURCE_DIR.is_dir() and str(_SOURCE_DIR) not in sys.path:
    sys.path.insert(0, str(_SOURCE_DIR))

from parkmate.api.asgi import app  # noqa: E402

__all__ = ["app"]
