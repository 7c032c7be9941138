"""Tesseract-based plate recognition."""

import asyncio
import io
from dataclasses import dataclass

import pytesseract
from PIL import Image

from parkmate.services.plates import OcrClient


@dataclass
class TesseractOcrClient(OcrClient):
    """OCR client that runs Tesseract in a worker thread."""

    lang: str = "eng"
    timeout_seconds: float = 10.0

    async def recognize(self, image_bytes: bytes) -> str:
        """Return the raw text Tesseract reads from the image."""
        return await asyncio.to_thread(self._recognize, image_bytes)

    def _recognize(self, image_bytes: bytes) -> str:
        with Image.open(io.BytesIO(image_bytes)) as image:
            return pytesseract.image_to_string(
                image.convert("RGB"), lang=self.lang, timeout=self.timeout_seconds
            )
