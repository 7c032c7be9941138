"""Plate resolution from explicit input or OCR."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from parkmate.domain.errors import UpstreamError, ValidationError

logger = logging.getLogger(__name__)

QUOTE_CHARACTERS = frozenset("\"'`“”‘’")


class ImageFetcher(Protocol):
    """Interface for downloading entry images."""

    async def fetch(self, image_url: str) -> bytes:
        """Download the referenced image and return its bytes."""


class OcrClient(Protocol):
    """Interface for optical character recognition."""

    async def recognize(self, image_bytes: bytes) -> str:
        """Return the text recognized in the image."""


@dataclass
class PlateResolver:
    """Turns an entry request into a plate string."""

    image_fetcher: ImageFetcher
    ocr_client: OcrClient
    fetch_timeout_seconds: float = 10.0
    ocr_timeout_seconds: float = 10.0

    async def resolve(
        self, explicit_plate: str | None = None, image_url: str | None = None
    ) -> str:
        """Return the plate, preferring explicit text over image inference."""
        if explicit_plate and explicit_plate.strip():
            plate = strip_plate_quotes(explicit_plate)
            if plate:
                return plate
        if not image_url:
            raise ValidationError("Number plate or image required")

        text = await self._recognize_image(image_url)
        plate = strip_plate_quotes(text)
        if not plate:
            raise ValidationError("Number plate required")
        logger.info("Recognized plate from image", extra={"plate": plate})
        return plate

    async def _recognize_image(self, image_url: str) -> str:
        try:
            image_bytes = await asyncio.wait_for(
                self.image_fetcher.fetch(image_url),
                timeout=self.fetch_timeout_seconds,
            )
        except TimeoutError as exc:
            raise UpstreamError("Timed out fetching image") from exc
        except Exception as exc:
            logger.exception("Image fetch failed", extra={"image_url": image_url})
            raise UpstreamError(f"Failed to fetch image: {exc}") from exc

        try:
            return await asyncio.wait_for(
                self.ocr_client.recognize(image_bytes),
                timeout=self.ocr_timeout_seconds,
            )
        except TimeoutError as exc:
            raise UpstreamError("Timed out recognizing number plate") from exc
        except Exception as exc:
            logger.exception("Plate recognition failed", extra={"image_url": image_url})
            raise UpstreamError(f"Failed to recognize number plate: {exc}") from exc


def strip_plate_quotes(raw: str) -> str:
    """Trim whitespace and drop one surrounding quote character on each side."""
    text = raw.strip()
    if text and text[0] in QUOTE_CHARACTERS:
        text = text[1:]
    if text and text[-1] in QUOTE_CHARACTERS:
        text = text[:-1]
    return text


def normalize_plate(raw: str) -> str:
    """Return the plate as stored at entry; reject one that strips to nothing."""
    plate = strip_plate_quotes(raw)
    if not plate:
        raise ValidationError("Number plate required")
    return plate
