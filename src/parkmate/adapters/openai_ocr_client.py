"""OpenAI Responses API client for plate reading."""

import base64
from dataclasses import dataclass

from openai import AsyncOpenAI

from parkmate.services.plates import OcrClient

PLATE_PROMPT = (
    "Read the vehicle number plate in this image. "
    "Reply with the plate characters only, exactly as printed."
)


@dataclass
class OpenAIOcrClient(OcrClient):
    """OCR client backed by an OpenAI vision model."""

    client: AsyncOpenAI
    model: str

    @classmethod
    def create(
        cls, api_key: str, model: str, timeout_seconds: float = 10.0
    ) -> "OpenAIOcrClient":
        """Create an OpenAI OCR client."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, timeout=timeout_seconds),
            model=model,
        )

    async def recognize(self, image_bytes: bytes) -> str:
        """Ask the model for the plate text."""
        response = await self.client.responses.create(
            model=self.model,
            input=[
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": PLATE_PROMPT},
                        {"type": "input_image", "image_url": to_data_url(image_bytes)},
                    ],
                }
            ],
            store=False,
        )
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
