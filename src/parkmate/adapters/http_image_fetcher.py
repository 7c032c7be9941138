"""Entry image download client."""

from dataclasses import dataclass

import httpx

from parkmate.services.plates import ImageFetcher


@dataclass
class HttpxImageFetcher(ImageFetcher):
    """Image fetcher using httpx."""

    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0

    @classmethod
    def create(cls, timeout_seconds: float = 10.0) -> "HttpxImageFetcher":
        """Create an image fetcher with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(follow_redirects=True),
            timeout_seconds=timeout_seconds,
        )

    async def fetch(self, image_url: str) -> bytes:
        """Download the image and return its bytes."""
        response = await self.http_client.get(image_url, timeout=self.timeout_seconds)
        response.raise_for_status()
        if not response.content:
            raise RuntimeError("Image response was empty")
        return response.content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
