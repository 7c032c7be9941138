"""Tests for container wiring."""

import asyncio

import pytest

from parkmate.adapters.openai_ocr_client import OpenAIOcrClient
from parkmate.adapters.tesseract_ocr_client import TesseractOcrClient
from parkmate.config import Settings
from parkmate.containers import build_container, build_ocr_client


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)
    assert container.parking_service is not None
    assert container.parking_service.ledger is container.session_ledger
    asyncio.run(container.close_resources())


def test_build_ocr_client_defaults_to_tesseract(settings: Settings) -> None:
    assert isinstance(build_ocr_client(settings), TesseractOcrClient)


def test_build_ocr_client_openai(settings: Settings) -> None:
    configured = settings.model_copy(
        update={"ocr_backend": "openai", "openai_api_key": "sk-test"}
    )
    client = build_ocr_client(configured)
    assert isinstance(client, OpenAIOcrClient)
    asyncio.run(client.close())


def test_build_ocr_client_openai_requires_key(settings: Settings) -> None:
    configured = settings.model_copy(update={"ocr_backend": "openai"})
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        build_ocr_client(configured)


def test_build_ocr_client_rejects_unknown_backend(settings: Settings) -> None:
    configured = settings.model_copy(update={"ocr_backend": "abacus"})
    with pytest.raises(ValueError, match="Unknown OCR backend"):
        build_ocr_client(configured)
