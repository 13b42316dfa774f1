"""Tests for container wiring."""

import asyncio
from pathlib import Path

import pytest

from homefix.adapters.gemini_guide_client import GeminiGuideClient
from homefix.adapters.json_file_store import JsonFileKeyValueStore
from homefix.adapters.openai_guide_client import OpenAIGuideClient
from homefix.config import Settings
from homefix.containers import build_container, build_storage
from homefix.errors import ConfigurationError
from homefix.services.storage import InMemoryKeyValueStore


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)

    assert isinstance(container.extractor.client, GeminiGuideClient)
    assert container.extractor.model == "gemini-2.5-flash"
    assert isinstance(container.storage, InMemoryKeyValueStore)
    assert container.session_controller.storage is container.storage


def test_build_container_with_openai_provider() -> None:
    container = build_container(
        Settings(api_key="key", ai_provider="openai", storage_backend="memory")
    )

    assert isinstance(container.extractor.client, OpenAIGuideClient)
    asyncio.run(container.close_resources())


def test_build_container_fails_without_api_key() -> None:
    with pytest.raises(ConfigurationError):
        build_container(Settings(api_key=None))


def test_build_storage_defaults_to_json_file(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    storage = build_storage(Settings(api_key="key", storage_path=str(path)))

    assert isinstance(storage, JsonFileKeyValueStore)
    assert storage.path == path
