"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from homefix.adapters.gemini_guide_client import GeminiGuideClient
from homefix.adapters.json_file_store import JsonFileKeyValueStore
from homefix.adapters.openai_guide_client import OpenAIGuideClient
from homefix.adapters.supabase_kv_store import SupabaseKeyValueStore
from homefix.config import Settings, load_settings
from homefix.services.extraction import RepairGuideExtractor
from homefix.services.session import SessionController
from homefix.services.storage import InMemoryKeyValueStore, KeyValueStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    storage: KeyValueStore
    extractor: RepairGuideExtractor
    session_controller: SessionController
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container.

    Raises ConfigurationError before anything is built when the API key or
    another required setting is missing.
    """
    resolved_settings = load_settings(settings)
    guide_client: GeminiGuideClient | OpenAIGuideClient
    if resolved_settings.ai_provider == "openai":
        guide_client = OpenAIGuideClient.create(resolved_settings.api_key)
    else:
        guide_client = GeminiGuideClient.create(resolved_settings.api_key)
    extractor = RepairGuideExtractor(
        client=guide_client,
        model=resolved_settings.resolved_ai_model,
    )
    storage = build_storage(resolved_settings)
    session_controller = SessionController(
        storage=storage,
        extractor=extractor,
        namespace=resolved_settings.storage_namespace,
    )

    async def close_resources() -> None:
        await guide_client.close()

    return AppContainer(
        settings=resolved_settings,
        storage=storage,
        extractor=extractor,
        session_controller=session_controller,
        close_resources=close_resources,
    )


def build_storage(settings: Settings) -> KeyValueStore:
    """Create the key-value store selected by settings."""
    if settings.storage_backend == "memory":
        return InMemoryKeyValueStore()
    if settings.storage_backend == "supabase":
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseKeyValueStore(client)
    return JsonFileKeyValueStore(Path(settings.storage_path))
