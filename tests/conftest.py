"""Shared test fixtures."""

import json
from dataclasses import dataclass, field

import pytest

from homefix.config import Settings
from homefix.services.extraction import GuideClient, RepairGuideExtractor
from homefix.services.session import SessionController
from homefix.services.storage import InMemoryKeyValueStore

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"leaking-faucet"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"broken-toaster"


def guide_payload(
    steps: int = 4, difficulty: str = "Intermediate"
) -> dict[str, object]:
    """Return a valid repair guide as the model would send it."""
    return {
        "itemName": "Kitchen Faucet",
        "problemAnalysis": "Water seeps past a worn O-ring at the base of the spout.",
        "difficulty": difficulty,
        "estimatedTime": "30-45 minutes",
        "tools": ["Adjustable wrench", "Flathead screwdriver"],
        "parts": ["Replacement O-ring kit"],
        "steps": [
            {"title": f"Step {index}", "description": f"Do thing {index}."}
            for index in range(1, steps + 1)
        ],
    }


@dataclass
class FakeGuideClient(GuideClient):
    """Fake guide client returning a fixed reply and recording calls."""

    reply: str = field(default_factory=lambda: json.dumps(guide_payload()))
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_instruction: str,
        image_data: bytes,
        mime_type: str,
        prompt: str,
        schema: dict[str, object],
    ) -> str:
        self.calls.append(
            {
                "model": model,
                "system_instruction": system_instruction,
                "image_data": image_data,
                "mime_type": mime_type,
                "prompt": prompt,
                "schema": schema,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_key="test-key",
        ai_provider="gemini",
        storage_backend="memory",
    )


@pytest.fixture
def guide_client() -> FakeGuideClient:
    return FakeGuideClient()


@pytest.fixture
def storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def extractor(guide_client: FakeGuideClient) -> RepairGuideExtractor:
    return RepairGuideExtractor(client=guide_client, model="gemini-2.5-flash")


@pytest.fixture
def controller(
    storage: InMemoryKeyValueStore, extractor: RepairGuideExtractor
) -> SessionController:
    return SessionController(storage=storage, extractor=extractor)
