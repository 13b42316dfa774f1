"""Repair guide extraction from an image and a problem description."""

import json
import logging
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from homefix.domain.media import ensure_supported_image
from homefix.domain.repair import Difficulty, RepairGuide
from homefix.errors import TransportError, ValidationError

_logger = logging.getLogger(__name__)

ERROR_PREFIX = "Failed to get analysis from AI"

SYSTEM_INSTRUCTION = (
    'You are "HomeFix AI", an expert diagnostician for household repairs. '
    "Your goal is to analyze an image of a broken item and a user's description "
    "of the problem.\n"
    "Based on this, you will provide a detailed, clear, and safe step-by-step "
    "repair guide.\n"
    "Identify the item, diagnose the issue, and provide all the information "
    "required by the JSON schema.\n"
    "Be practical and helpful. If the repair is too dangerous or complex for a "
    "typical DIYer (e.g., high-voltage electronics, major plumbing), classify it "
    "as 'Expert' and strongly advise calling a professional in the analysis."
)

REPAIR_GUIDE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "itemName": {
            "type": "string",
            "description": (
                "The name of the identified household item "
                "(e.g., 'Coffee Maker', 'Leaky Faucet')."
            ),
        },
        "problemAnalysis": {
            "type": "string",
            "description": (
                "A brief, one-paragraph analysis of the likely problem based on "
                "the image and user description."
            ),
        },
        "difficulty": {
            "type": "string",
            "enum": [level.value for level in Difficulty],
            "description": "The estimated difficulty level of the repair.",
        },
        "estimatedTime": {
            "type": "string",
            "description": (
                "A time estimate for the repair, like '30-45 minutes' or '1-2 hours'."
            ),
        },
        "tools": {
            "type": "array",
            "items": {"type": "string"},
            "description": (
                "A list of necessary tools for the repair "
                "(e.g., 'Phillips screwdriver', 'Wrench')."
            ),
        },
        "parts": {
            "type": "array",
            "items": {"type": "string"},
            "description": (
                "A list of potential replacement parts needed "
                "(e.g., 'Replacement O-ring', 'New power cord'). "
                "If none, return an empty array."
            ),
        },
        "steps": {
            "type": "array",
            "description": "An array of step-by-step instructions for the repair.",
            "items": {
                "type": "object",
                "properties": {
                    "title": {
                        "type": "string",
                        "description": (
                            "A short, clear title for the repair step "
                            "(e.g., 'Unplug the Device')."
                        ),
                    },
                    "description": {
                        "type": "string",
                        "description": (
                            "A detailed description of the action to take in "
                            "this step."
                        ),
                    },
                },
                "required": ["title", "description"],
                "additionalProperties": False,
            },
        },
    },
    "required": [
        "itemName",
        "problemAnalysis",
        "difficulty",
        "estimatedTime",
        "tools",
        "parts",
        "steps",
    ],
    "additionalProperties": False,
}


class GuideClient(Protocol):
    """Interface for a schema-constrained multimodal model call."""

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
        """Return the raw text produced by the model."""


@dataclass
class RepairGuideExtractor:
    """Service that builds guide requests and validates the replies."""

    client: GuideClient
    model: str
    schema: dict[str, object] = field(default_factory=lambda: REPAIR_GUIDE_SCHEMA)

    async def analyze(
        self, image_data: bytes, mime_type: str, prompt: str
    ) -> RepairGuide:
        """Ask the model for a repair guide and return it fully validated."""
        ensure_supported_image(image_data, mime_type)
        try:
            raw = await self.client.generate(
                model=self.model,
                system_instruction=SYSTEM_INSTRUCTION,
                image_data=image_data,
                mime_type=mime_type,
                prompt=f"Problem Description: {prompt}",
                schema=self.schema,
            )
        except Exception as exc:
            _logger.exception("Error calling model %s", self.model)
            raise TransportError(f"{ERROR_PREFIX}: {exc}") from exc
        guide = parse_repair_guide(raw, self.schema)
        _logger.info(
            "Repair guide ready: item=%s difficulty=%s steps=%s",
            guide.item_name,
            guide.difficulty.value,
            len(guide.steps),
        )
        return guide


def parse_repair_guide(
    text: str | None, schema: dict[str, object] = REPAIR_GUIDE_SCHEMA
) -> RepairGuide:
    """Parse raw model output into a guide, rejecting anything partial."""
    cleaned = _strip_code_fence(text or "")
    if not cleaned:
        raise ValidationError(f"{ERROR_PREFIX}: model returned an empty response")
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ValidationError(
            f"{ERROR_PREFIX}: response is not valid JSON ({exc})"
        ) from exc
    if not isinstance(payload, dict):
        raise ValidationError(f"{ERROR_PREFIX}: response is not a JSON object")

    required = schema.get("required", [])
    missing = [name for name in required if name not in payload]
    if missing:
        raise ValidationError(
            f"{ERROR_PREFIX}: response is missing fields: {', '.join(missing)}"
        )
    try:
        return RepairGuide.model_validate(payload)
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ValidationError(
            f"{ERROR_PREFIX}: response does not match the repair guide schema "
            f"({problems})"
        ) from exc


def _strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence if the model added one."""
    cleaned = text.strip()
    if cleaned.startswith("```") and cleaned.endswith("```"):
        cleaned = cleaned[3:-3].strip()
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
    return cleaned.strip()
