"""Google Gemini client for structured repair guides."""

from dataclasses import dataclass

from google import genai
from google.genai import types

from homefix.services.extraction import GuideClient


@dataclass
class GeminiGuideClient(GuideClient):
    """Guide client backed by the Gemini generate_content API."""

    client: genai.Client

    @classmethod
    def create(cls, api_key: str) -> "GeminiGuideClient":
        """Create a Gemini guide client."""
        return cls(client=genai.Client(api_key=api_key))

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
        """Call Gemini with an inline image and a JSON response schema."""
        response = await self.client.aio.models.generate_content(
            model=model,
            contents=[
                types.Part.from_bytes(data=image_data, mime_type=mime_type),
                types.Part.from_text(text=prompt),
            ],
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                response_mime_type="application/json",
                response_json_schema=schema,
            ),
        )
        return response.text or ""

    async def close(self) -> None:
        """Close the underlying HTTP sessions."""
        await self.client.aio.aclose()
