"""OpenAI Responses API client for structured repair guides."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from homefix.domain.media import to_data_url
from homefix.services.extraction import GuideClient


@dataclass
class OpenAIGuideClient(GuideClient):
    """Guide client backed by OpenAI Responses API."""

    client: AsyncOpenAI
    store: bool = False

    @classmethod
    def create(cls, api_key: str) -> "OpenAIGuideClient":
        """Create an OpenAI guide client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

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
        """Call OpenAI Responses API with structured outputs."""
        response = await self.client.responses.create(
            model=model,
            instructions=system_instruction,
            input=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "input_image",
                            "image_url": to_data_url(image_data, mime_type),
                        },
                        {"type": "input_text", "text": prompt},
                    ],
                }
            ],
            text={
                "format": {
                    "type": "json_schema",
                    "name": "repair_guide",
                    "strict": True,
                    "schema": schema,
                }
            },
            store=self.store,
        )
        return response.output_text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
