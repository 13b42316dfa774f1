"""Models for repair guides returned by the model."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Difficulty(StrEnum):
    """How hard a repair is for a typical DIYer."""

    EASY = "Easy"
    INTERMEDIATE = "Intermediate"
    HARD = "Hard"
    EXPERT = "Expert"


class RepairStep(BaseModel):
    """Single instruction in a repair guide."""

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)


class RepairGuide(BaseModel):
    """Structured repair guide for one broken item."""

    model_config = ConfigDict(populate_by_name=True)

    item_name: str = Field(alias="itemName", min_length=1)
    problem_analysis: str = Field(alias="problemAnalysis")
    difficulty: Difficulty
    estimated_time: str = Field(alias="estimatedTime")
    tools: list[str]
    parts: list[str]
    steps: list[RepairStep] = Field(min_length=1)

    def to_json(self) -> str:
        """Serialize using the camelCase wire names."""
        return self.model_dump_json(by_alias=True)
