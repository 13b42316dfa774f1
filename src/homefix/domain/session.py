"""Domain models for the repair session."""

from dataclasses import dataclass
from enum import StrEnum

from homefix.domain.media import MediaPreview
from homefix.domain.repair import RepairGuide


class SessionStatus(StrEnum):
    """Which view of the workflow is active."""

    IDLE = "idle"
    ANALYZING = "analyzing"
    RESULT = "result"
    ERROR = "error"


@dataclass(frozen=True)
class SessionState:
    """Snapshot of everything the user currently sees."""

    status: SessionStatus = SessionStatus.IDLE
    result: RepairGuide | None = None
    error: str | None = None
    media_preview: MediaPreview | None = None
    prompt: str = ""
    generation: int = 0

    @property
    def is_loading(self) -> bool:
        return self.status is SessionStatus.ANALYZING
