"""Session state controller for the repair workflow."""

import logging
from collections.abc import Callable
from dataclasses import replace

from pydantic import ValidationError as PydanticValidationError

from homefix.domain.media import (
    MediaPreview,
    ensure_supported_image,
    parse_data_url,
)
from homefix.domain.repair import RepairGuide
from homefix.domain.session import SessionState, SessionStatus
from homefix.errors import (
    AnalysisInProgressError,
    InvalidImageError,
    PersistenceReadError,
    TransportError,
    ValidationError,
)
from homefix.services.extraction import RepairGuideExtractor
from homefix.services.storage import KeyValueStore

_logger = logging.getLogger(__name__)

RESULT_KEY = "analysisResult"
MEDIA_URL_KEY = "mediaUrl"
MEDIA_TYPE_KEY = "mediaType"
PROMPT_KEY = "prompt"

StateListener = Callable[[SessionState], None]


class SessionController:
    """Single owner of the session state and its persisted copy.

    The controller is restored from storage on construction. Result, media
    preview and prompt are written through to storage on every change and
    removed from it when they become empty. Each analysis is tagged with a
    generation number; completions carrying an older generation (for example
    one that resolves after ``reset``) are discarded.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        extractor: RepairGuideExtractor,
        namespace: str = "homefix_",
    ) -> None:
        self.storage = storage
        self.extractor = extractor
        self.namespace = namespace
        self._listeners: list[StateListener] = []
        self._state = self.restore()

    @property
    def state(self) -> SessionState:
        return self._state

    def key(self, name: str) -> str:
        """Return the namespaced storage key for a persisted field."""
        return f"{self.namespace}{name}"

    def storage_keys(self) -> list[str]:
        return [
            self.key(name)
            for name in (RESULT_KEY, MEDIA_URL_KEY, MEDIA_TYPE_KEY, PROMPT_KEY)
        ]

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a callback run after every state change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def restore(self) -> SessionState:
        """Rebuild the session from storage, dropping anything malformed."""
        try:
            return self._read_state()
        except PersistenceReadError as exc:
            _logger.warning("Persisted session unreadable, starting fresh: %s", exc)
            return SessionState()

    def start_analysis(self) -> int:
        """Enter the analyzing state and return the new generation token."""
        generation = self._state.generation + 1
        self._update(
            status=SessionStatus.ANALYZING,
            result=None,
            error=None,
            generation=generation,
        )
        return generation

    def complete_analysis(
        self, guide: RepairGuide, generation: int | None = None
    ) -> bool:
        """Show a finished guide; returns False if the call was superseded."""
        if not self._accepts(generation):
            return False
        self._update(status=SessionStatus.RESULT, result=guide, error=None)
        return True

    def fail_analysis(self, message: str, generation: int | None = None) -> bool:
        """Show an analysis error; returns False if the call was superseded."""
        if not self._accepts(generation):
            return False
        self._update(status=SessionStatus.ERROR, result=None, error=message)
        return True

    def reset(self) -> None:
        """Return to idle and erase everything persisted for this session."""
        self._state = SessionState(generation=self._state.generation + 1)
        for key in self.storage_keys():
            self.storage.delete(key)
        self._notify()

    def set_prompt(self, text: str) -> None:
        self._update(prompt=text)

    def set_media_preview(self, preview: MediaPreview | None) -> None:
        self._update(media_preview=preview)

    async def analyze(
        self, image_data: bytes | None = None, mime_type: str | None = None
    ) -> SessionState:
        """Run one analysis for the current prompt and image.

        When no bytes are passed the stored media preview is decoded, so a
        failed analysis can be retried after a restart without re-uploading.
        """
        if self._state.is_loading:
            raise AnalysisInProgressError("An analysis is already in progress")
        if image_data is not None:
            self.set_media_preview(MediaPreview.from_bytes(image_data, mime_type))
        preview = self._state.media_preview
        if preview is None:
            raise InvalidImageError("Upload an image before starting an analysis")

        generation = self.start_analysis()
        try:
            guide = await self.extractor.analyze(
                preview.decode(), preview.type, self._state.prompt
            )
        except (TransportError, ValidationError, InvalidImageError) as exc:
            self.fail_analysis(str(exc), generation)
        except BaseException:
            # Cancellation must not leave the session stuck in ANALYZING.
            self.fail_analysis("Analysis was interrupted", generation)
            raise
        else:
            self.complete_analysis(guide, generation)
        return self._state

    def _accepts(self, generation: int | None) -> bool:
        if self._state.status is not SessionStatus.ANALYZING:
            _logger.info("Ignoring analysis outcome outside of an analysis")
            return False
        if generation is not None and generation != self._state.generation:
            _logger.info(
                "Discarding stale analysis outcome: generation=%s current=%s",
                generation,
                self._state.generation,
            )
            return False
        return True

    def _update(self, **changes: object) -> None:
        previous = self._state
        self._state = replace(previous, **changes)
        if self._state.result != previous.result:
            self._persist_result(self._state.result)
        if self._state.media_preview != previous.media_preview:
            self._persist_media(self._state.media_preview)
        if self._state.prompt != previous.prompt:
            self._write(self.key(PROMPT_KEY), self._state.prompt)
        self._notify()

    def _persist_result(self, result: RepairGuide | None) -> None:
        self._write(self.key(RESULT_KEY), result.to_json() if result else None)

    def _persist_media(self, preview: MediaPreview | None) -> None:
        self._write(self.key(MEDIA_URL_KEY), preview.url if preview else None)
        self._write(self.key(MEDIA_TYPE_KEY), preview.type if preview else None)

    def _write(self, key: str, value: str | None) -> None:
        if value:
            self.storage.set(key, value)
        else:
            self.storage.delete(key)

    def _read_state(self) -> SessionState:
        try:
            result = self._read_result()
        except PersistenceReadError as exc:
            _logger.warning("Discarding persisted result: %s", exc)
            self.storage.delete(self.key(RESULT_KEY))
            result = None

        return SessionState(
            status=SessionStatus.RESULT if result is not None else SessionStatus.IDLE,
            result=result,
            media_preview=self._read_media_preview(),
            prompt=self.storage.get(self.key(PROMPT_KEY)) or "",
        )

    def _read_media_preview(self) -> MediaPreview | None:
        url = self.storage.get(self.key(MEDIA_URL_KEY))
        media_type = self.storage.get(self.key(MEDIA_TYPE_KEY))
        if not (url and media_type):
            return None
        try:
            image_bytes, _ = parse_data_url(url)
            ensure_supported_image(image_bytes, media_type)
        except InvalidImageError as exc:
            _logger.warning("Discarding persisted media preview: %s", exc)
            self._persist_media(None)
            return None
        return MediaPreview(url=url, type=media_type)

    def _read_result(self) -> RepairGuide | None:
        raw = self.storage.get(self.key(RESULT_KEY))
        if not raw:
            return None
        try:
            return RepairGuide.model_validate_json(raw)
        except PydanticValidationError as exc:
            raise PersistenceReadError(
                f"Stored repair guide is malformed ({exc.error_count()} errors)"
            ) from exc

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._state)
