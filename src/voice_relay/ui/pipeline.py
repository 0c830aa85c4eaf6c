"""Client-side sequencing of the relay stages."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional, Protocol

import requests

from voice_relay.ui.api_client import ApiError, ExecutionView, IntentView

logger = logging.getLogger(__name__)


class Stage(StrEnum):
    TRANSCRIBE = "transcribe"
    CLASSIFY = "classify"
    DISPATCH = "dispatch"
    SPEAK = "speak"


class PipelineError(RuntimeError):
    def __init__(self, stage: Stage, message: str) -> None:
        super().__init__(f"{stage} failed: {message}")
        self.stage = stage
        self.message = message


class RelayApi(Protocol):
    def transcribe(self, *, audio_bytes: bytes, filename: str, content_type: str) -> str: ...

    def parse_intent(self, text: str) -> IntentView: ...

    def execute(self, intent: IntentView) -> ExecutionView: ...

    def speak(self, text: str) -> bytes: ...


@dataclass(frozen=True)
class CommandOutcome:
    transcript: str
    intent: IntentView
    execution: ExecutionView


class VoiceCommandPipeline:
    """
    Runs upload+transcribe -> classify -> dispatch in order.

    The first failing stage raises PipelineError and the remaining stages
    are not called. Speech playback is not part of the run; see PlaybackGuard.
    """

    def __init__(self, api: RelayApi) -> None:
        self.api = api

    def run(self, *, audio_bytes: bytes, filename: str, content_type: str) -> CommandOutcome:
        transcript = self._stage(
            Stage.TRANSCRIBE,
            lambda: self.api.transcribe(audio_bytes=audio_bytes, filename=filename, content_type=content_type),
        )
        if not transcript.strip():
            raise PipelineError(Stage.TRANSCRIBE, "No speech recognized")

        intent = self._stage(Stage.CLASSIFY, lambda: self.api.parse_intent(transcript))
        execution = self._stage(Stage.DISPATCH, lambda: self.api.execute(intent))
        return CommandOutcome(transcript=transcript, intent=intent, execution=execution)

    @staticmethod
    def _stage(stage: Stage, call):
        try:
            return call()
        except ApiError as e:
            logger.warning("Stage %s failed with %d: %s", stage, e.status_code, e.message)
            raise PipelineError(stage, e.message) from e
        except requests.RequestException as e:
            logger.warning("Stage %s failed: %s", stage, e)
            raise PipelineError(stage, str(e)) from e


class PlaybackGuard:
    """Refuses a new playback while a previous one is still in flight."""

    def __init__(self, api: RelayApi) -> None:
        self.api = api
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def speak(self, text: str) -> Optional[bytes]:
        if not self._lock.acquire(blocking=False):
            logger.info("Playback already in progress, ignoring request")
            return None
        try:
            return VoiceCommandPipeline._stage(Stage.SPEAK, lambda: self.api.speak(text))
        finally:
            self._lock.release()
