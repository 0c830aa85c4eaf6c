import logging
from dataclasses import dataclass
from typing import Any, Optional

from voice_relay.core.types import AudioUpload
from voice_relay.errors import ServiceNotConfiguredError, TranscriptionError

logger = logging.getLogger(__name__)


@dataclass
class WhisperTranscriber:
    """
    Sends stored audio to the OpenAI transcription endpoint.

    Attributes:
        client: AsyncOpenAI-compatible client, None when no API key is configured
        model_name: Transcription model (whisper-1 by default)
    """
    client: Optional[Any] = None
    model_name: str = "whisper-1"

    async def transcribe(self, upload: AudioUpload) -> str:
        """
        Transcribe the uploaded file and delete it afterwards.

        The file is removed on every exit path, including a missing API key.
        """
        try:
            if self.client is None:
                raise ServiceNotConfiguredError("OpenAI API key not configured")

            try:
                with upload.path.open("rb") as fh:
                    transcription = await self.client.audio.transcriptions.create(
                        file=fh,
                        model=self.model_name,
                    )
            except Exception as e:
                logger.exception("STT upstream error for %s", upload.filename)
                raise TranscriptionError("Speech-to-text conversion failed", cause=str(e)) from e

            text = getattr(transcription, "text", None)
            if text is None:
                raise TranscriptionError("Speech-to-text conversion failed", cause="provider returned no text")
            logger.info("Transcribed %s (%d bytes): %d chars", upload.filename, upload.size_bytes, len(text))
            return text
        finally:
            upload.discard()
