from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from voice_relay.errors import ServiceNotConfiguredError, SynthesisError

logger = logging.getLogger(__name__)

AUDIO_MEDIA_TYPE = "audio/mpeg"


@dataclass
class SpeechSynthesizer:
    client: Optional[Any] = None
    model_name: str = "tts-1"
    voice: str = "alloy"

    async def synthesize(self, text: str) -> bytes:
        if self.client is None:
            raise ServiceNotConfiguredError("OpenAI API key not configured")

        try:
            speech = await self.client.audio.speech.create(
                model=self.model_name,
                voice=self.voice,
                input=text,
                response_format="mp3",
            )
        except Exception as e:
            logger.exception("TTS upstream error")
            raise SynthesisError("Text-to-speech conversion failed", cause=str(e)) from e

        audio = speech.content
        if not audio:
            raise SynthesisError("Text-to-speech conversion failed", cause="provider returned empty audio")
        logger.info("Synthesized %d chars into %d bytes", len(text), len(audio))
        return audio
