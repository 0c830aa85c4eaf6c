from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from openai import AsyncOpenAI

from voice_relay.core.classifier import IntentClassifier
from voice_relay.core.dispatcher import Dispatcher, build_dispatcher
from voice_relay.core.llm import build_intent_llm
from voice_relay.core.synthesizer import SpeechSynthesizer
from voice_relay.core.transcriber import WhisperTranscriber
from voice_relay.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class VoiceRelay:
    """The four server-side stages, built once from an explicit Settings value."""

    transcriber: WhisperTranscriber
    classifier: IntentClassifier
    dispatcher: Dispatcher
    synthesizer: SpeechSynthesizer
    openai_client: Optional[Any] = None

    @classmethod
    def from_settings(cls, cfg: Settings) -> "VoiceRelay":
        client = None
        if cfg.OPENAI_API_KEY:
            client = AsyncOpenAI(api_key=cfg.OPENAI_API_KEY, timeout=cfg.API_TIMEOUT, max_retries=0)
        else:
            logger.warning("OPENAI_API_KEY not configured; /stt, /intent and /tts will fail")

        dispatcher = build_dispatcher(cfg)
        logger.info("Workflow dispatcher: %s", type(dispatcher).__name__)

        return cls(
            transcriber=WhisperTranscriber(client=client, model_name=cfg.STT_MODEL),
            classifier=IntentClassifier(llm=build_intent_llm(cfg)),
            dispatcher=dispatcher,
            synthesizer=SpeechSynthesizer(client=client, model_name=cfg.TTS_MODEL, voice=cfg.TTS_VOICE),
            openai_client=client,
        )

    async def aclose(self) -> None:
        await self.dispatcher.aclose()
        if self.openai_client is not None:
            await self.openai_client.close()
