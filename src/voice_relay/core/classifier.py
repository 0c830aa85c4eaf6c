from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from langchain_core.messages import HumanMessage, SystemMessage

from voice_relay.core.prompts import INTENT_SYS
from voice_relay.errors import IntentClassificationError, ServiceNotConfiguredError
from voice_relay.schemas import Intent

logger = logging.getLogger(__name__)


def parse_intent(raw: str) -> Intent:
    """Parse the model reply into an Intent. Anything but a JSON object is fatal."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise IntentClassificationError("Intent parsing failed", cause=f"invalid JSON from model: {e}") from e
    if not isinstance(data, dict):
        raise IntentClassificationError("Intent parsing failed", cause="model reply is not a JSON object")
    return Intent.model_validate(data)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IntentClassifier:
    def __init__(self, *, llm: Optional[Any], clock: Callable[[], datetime] = _utcnow) -> None:
        self._llm = llm
        self._clock = clock

    async def classify(self, text: str) -> Intent:
        if self._llm is None:
            raise ServiceNotConfiguredError("OpenAI API key not configured")

        prompt = [
            SystemMessage(content=INTENT_SYS),
            HumanMessage(
                content=(
                    f"Current time: {self._clock().isoformat()}\n\n"
                    f"Command:\n{text}"
                )
            ),
        ]
        try:
            resp = await self._llm.ainvoke(prompt)
        except Exception as e:
            logger.exception("Intent parsing upstream error")
            raise IntentClassificationError("Intent parsing failed", cause=str(e)) from e

        raw = resp.content.strip() if isinstance(resp.content, str) else ""
        if not raw:
            raise IntentClassificationError("Intent parsing failed", cause="No response from language model")

        intent = parse_intent(raw)
        logger.info("Parsed intent: action=%s confidence=%.2f", intent.action, intent.confidence)
        return intent
