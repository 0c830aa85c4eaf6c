from __future__ import annotations

import json
import math
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

from voice_relay.core.types import IntentAction


class HealthResponse(BaseModel):
    message: str = "Backend is running!"


class TranscriptionResponse(BaseModel):
    text: str = Field(..., description="Transcribed text of the user audio")


class TextRequest(BaseModel):
    text: StrictStr = Field(..., description="Non-empty input text")

    @field_validator("text")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Text input is required")
        return v


class Intent(BaseModel):
    """
    Structured voice command as returned by the language model.

    Values are normalized rather than rejected: unknown actions become
    ``unknown``, confidence is clamped to [0, 1] and a time that is not
    ISO-8601 is dropped.
    """

    action: IntentAction = IntentAction.UNKNOWN
    title: str = ""
    time: Optional[str] = None
    details: str = ""
    confidence: float = 0.0

    @field_validator("action", mode="before")
    @classmethod
    def _coerce_action(cls, v: Any) -> IntentAction:
        return IntentAction.coerce(v)

    @field_validator("title", "details", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, str):
            return v
        # numbers, booleans and nested values are echoed as JSON text
        try:
            return json.dumps(v, ensure_ascii=False)
        except (TypeError, ValueError):
            return ""

    @field_validator("time", mode="before")
    @classmethod
    def _coerce_time(cls, v: Any) -> Optional[str]:
        if not isinstance(v, str) or not v.strip():
            return None
        try:
            datetime.fromisoformat(v.strip())
        except ValueError:
            return None
        return v.strip()

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, v: Any) -> float:
        try:
            c = float(v)
        except (TypeError, ValueError):
            return 0.0
        if math.isnan(c):
            return 0.0
        return min(1.0, max(0.0, c))


class ExecuteRequest(BaseModel):
    """Intent-shaped body for /execute. Extra keys are kept and forwarded."""

    model_config = ConfigDict(extra="allow")

    action: StrictStr = Field(..., min_length=1, description="Intent action")
    title: Optional[Any] = None
    time: Optional[Any] = None
    details: Optional[Any] = None
    confidence: Optional[Any] = None


class ExecutionResult(BaseModel):
    success: bool
    result: str
    intent: Dict[str, Any]
    mock: bool = False

    def to_payload(self) -> Dict[str, Any]:
        payload = self.model_dump()
        if not self.mock:
            payload.pop("mock")
        return payload
