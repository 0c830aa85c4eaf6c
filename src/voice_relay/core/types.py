#voice_relay/core/types.py
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path


class IntentAction(StrEnum):
    CREATE_EVENT = "create_event"
    CREATE_TASK = "create_task"
    SEND_MESSAGE = "send_message"
    SET_REMINDER = "set_reminder"
    SEARCH_INFO = "search_info"
    UNKNOWN = "unknown"

    @classmethod
    def coerce(cls, value: object) -> "IntentAction":
        raw = str(value or "").strip().lower()
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN


@dataclass(slots=True)
class AudioUpload:
    filename: str
    extension: str
    size_bytes: int
    path: Path

    def exists(self) -> bool:
        return self.path.exists()

    def discard(self) -> None:
        # idempotent: every exit path may call it
        self.path.unlink(missing_ok=True)
