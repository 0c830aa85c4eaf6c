# voice_relay/ui/api_client.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests


class ApiError(RuntimeError):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


@dataclass(frozen=True)
class IntentView:
    action: str
    title: str
    time: Optional[str]
    details: str
    confidence: float

    def as_payload(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "title": self.title,
            "time": self.time,
            "details": self.details,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class ExecutionView:
    success: bool
    result: str
    mock: bool = False
    intent: Dict[str, Any] = field(default_factory=dict)


class ApiClient:
    def __init__(self, base_url: str, timeout_s: float = 120.0) -> None:
        """
        Initialize API client.

        Args:
            base_url: Base URL of the Voice Relay API
            timeout_s: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s

    def health(self) -> dict:
        r = requests.get(f"{self.base_url}/health", timeout=self.timeout_s)
        self._raise_for_status(r)
        return r.json()

    def transcribe(self, *, audio_bytes: bytes, filename: str, content_type: str) -> str:
        files = {"audio": (filename, audio_bytes, content_type)}
        r = requests.post(f"{self.base_url}/stt", files=files, timeout=self.timeout_s)
        self._raise_for_status(r)
        return str(r.json().get("text") or "")

    def parse_intent(self, text: str) -> IntentView:
        r = requests.post(f"{self.base_url}/intent", json={"text": text}, timeout=self.timeout_s)
        self._raise_for_status(r)
        j = r.json()
        return IntentView(
            action=j.get("action", "unknown"),
            title=j.get("title", ""),
            time=j.get("time"),
            details=j.get("details", ""),
            confidence=float(j.get("confidence", 0.0)),
        )

    def execute(self, intent: IntentView) -> ExecutionView:
        r = requests.post(f"{self.base_url}/execute", json=intent.as_payload(), timeout=self.timeout_s)
        self._raise_for_status(r)
        j = r.json()
        return ExecutionView(
            success=bool(j.get("success", False)),
            result=j.get("result", ""),
            mock=bool(j.get("mock", False)),
            intent=dict(j.get("intent") or {}),
        )

    def speak(self, text: str) -> bytes:
        r = requests.post(f"{self.base_url}/tts", json={"text": text}, timeout=self.timeout_s)
        self._raise_for_status(r)
        return r.content

    @staticmethod
    def _raise_for_status(r: requests.Response) -> None:
        if r.ok:
            return
        try:
            body = r.json()
        except ValueError:
            body = None
        # proxies may answer with a bare string or list
        message = str(body.get("detail") or "") if isinstance(body, dict) else ""
        raise ApiError(r.status_code, message or f"HTTP error! status: {r.status_code}")
