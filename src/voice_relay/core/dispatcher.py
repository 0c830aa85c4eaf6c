from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence

import httpx

from voice_relay.core.types import IntentAction
from voice_relay.errors import DispatchError
from voice_relay.schemas import ExecutionResult
from voice_relay.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_RESULT_TEXT = "Task completed successfully"
UNKNOWN_RESULT_TEXT = "I'm not sure how to handle that request"

# checked in this order; first non-blank string wins
RESULT_KEYS: Sequence[str] = ("result", "message", "data")


class Dispatcher(Protocol):
    async def dispatch(self, intent: Dict[str, Any]) -> ExecutionResult: ...

    async def aclose(self) -> None: ...


def resolve_result_text(payload: Any, keys: Sequence[str] = RESULT_KEYS, default: str = DEFAULT_RESULT_TEXT) -> str:
    if not isinstance(payload, Mapping):
        return default
    for key in keys:
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return default


def mock_result_text(intent: Mapping[str, Any]) -> str:
    title = str(intent.get("title") or "Untitled")
    action = intent.get("action")

    if action == IntentAction.CREATE_EVENT:
        return f'Event "{title}" has been created in your calendar'
    if action == IntentAction.CREATE_TASK:
        return f'Task "{title}" has been added to your todo list'
    if action == IntentAction.SEND_MESSAGE:
        return f'Message "{title}" has been sent'
    if action == IntentAction.SET_REMINDER:
        return f'Reminder "{title}" has been set'
    if action == IntentAction.SEARCH_INFO:
        query = intent.get("title") or intent.get("details") or "your query"
        return f'Search completed for "{query}"'
    return UNKNOWN_RESULT_TEXT


class MockDispatcher:
    """Canned responses for when no workflow webhook is configured."""

    async def dispatch(self, intent: Dict[str, Any]) -> ExecutionResult:
        logger.warning("N8N_WEBHOOK_URL not configured, using mock execution for action=%s", intent.get("action"))
        return ExecutionResult(success=True, result=mock_result_text(intent), intent=intent, mock=True)

    async def aclose(self) -> None:
        return None


class WebhookDispatcher:
    def __init__(
        self,
        url: str,
        *,
        timeout_s: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self._client = httpx.AsyncClient(timeout=timeout_s, transport=transport)

    async def dispatch(self, intent: Dict[str, Any]) -> ExecutionResult:
        try:
            resp = await self._client.post(self.url, json=intent)
        except httpx.HTTPError as e:
            logger.exception("Workflow webhook request failed")
            raise DispatchError("Workflow execution failed", cause=f"{e.__class__.__name__}: {e}") from e

        if not resp.is_success:
            logger.error("Workflow webhook returned %d", resp.status_code)
            raise DispatchError(
                "Workflow execution failed",
                cause=f"webhook failed: {resp.status_code} {resp.reason_phrase}",
            )

        try:
            body = resp.json()
        except ValueError:
            body = None

        result = resolve_result_text(body)
        logger.info("Workflow webhook handled action=%s", intent.get("action"))
        return ExecutionResult(success=True, result=result, intent=intent)

    async def aclose(self) -> None:
        await self._client.aclose()


def build_dispatcher(cfg: Settings) -> Dispatcher:
    if cfg.N8N_WEBHOOK_URL:
        return WebhookDispatcher(cfg.N8N_WEBHOOK_URL, timeout_s=cfg.WEBHOOK_TIMEOUT)
    return MockDispatcher()
