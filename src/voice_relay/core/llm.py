from __future__ import annotations

from langchain_core.runnables import Runnable
from langchain_openai import ChatOpenAI

from voice_relay.settings import Settings


def build_intent_llm(cfg: Settings) -> Runnable | None:
    if not cfg.OPENAI_API_KEY:
        return None
    llm = ChatOpenAI(
        model=cfg.LLM_MODEL,
        temperature=cfg.LLM_TEMPERATURE,
        api_key=cfg.OPENAI_API_KEY,
        timeout=cfg.API_TIMEOUT,
        max_retries=0,
    )
    # JSON-only replies
    return llm.bind(response_format={"type": "json_object"})
