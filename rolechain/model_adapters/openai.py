"""OpenAI-compatible chat completions adapter."""

from __future__ import annotations

from typing import Any

import httpx

from rolechain.logging import get_logger
from rolechain.model_adapters.base import post_json, with_tools

log = get_logger(__name__)

DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"


async def call_openai(
    client: httpx.AsyncClient,
    prompt: str,
    model: str,
    api_url: str,
    api_key: str,
    tools: list[dict[str, Any]] | None = None,
    *,
    max_tokens: int = 0,
    temperature: float | None = None,
) -> str:
    """Send *prompt* as a single user message and return the reply text."""
    payload: dict[str, Any] = {
        "model": model,
        "messages": [{"role": "user", "content": with_tools(prompt, tools)}],
    }
    if max_tokens > 0:
        payload["max_tokens"] = max_tokens
    if temperature is not None:
        payload["temperature"] = temperature
    log.info("Calling OpenAI", model=model)
    data = await post_json(
        "OpenAI",
        client,
        api_url or DEFAULT_API_URL,
        payload,
        headers={"Authorization": f"Bearer {api_key}"},
    )
    return _text_from_response(data)


def _text_from_response(data: dict[str, Any]) -> str:
    choices = data.get("choices") or []
    if not choices:
        return ""
    first = choices[0]
    message = first.get("message") or {}
    return str(message.get("content") or first.get("text") or "")
