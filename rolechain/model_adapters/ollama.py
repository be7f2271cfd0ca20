"""Ollama chat adapter."""

from __future__ import annotations

from typing import Any

import httpx

from rolechain.logging import get_logger
from rolechain.model_adapters.base import post_json, with_tools

log = get_logger(__name__)

DEFAULT_API_URL = "http://localhost:11434"


def _chat_url(api_url: str) -> str:
    base = (api_url or DEFAULT_API_URL).rstrip("/")
    if base.endswith("/api/chat") or base.endswith("/api/generate"):
        return base
    return f"{base}/api/chat"


async def call_ollama(
    client: httpx.AsyncClient,
    prompt: str,
    model: str,
    api_url: str,
    api_key: str = "",
    tools: list[dict[str, Any]] | None = None,
) -> str:
    """Send *prompt* to a local Ollama instance and return the reply text."""
    url = _chat_url(api_url)
    content = with_tools(prompt, tools)
    if url.endswith("/api/generate"):
        payload: dict[str, Any] = {"model": model, "prompt": content, "stream": False}
    else:
        payload = {
            "model": model,
            "messages": [{"role": "user", "content": content}],
            "stream": False,
        }
    log.info("Calling Ollama", model=model)
    data = await post_json("Ollama", client, url, payload)
    message = data.get("message") or {}
    return str(message.get("content") or data.get("response") or "")
