"""Gemini generateContent adapter."""

from __future__ import annotations

from typing import Any

import httpx

from rolechain.logging import get_logger
from rolechain.model_adapters.base import post_json, with_tools

log = get_logger(__name__)

DEFAULT_API_URL = "https://generativelanguage.googleapis.com"


async def call_gemini(
    client: httpx.AsyncClient,
    prompt: str,
    model: str,
    api_url: str,
    api_key: str,
    tools: list[dict[str, Any]] | None = None,
) -> str:
    """Send *prompt* to Gemini and return the candidate text."""
    url = f"{(api_url or DEFAULT_API_URL).rstrip('/')}/v1/models/{model}:generateContent"
    payload = {"contents": [{"parts": [{"text": with_tools(prompt, tools)}]}]}
    log.info("Calling Gemini", model=model)
    data = await post_json("Gemini", client, url, payload, params={"key": api_key})
    return _text_from_response(data)


def _text_from_response(data: dict[str, Any]) -> str:
    for candidate in data.get("candidates") or []:
        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(str(p.get("text", "")) for p in parts if isinstance(p, dict))
        if text:
            return text
    return ""
