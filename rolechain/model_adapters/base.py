"""Shared helpers for provider adapters."""

from __future__ import annotations

from typing import Any

import httpx

from rolechain.errors import ModelCallError


def build_tool_prompt(tools: list[dict[str, Any]]) -> str:
    """Build a prompt section describing the available tools."""
    lines = [
        "\n\n## Tool Calling",
        "You have access to the following tools. To call a tool, respond with a JSON block:",
        '```json\n{"tool_call": {"name": "tool_name", "arguments": {"arg": "value"}}}\n```',
        "You may include explanation text before or after the JSON block.",
        "Available tools:\n",
    ]
    for tool in tools:
        fn = tool.get("function", {})
        params = fn.get("parameters", {})
        required = params.get("required", [])
        param_lines = []
        for pname, pdef in params.get("properties", {}).items():
            req = " (required)" if pname in required else ""
            param_lines.append(
                f"    - {pname}: {pdef.get('type', 'any')} - {pdef.get('description', '')}{req}"
            )
        lines.append(f"- **{fn.get('name', '')}**: {fn.get('description', '')}")
        if param_lines:
            lines.append("\n".join(param_lines))
    return "\n".join(lines)


def with_tools(prompt: str, tools: list[dict[str, Any]] | None) -> str:
    return prompt + build_tool_prompt(tools) if tools else prompt


def raise_for_api_error(provider: str, resp: httpx.Response) -> None:
    """Raise ModelCallError carrying the provider's message for non-200 responses."""
    if resp.status_code == 200:
        return
    message = ""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict):
            message = str(err.get("message", ""))
        elif err:
            message = str(err)
    if message:
        raise ModelCallError(f"{provider} API error: {message}", status_code=resp.status_code)
    raise ModelCallError(
        f"{provider} API returned status {resp.status_code}", status_code=resp.status_code
    )


async def post_json(
    provider: str,
    client: httpx.AsyncClient,
    url: str,
    payload: dict[str, Any],
    **kwargs: Any,
) -> dict[str, Any]:
    try:
        resp = await client.post(url, json=payload, **kwargs)
    except httpx.HTTPError as exc:
        raise ModelCallError(f"failed to send {provider} request: {exc}") from exc
    raise_for_api_error(provider, resp)
    try:
        data = resp.json()
    except ValueError as exc:
        raise ModelCallError(f"failed to decode {provider} response: {exc}") from exc
    if not isinstance(data, dict):
        raise ModelCallError(f"unexpected {provider} response shape")
    return data
