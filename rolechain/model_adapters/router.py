"""Resolve a role to a provider endpoint and dispatch the model call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from contracts.config import Config, ModelEntry
from contracts.roles import Role
from rolechain.errors import ConfigError, ModelCallError
from rolechain.model_adapters.gemini import call_gemini
from rolechain.model_adapters.ollama import call_ollama
from rolechain.model_adapters.openai import call_openai

DEFAULT_TIMEOUT = 300.0


@dataclass(frozen=True)
class ResolvedModel:
    provider: str
    model: str
    api_url: str
    api_key: str
    entry: ModelEntry


def resolve_model(config: Config, role: Role) -> ResolvedModel:
    """Find the provider and model entry for *role*.

    Without an explicit provider, the model key is looked up in each
    configured provider in order (gemini, openai, ollama).
    """
    providers = config.providers.configured()
    if role.provider:
        candidates = [role.provider]
    else:
        candidates = list(providers)

    for name in candidates:
        provider = providers.get(name)
        if provider is None:
            raise ConfigError(f"Provider '{name}' for role '{role.name}' is not configured")
        entry = provider.models.get(role.model)
        if entry is None:
            continue
        return ResolvedModel(
            provider=name,
            model=entry.model,
            api_url=entry.api_url or provider.api_url,
            api_key=entry.api_key or provider.api_key,
            entry=entry,
        )
    raise ConfigError(f"Model '{role.model}' for role '{role.name}' is not configured")


class ModelRouter:
    """Callable model backend: ``await router(role, prompt) -> str``."""

    def __init__(
        self,
        config: Config,
        *,
        tools: list[dict[str, Any]] | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._config = config
        self._tools = tools
        self._client = client
        self._timeout = timeout

    async def __call__(self, role: Role, prompt: str) -> str:
        target = resolve_model(self._config, role)
        if self._client is not None:
            return await self._dispatch(self._client, target, prompt)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._dispatch(client, target, prompt)

    async def _dispatch(
        self, client: httpx.AsyncClient, target: ResolvedModel, prompt: str
    ) -> str:
        if target.provider == "gemini":
            return await call_gemini(
                client, prompt, target.model, target.api_url, target.api_key, self._tools
            )
        if target.provider == "openai":
            return await call_openai(
                client,
                prompt,
                target.model,
                target.api_url,
                target.api_key,
                self._tools,
                max_tokens=target.entry.max_tokens,
                temperature=target.entry.temperature,
            )
        if target.provider == "ollama":
            return await call_ollama(
                client, prompt, target.model, target.api_url, target.api_key, self._tools
            )
        raise ModelCallError(f"unsupported provider: {target.provider}")
