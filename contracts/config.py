"""Configuration (rolechain.yaml) schema — Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel, model_validator

from contracts.roles import Chain, Role
from contracts.tools import ToolArgument


# ── Providers ────────────────────────────────────────────────────────


class ModelEntry(BaseModel):
    model: str
    temperature: float | None = None
    max_tokens: int = 0
    api_key: str = ""   # overrides the provider key
    api_url: str = ""   # overrides the provider url


class ProviderConfig(BaseModel):
    api_url: str = ""
    api_key: str = ""
    models: dict[str, ModelEntry] = {}


class ProvidersConfig(BaseModel):
    gemini: ProviderConfig | None = None
    openai: ProviderConfig | None = None
    ollama: ProviderConfig | None = None

    def configured(self) -> dict[str, ProviderConfig]:
        """Return the configured providers in lookup order."""
        out: dict[str, ProviderConfig] = {}
        for name in ("gemini", "openai", "ollama"):
            provider = getattr(self, name)
            if provider is not None:
                out[name] = provider
        return out


# ── Configurable tools ───────────────────────────────────────────────


class ConfigurableToolConfig(BaseModel):
    name: str
    description: str = ""
    command_template: str
    arguments: list[ToolArgument] = []


# ── Runtime knobs ────────────────────────────────────────────────────


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "console"  # "console" | "json"


class ExecutorConfig(BaseModel):
    retry_count: int = 1
    timeout_seconds: float = 10.0
    cancel_on_timeout: bool = False


# ── Root config ──────────────────────────────────────────────────────


class Config(BaseModel):
    providers: ProvidersConfig = ProvidersConfig()
    log_file_path: str | None = None
    logging: LoggingConfig = LoggingConfig()
    executor: ExecutorConfig = ExecutorConfig()
    tools: list[ConfigurableToolConfig] = []
    roles: dict[str, Role] = {}
    chains: dict[str, Chain] = {}

    @model_validator(mode="after")
    def _fill_names(self) -> "Config":
        self.roles = {
            key: role if role.name else role.model_copy(update={"name": key})
            for key, role in self.roles.items()
        }
        for key, chain in self.chains.items():
            if not chain.name:
                chain.name = key
        return self
