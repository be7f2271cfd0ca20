"""Config loader — parse and validate rolechain.yaml."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

import yaml
from pydantic import ValidationError

from contracts.config import Config
from rolechain.errors import ConfigError

DEFAULT_CONFIG_PATH = "rolechain.yaml"
CONFIG_ENV_VAR = "ROLECHAIN_CONFIG"


def default_config_path(environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    return env.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH


def load_config(path: str | None = None, environ: Mapping[str, str] | None = None) -> Config:
    """Load a rolechain.yaml file and return a validated Config."""
    env = os.environ if environ is None else environ
    p = Path(path or default_config_path(env))
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")

    raw = p.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {p}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a YAML mapping, got {type(data).__name__}")

    try:
        config = Config(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config {p}: {exc}") from exc

    _apply_env_overrides(config, env)
    check_config(config)
    return config


def _apply_env_overrides(config: Config, env: Mapping[str, str]) -> None:
    for name, provider in config.providers.configured().items():
        key = env.get(f"ROLECHAIN_{name.upper()}_API_KEY")
        if key:
            provider.api_key = key


def check_config(config: Config) -> None:
    """Cross-reference providers, roles, chains and tools.

    Raises ConfigError on the first problem found.
    """
    providers = config.providers.configured()
    if not providers:
        raise ConfigError("At least one provider must be configured")

    for key, role in config.roles.items():
        if not role.prompt:
            raise ConfigError(f"Role '{key}' has no prompt")
        if role.provider:
            provider = providers.get(role.provider)
            if provider is None:
                raise ConfigError(
                    f"Role '{key}' references unknown provider '{role.provider}'"
                )
            if role.model not in provider.models:
                raise ConfigError(
                    f"Role '{key}' references model '{role.model}' "
                    f"not declared under provider '{role.provider}'"
                )
        elif not any(role.model in p.models for p in providers.values()):
            raise ConfigError(f"Role '{key}' references undeclared model '{role.model}'")

    for key, chain in config.chains.items():
        if not chain.steps:
            raise ConfigError(f"Chain '{key}' has no steps")
        for i, step in enumerate(chain.steps):
            if step.role not in config.roles:
                raise ConfigError(
                    f"Chain '{key}' step {i} references undefined role '{step.role}'"
                )

    seen: set[str] = set()
    for tool in config.tools:
        if not tool.name or not tool.command_template:
            raise ConfigError("Configurable tools need a name and a command_template")
        if tool.name in seen:
            raise ConfigError(f"Duplicate configurable tool '{tool.name}'")
        seen.add(tool.name)
        for arg in tool.arguments:
            if not arg.name or not arg.type:
                raise ConfigError(f"Tool '{tool.name}' has an argument without name or type")
