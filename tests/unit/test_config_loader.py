"""Unit tests for the config loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from contracts.roles import MAX_LOOP_ITERATIONS, ChainStep
from rolechain.config_loader import default_config_path, load_config
from rolechain.errors import ConfigError


SAMPLE_CONFIG = """\
providers:
  gemini:
    api_url: https://generativelanguage.googleapis.com
    api_key: g-key
    models:
      flash:
        model: gemini-1.5-flash
  ollama:
    api_url: http://localhost:11434
    models:
      local:
        model: llama3
        api_url: http://gpu-box:11434

log_file_path: role_calls.jsonl

executor:
  retry_count: 2
  timeout_seconds: 5

tools:
  - name: grep_repo
    description: Search the repository
    command_template: "grep -rn {{.pattern}} ."
    arguments:
      - name: pattern
        type: string

roles:
  coder:
    provider: gemini
    model: flash
    prompt: "Write code for {{.task}}"
  helper:
    model: local
    prompt: "Help with {{.task}}"

chains:
  build:
    steps:
      - role: coder
        input:
          task: "{{.task}}"
        output_key: code
        loop: true
        loop_condition: "{{.tool_call.name}} == 'write_file'"
      - name: helper
        input:
          task: "review"
"""


def _write(tmp_path: Path, text: str) -> Path:
    f = tmp_path / "rolechain.yaml"
    f.write_text(text)
    return f


class TestConfigLoader:
    def test_load_valid_config(self, tmp_path: Path) -> None:
        config = load_config(str(_write(tmp_path, SAMPLE_CONFIG)), environ={})
        assert list(config.providers.configured()) == ["gemini", "ollama"]
        assert config.roles["coder"].name == "coder"
        assert config.roles["helper"].provider is None
        assert config.executor.retry_count == 2
        assert config.tools[0].name == "grep_repo"
        assert config.log_file_path == "role_calls.jsonl"

    def test_chain_steps(self, tmp_path: Path) -> None:
        config = load_config(str(_write(tmp_path, SAMPLE_CONFIG)), environ={})
        chain = config.chains["build"]
        assert chain.name == "build"
        first, second = chain.steps
        assert first.iterations() == MAX_LOOP_ITERATIONS
        assert second.role == "helper"
        assert second.iterations() == 1

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"), environ={})

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="YAML mapping"):
            load_config(str(_write(tmp_path, "- a\n- b\n")), environ={})

    def test_schema_violation_raises_config_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_config(str(_write(tmp_path, "providers: 5\n")), environ={})

    def test_no_providers(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="provider"):
            load_config(str(_write(tmp_path, "roles: {}\n")), environ={})

    def test_role_with_undeclared_model(self, tmp_path: Path) -> None:
        text = SAMPLE_CONFIG.replace("model: flash", "model: pro")
        with pytest.raises(ConfigError, match="pro"):
            load_config(str(_write(tmp_path, text)), environ={})

    def test_role_with_unknown_provider(self, tmp_path: Path) -> None:
        text = SAMPLE_CONFIG.replace("provider: gemini", "provider: openai")
        with pytest.raises(ConfigError, match="openai"):
            load_config(str(_write(tmp_path, text)), environ={})

    def test_chain_with_undefined_role(self, tmp_path: Path) -> None:
        text = SAMPLE_CONFIG.replace("- name: helper", "- name: ghost")
        with pytest.raises(ConfigError, match="ghost"):
            load_config(str(_write(tmp_path, text)), environ={})

    def test_env_overrides(self, tmp_path: Path) -> None:
        path = _write(tmp_path, SAMPLE_CONFIG)
        env = {"ROLECHAIN_CONFIG": str(path), "ROLECHAIN_GEMINI_API_KEY": "from-env"}
        config = load_config(environ=env)
        assert config.providers.gemini is not None
        assert config.providers.gemini.api_key == "from-env"

    def test_default_config_path(self) -> None:
        assert default_config_path({}) == "rolechain.yaml"
        assert default_config_path({"ROLECHAIN_CONFIG": "x.yaml"}) == "x.yaml"


class TestChainStep:
    def test_loop_without_bound_runs_once(self) -> None:
        assert ChainStep(role="r", loop=True).iterations() == 1

    def test_loop_count(self) -> None:
        assert ChainStep(role="r", loop=True, loop_count=4).iterations() == 4

    def test_not_looping_ignores_count(self) -> None:
        assert ChainStep(role="r", loop_count=4).iterations() == 1
