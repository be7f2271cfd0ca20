"""Shared contracts — source of truth for all rolechain interfaces."""

from contracts.audit import RoleCallLogEntry, RoleCallLogger
from contracts.config import (
    Config,
    ConfigurableToolConfig,
    ExecutorConfig,
    LoggingConfig,
    ModelEntry,
    ProviderConfig,
    ProvidersConfig,
)
from contracts.roles import MAX_LOOP_ITERATIONS, Chain, ChainStep, Role
from contracts.tools import BaseTool, ToolArgument, ToolCall, ToolOutput, ToolSchema
from contracts.transcript import Step, Transcript
from contracts.ui import UI

__all__ = [
    # audit
    "RoleCallLogEntry",
    "RoleCallLogger",
    # config
    "Config",
    "ConfigurableToolConfig",
    "ExecutorConfig",
    "LoggingConfig",
    "ModelEntry",
    "ProviderConfig",
    "ProvidersConfig",
    # roles
    "MAX_LOOP_ITERATIONS",
    "Chain",
    "ChainStep",
    "Role",
    # tools
    "BaseTool",
    "ToolArgument",
    "ToolCall",
    "ToolOutput",
    "ToolSchema",
    # transcript
    "Step",
    "Transcript",
    # ui
    "UI",
]
