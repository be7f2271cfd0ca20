"""Wire a Config into a ready-to-run set of components."""

from __future__ import annotations

from dataclasses import dataclass

from contracts.config import Config
from rolechain.audit.logger import JsonlRoleCallLogger
from rolechain.chain import ChainOrchestrator
from rolechain.extraction import ToolCallExtractor
from rolechain.invoker import ModelCaller, RoleInvoker
from rolechain.model_adapters.router import ModelRouter
from rolechain.tools.executor import MetricsHook, ToolExecutor
from rolechain.tools.registry import ToolRegistry, create_default_registry


@dataclass
class Runtime:
    config: Config
    registry: ToolRegistry
    executor: ToolExecutor
    invoker: RoleInvoker
    orchestrator: ChainOrchestrator


def build_runtime(
    config: Config,
    *,
    model_caller: ModelCaller | None = None,
    metrics_hook: MetricsHook | None = None,
    log_file_path: str | None = None,
) -> Runtime:
    """Build fresh components for one execution.  Nothing is shared between runtimes.

    *log_file_path* overrides the configured role-call log path.
    """
    registry = create_default_registry(config.tools)
    executor = ToolExecutor(
        registry,
        retry_count=config.executor.retry_count,
        timeout=config.executor.timeout_seconds,
        metrics_hook=metrics_hook,
        cancel_on_timeout=config.executor.cancel_on_timeout,
    )
    log_path = log_file_path or config.log_file_path
    audit = JsonlRoleCallLogger(log_path) if log_path else None
    caller = model_caller or ModelRouter(config, tools=registry.get_openai_definitions())
    invoker = RoleInvoker(caller, extractor=ToolCallExtractor(registry), audit=audit)
    orchestrator = ChainOrchestrator(config.roles, invoker, executor)
    return Runtime(
        config=config,
        registry=registry,
        executor=executor,
        invoker=invoker,
        orchestrator=orchestrator,
    )
