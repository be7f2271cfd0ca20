"""rolechain CLI — validate configs, run roles and chains, and query role-call logs."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

# Ensure project root is importable when running as script
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def parse_inputs(pairs: list[str]) -> dict[str, Any]:
    """Parse ``key=value`` pairs.  Values that decode as JSON are decoded."""
    inputs: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"expected key=value, got {pair!r}")
        try:
            inputs[key] = json.loads(value)
        except ValueError:
            inputs[key] = value
    return inputs


def _load(path: str | None) -> Any:
    from rolechain.config_loader import load_config
    from rolechain.logging import configure_logging

    config = load_config(path)
    configure_logging(config.logging.level, config.logging.format)
    return config


def cmd_validate(args: argparse.Namespace) -> None:
    """Validate a rolechain.yaml config."""
    from rolechain.tools.registry import create_default_registry

    config = _load(args.path or args.config)
    registry = create_default_registry(config.tools)
    print("Config OK")
    print(f"  Providers: {', '.join(config.providers.configured()) or '(none)'}")
    print(f"  Roles:     {', '.join(sorted(config.roles)) or '(none)'}")
    print(f"  Chains:    {', '.join(sorted(config.chains)) or '(none)'}")
    print(f"  Tools:     {', '.join(registry.list_tools())}")
    print(f"  Role log:  {config.log_file_path or '(disabled)'}")


def cmd_role(args: argparse.Namespace) -> None:
    """Run a single role, optionally as an interactive session."""
    from rolechain.app import build_runtime
    from rolechain.errors import RoleNotFoundError

    config = _load(args.path or args.config)
    runtime = build_runtime(config, log_file_path=args.log_file)
    inputs = parse_inputs(args.inputs)

    if args.interactive:
        from rolechain.session import InteractiveSession
        from rolechain.ui.terminal import TerminalUI

        session = InteractiveSession(
            TerminalUI(editor=args.editor),
            config.roles,
            runtime.invoker,
            runtime.executor,
            dry_run=args.dry_run,
            yes=args.yes,
            max_iterations=args.max_iterations,
            transcript_path=args.transcript,
        )
        asyncio.run(session.run(args.role, inputs))
        return

    if not args.role:
        print("Error: a role name is required outside --interactive", file=sys.stderr)
        sys.exit(1)
    role = config.roles.get(args.role)
    if role is None:
        raise RoleNotFoundError(args.role)

    result = asyncio.run(runtime.invoker.invoke(role, inputs))
    if result.tool_call is None:
        print(result.raw)
        return
    print(json.dumps({"tool_call": result.tool_call.model_dump(exclude_none=True)}, indent=2))
    if args.dry_run:
        return
    output = asyncio.run(runtime.executor.execute(result.tool_call))
    print(output.model_dump_json(indent=2))
    if not output.success:
        sys.exit(1)


def cmd_chain(args: argparse.Namespace) -> None:
    """Run a configured chain and print the final context."""
    from rolechain.errors import ConfigError

    config = _load(args.config)
    chain = config.chains.get(args.chain)
    if chain is None:
        raise ConfigError(f"Chain not found: {args.chain}")

    from rolechain.app import build_runtime

    runtime = build_runtime(config, log_file_path=args.log_file)
    context = asyncio.run(runtime.orchestrator.run(chain, parse_inputs(args.inputs)))
    if args.json:
        print(json.dumps(context, indent=2, default=str))
        return
    for key, value in context.items():
        text = value if isinstance(value, str) else json.dumps(value, default=str)
        print(f"{key}: {text}")


def cmd_tools(args: argparse.Namespace) -> None:
    """List built-in and configured tools."""
    from rolechain.config_loader import default_config_path
    from rolechain.tools.registry import create_default_registry

    path = args.config or default_config_path()
    configured = _load(path).tools if Path(path).exists() else []
    registry = create_default_registry(configured)
    for schema in registry.schemas():
        params = ", ".join(
            f"{a.name}: {a.type}{'' if a.required else '?'}" for a in schema.arguments
        )
        print(f"{schema.name}({params})")
        if schema.description:
            print(f"    {schema.description}")


def cmd_logs(args: argparse.Namespace) -> None:
    """Query role-call logs."""
    from rolechain.audit.query import query_by_role, tail

    log_path = args.log_path
    if not Path(log_path).exists():
        print(f"No role call log found at {log_path}", file=sys.stderr)
        sys.exit(1)

    if args.role:
        entries = query_by_role(log_path, args.role, limit=args.limit)
    else:
        entries = tail(log_path, n=args.limit)

    if not entries:
        print("No matching role calls.")
        return

    for entry in entries:
        record = json.loads(entry.model_dump_json())
        if args.json:
            print(json.dumps(record))
        else:
            ts = record["timestamp"][:19]
            status = "error" if record.get("error") else "ok"
            output = record["output"].replace("\n", " ")[:60]
            print(f"{ts}  [{record['role_name']:16s}]  {status:5s}  {output}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rolechain",
        description="rolechain — run LLM roles and role chains with tool calls",
    )
    parser.add_argument(
        "--config", "-c", default=None, help="Path to rolechain.yaml (or $ROLECHAIN_CONFIG)"
    )
    sub = parser.add_subparsers(dest="command")

    # validate
    p_val = sub.add_parser("validate", help="Validate a rolechain.yaml config")
    p_val.add_argument("path", nargs="?", default=None, help="Path to config")
    p_val.set_defaults(func=cmd_validate)

    # role
    p_role = sub.add_parser("role", help="Run a single role")
    p_role.add_argument("role", nargs="?", default=None, help="Role name")
    p_role.add_argument("inputs", nargs="*", help="Prompt inputs as key=value")
    p_role.add_argument("--interactive", "-i", action="store_true", help="Review tool calls")
    p_role.add_argument("--dry-run", action="store_true", help="Show tool calls without running them")
    p_role.add_argument("--yes", "-y", action="store_true", help="Approve every tool call")
    p_role.add_argument("--max-iterations", type=int, default=10, help="Tool-call review bound")
    p_role.add_argument("--transcript", default=None, help="Write the session transcript here")
    p_role.add_argument("--editor", default=None, help="Editor command (default $EDITOR)")
    p_role.add_argument("--log-file", default=None, help="Role-call log path (overrides config)")
    p_role.set_defaults(func=cmd_role)

    # chain
    p_chain = sub.add_parser("chain", help="Run a configured chain")
    p_chain.add_argument("chain", help="Chain name")
    p_chain.add_argument("inputs", nargs="*", help="Initial context as key=value")
    p_chain.add_argument("--json", action="store_true", help="Print the context as JSON")
    p_chain.add_argument("--log-file", default=None, help="Role-call log path (overrides config)")
    p_chain.set_defaults(func=cmd_chain)

    # tools
    p_tools = sub.add_parser("tools", help="List available tools")
    p_tools.set_defaults(func=cmd_tools)

    # logs
    p_logs = sub.add_parser("logs", help="Query role-call logs")
    p_logs.add_argument("log_path", help="Path to role-call JSONL file")
    p_logs.add_argument("--role", "-r", help="Filter by role name")
    p_logs.add_argument("--limit", "-n", type=int, default=20, help="Max entries")
    p_logs.add_argument("--json", action="store_true", help="Output raw JSON")
    p_logs.set_defaults(func=cmd_logs)

    return parser


def main(argv: list[str] | None = None) -> None:
    from rolechain.errors import RolechainError

    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except FileNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except (RolechainError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
