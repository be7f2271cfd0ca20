"""Exceptions for rolechain."""


class RolechainError(Exception):
    """Base exception for rolechain."""

    pass


class ConfigError(RolechainError):
    """Bad or missing configuration.  Fatal at startup."""

    pass


class UIError(RolechainError):
    """The interactive UI could not collect a required answer."""

    pass


# ── Role / chain ─────────────────────────────────────────────────────


class RoleError(RolechainError):
    """Role or chain misconfiguration or execution failure."""

    pass


class RoleNotFoundError(RoleError):
    def __init__(self, role_name: str):
        super().__init__(f"Role not found: {role_name}")
        self.role_name = role_name


class TemplateError(RoleError):
    """A template could not be parsed or rendered."""

    pass


class ModelCallError(RoleError):
    """The model backend failed (transport or API error)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


# ── Tools ────────────────────────────────────────────────────────────


class ToolError(RolechainError):
    """Tool validation, lookup, or execution errors."""

    def __init__(self, tool_name: str, message: str):
        super().__init__(message)
        self.tool_name = tool_name


class ToolNotFoundError(ToolError):
    def __init__(self, tool_name: str):
        super().__init__(tool_name, f"Tool '{tool_name}' not found in registry")


class ImplementationNotFoundError(ToolError):
    def __init__(self, tool_name: str):
        super().__init__(tool_name, f"Tool implementation not found: {tool_name}")


class MissingArgumentError(ToolError):
    def __init__(self, tool_name: str, argument: str):
        super().__init__(
            tool_name, f"Missing required argument '{argument}' for tool '{tool_name}'"
        )
        self.argument = argument


class InvalidArgumentError(ToolError):
    def __init__(self, tool_name: str, argument: str, expected: str):
        super().__init__(
            tool_name, f"Argument '{argument}' for tool '{tool_name}' must be {expected}"
        )
        self.argument = argument
        self.expected = expected


class ToolExecutionError(ToolError):
    def __init__(self, tool_name: str, message: str, output: str = ""):
        super().__init__(tool_name, f"Tool '{tool_name}' failed: {message}")
        self.output = output


class ToolTimeoutError(ToolError):
    def __init__(self, tool_name: str, timeout: float):
        super().__init__(tool_name, f"Tool {tool_name} timed out after {timeout}s")
        self.timeout = timeout


# ── Extraction ───────────────────────────────────────────────────────


class ExtractionMiss(RolechainError):
    """No tool call was found in model output.  Expected, not a failure."""

    def __init__(self, message: str = "no valid tool-call found"):
        super().__init__(message)
