"""Exceptions raised while loading OpenAPI specs and executing tools."""


class OpenAPIToolsError(Exception):
    """Base class for all openapi2tools errors."""


class ToolNotFoundError(OpenAPIToolsError, LookupError):
    """Raised when an action names a tool with no registered request."""

    def __init__(self, tool_name: str):
        super().__init__(f"No request found for action {tool_name}")
        self.tool_name = tool_name


class SpecParseError(OpenAPIToolsError, ValueError):
    """A spec file could not be decoded as YAML or JSON."""

    def __init__(self, file_name: str, reason: str):
        super().__init__(f"Failed to parse specification {file_name}: {reason}")
        self.file_name = file_name
