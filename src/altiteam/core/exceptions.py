"""Error taxonomy for the chat core.

Errors never cross the HTTP boundary as stack traces: the API layer flattens
them into short messages and logs the details.
"""
from typing import List, Optional


class AltiTeamError(Exception):
    """Base class for all AltiTeam errors."""


class ConfigurationError(AltiTeamError):
    """Required configuration (e.g. model credentials) is missing."""


class ModelCallError(AltiTeamError):
    """The model provider returned an error or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamTimeoutError(AltiTeamError):
    """An external call (model or tool) exceeded its configured timeout."""


class ToolNotFoundError(AltiTeamError, KeyError):
    """A tool name is not present in the registry."""

    def __init__(self, name: str):
        super().__init__(f"Tool '{name}' not found in registry")
        self.name = name

    def __str__(self) -> str:
        return self.args[0]


class ToolValidationError(AltiTeamError):
    """Tool arguments do not conform to the tool's advertised input schema."""

    def __init__(self, name: str, errors: List[str]):
        super().__init__(f"Invalid arguments for '{name}': {'; '.join(errors)}")
        self.name = name
        self.errors = errors
