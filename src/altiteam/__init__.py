"""AltiTeam: project management with a conversational chat core."""

__version__ = "1.0.0"
