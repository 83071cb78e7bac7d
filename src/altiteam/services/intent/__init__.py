"""Intent routing for incoming chat messages."""
from altiteam.services.intent.router import (
    DecisionKind,
    IntentRouter,
    RouterDecision,
    WorkflowCommand,
    intent_router,
    parse_command,
)

__all__ = [
    "DecisionKind",
    "IntentRouter",
    "RouterDecision",
    "WorkflowCommand",
    "intent_router",
    "parse_command",
]
