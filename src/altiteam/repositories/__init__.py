"""Repository layer: access-controlled CRUD over the domain entities."""
from .memory import (
    InMemoryRepositories,
    InMemoryRepository,
    NotFoundError,
    get_repositories,
    reset_repositories,
)

__all__ = [
    "InMemoryRepositories",
    "InMemoryRepository",
    "NotFoundError",
    "get_repositories",
    "reset_repositories",
]
