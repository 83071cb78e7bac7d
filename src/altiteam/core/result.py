"""Success/failure union returned by the repository layer.

Repositories never raise across their boundary; callers branch on
``result.success`` instead.
"""
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass
class Success(Generic[T]):
    """Successful outcome carrying ``data``."""
    data: T
    success: bool = True


@dataclass
class Failure:
    """Failed outcome carrying an ``error``."""
    error: Exception
    success: bool = False

    @property
    def message(self) -> str:
        return str(self.error)


Result = Union[Success[T], Failure]


def success(data: T) -> Success[T]:
    return Success(data=data)


def failure(error: Union[Exception, str]) -> Failure:
    if isinstance(error, str):
        error = ValueError(error)
    return Failure(error=error)


def is_success(result: "Result") -> bool:
    return result.success is True


def is_failure(result: "Result") -> bool:
    return result.success is False
