"""Result types for railway-oriented programming.

Every storage and service operation returns a Result instead of raising, so
validation failures, missing keys and backend outages flow back to the caller
as data.

Usage:
    result = await service.check_rate_limit(
        key="user:42", limit=10, window=timedelta(seconds=60), cost=1
    )
    match result:
        case Success(value=decision):
            print(decision.allowed, decision.remaining)
        case Failure(error=err):
            print(err.code)
"""

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Successful operation result.

    Attributes:
        value: The successful result value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Failed operation result.

    Attributes:
        error: The error that occurred.
    """

    error: E


Result: TypeAlias = Success[T] | Failure[E]
