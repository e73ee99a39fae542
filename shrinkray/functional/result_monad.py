#!/usr/bin/env python3

"""
Result Monad

Success/Failure values for computations that may fail without raising.
Option parsers, upload validators and media providers return these so the
request handlers can branch on the outcome and pick an HTTP status.
"""

from typing import TypeVar, Generic, Callable, Optional, Awaitable
from abc import ABC, abstractmethod
from dataclasses import dataclass

T = TypeVar('T')
E = TypeVar('E')

class Result(Generic[T, E], ABC):
    """Abstract base class for Result values."""

    @abstractmethod
    def is_success(self) -> bool:
        pass

    @abstractmethod
    def is_failure(self) -> bool:
        pass

    @abstractmethod
    def get_value(self) -> Optional[T]:
        """Returns the success value if present, None otherwise."""
        pass

    @abstractmethod
    def get_error(self) -> Optional[E]:
        """Returns the error if present, None otherwise."""
        pass

@dataclass(frozen=True)
class Success(Result[T, E]):
    """A successful computation."""
    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def get_value(self) -> Optional[T]:
        return self.value

    def get_error(self) -> Optional[E]:
        return None

    def __str__(self) -> str:
        return f"Success({self.value})"

@dataclass(frozen=True)
class Failure(Result[T, E]):
    """A failed computation carrying an error value."""
    error: E

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def get_value(self) -> Optional[T]:
        return None

    def get_error(self) -> Optional[E]:
        return self.error

    def __str__(self) -> str:
        return f"Failure({self.error})"

async def from_async_callable(
    func: Callable[[], Awaitable[T]],
    error_mapper: Callable[[Exception], E] = None
) -> Result[T, E]:
    """Awaits func and captures any exception as a Failure."""
    try:
        value = await func()
        return Success(value)
    except Exception as e:
        if error_mapper:
            return Failure(error_mapper(e))
        return Failure(str(e))
