from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from stamp_iam.core.errors import FailureCategory

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T


@dataclass(frozen=True, slots=True)
class Err:
    """
    Failed outcome.

    - category: coarse failure category used for logging
    - message: diagnostic text, never shown to end users
    """

    category: FailureCategory
    message: str


Result = Ok[T] | Err

__all__ = ["Err", "Ok", "Result"]
