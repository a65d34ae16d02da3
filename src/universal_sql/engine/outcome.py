"""Explicit success/failure values for engine attempts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=BaseException)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful attempt carrying its value."""

    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed attempt carrying its error."""

    error: E
