"""Explicit success/failure values for operations with expected failures.

Used where a missing record is an ordinary outcome rather than an error
(e.g. an unknown pricing plan), so callers branch on the variant instead
of catching exceptions::

    match calculator.estimate(...):
        case Ok(estimate):
            ...
        case Err(message):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    message: str

    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        raise ValueError(f"Called unwrap() on Err: {self.message}")


Result = Ok[T] | Err
