"""Helpers for keeping personal and secret values out of logs and responses."""

from __future__ import annotations

from typing import Generic, TypeVar

T = TypeVar("T")

MASK = "***"


class Sensitive(Generic[T]):
    """Wrapper marking a value as sensitive.

    ``str()`` and ``repr()`` never expose the wrapped value; the logging
    pipeline replaces it with a redaction marker. Call :meth:`reveal`
    where the raw value is genuinely needed.
    """

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    def reveal(self) -> T:
        return self._value

    def __repr__(self) -> str:
        return f"Sensitive({MASK})"

    def __str__(self) -> str:
        return MASK

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Sensitive):
            return bool(self._value == other._value)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)


def mask_email(email: str | None) -> str | None:
    """Mask the local part of an email address.

    Keeps the first two characters and the domain::

        >>> mask_email("jane.doe@clinic.ae")
        'ja******@clinic.ae'
        >>> mask_email("jo@clinic.ae")
        '***@clinic.ae'
    """
    if not email:
        return email
    at = email.find("@")
    if at < 0:
        return MASK
    if at <= 2:
        return MASK + email[at:]
    return email[:2] + "*" * (at - 2) + email[at:]
