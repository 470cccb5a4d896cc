"""Diagnostics latch: the first error message since it was last read."""

from __future__ import annotations


class Diagnostics:
    """Single-slot, first-wins, consume-once error banner."""

    __slots__ = ("_message",)

    def __init__(self) -> None:
        self._message: str | None = None

    def report(self, message: str) -> None:
        """Latch *message* unless an earlier one is still unread."""
        if self._message is None:
            self._message = message

    def peek(self) -> str | None:
        return self._message

    def take(self) -> str | None:
        """Return the latched message and clear the slot."""
        message, self._message = self._message, None
        return message

    def __bool__(self) -> bool:
        return self._message is not None

    def __repr__(self) -> str:
        return f"<Diagnostics {self._message!r}>"
