"""Line storage for text documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence


@dataclass(slots=True)
class LineBuffer:
    """Mutable list-of-lines storage addressed with 0-based indexes.

    Commands translate the public 1-based coordinates before calling in.
    An empty buffer holds zero lines; there is no implicit trailing newline.
    """

    _lines: List[str] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> "LineBuffer":
        if not text:
            return cls()
        return cls(_lines=text.split("\n"))

    def snapshot(self) -> Sequence[str]:
        """Return the current lines without exposing internal mutability."""

        return tuple(self._lines)

    def to_text(self) -> str:
        return "\n".join(self._lines)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def get_line(self, index: int) -> str:
        return self._lines[index]

    def set_line(self, index: int, value: str) -> None:
        self._lines[index] = value

    def update_lines(self, start: int, end: int, new_lines: Iterable[str]) -> None:
        """Replace ``[start:end]`` with ``new_lines`` in place."""

        self._lines[start:end] = list(new_lines)

    def extend(self, new_lines: Iterable[str]) -> None:
        self._lines.extend(new_lines)

    def truncate(self, count: int) -> None:
        """Drop the last ``count`` lines."""

        if count > 0:
            del self._lines[-count:]
