"""Reversible mutations over a :class:`LineBuffer`.

Coordinates are 1-based. Each command keeps only the state it needs to
reverse itself: the original line it rewrote and how many lines it put in
that line's place.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from doc_engine.commands import BaseCommand, EditError

from .lines import LineBuffer
from .validation import ensure_delete_range, ensure_insert_position


class AppendCommand(BaseCommand):
    """Append ``text`` after the last line; embedded newlines start extra lines."""

    label = "append"

    def __init__(self, buffer: LineBuffer, text: str) -> None:
        super().__init__()
        self.buffer = buffer
        self.text = text
        self._appended = 0

    def describe(self) -> str:
        return f"append {self.text!r}"

    def _apply(self) -> Dict[str, Any]:
        new_lines = self.text.split("\n")
        self.buffer.extend(new_lines)
        self._appended = len(new_lines)
        return {"line": self.buffer.line_count - self._appended + 1, "text": self.text}

    def _revert(self) -> None:
        self.buffer.truncate(self._appended)
        self._appended = 0


class InsertCommand(BaseCommand):
    """Splice ``text`` into ``line`` at ``col``, splitting the line on newlines."""

    label = "insert"

    def __init__(self, buffer: LineBuffer, line: int, col: int, text: str) -> None:
        super().__init__()
        self.buffer = buffer
        self.line = line
        self.col = col
        self.text = text
        self._previous_line: Optional[str] = None
        self._inserted = 0

    def describe(self) -> str:
        return f"insert {self.line}:{self.col} {self.text!r}"

    def _apply(self) -> Dict[str, Any]:
        ensure_insert_position(self.buffer, self.line, self.col)
        index = self.line - 1
        created = self.buffer.line_count == 0
        original = "" if created else self.buffer.get_line(index)
        prefix, suffix = original[: self.col - 1], original[self.col - 1 :]

        fragments = self.text.split("\n")
        if len(fragments) == 1:
            new_lines: List[str] = [prefix + self.text + suffix]
        else:
            new_lines = [prefix + fragments[0], *fragments[1:-1], fragments[-1] + suffix]

        self.buffer.update_lines(index, index if created else index + 1, new_lines)
        self._previous_line = None if created else original
        self._inserted = len(new_lines)
        return {"line": self.line, "col": self.col, "lines": self._inserted}

    def _revert(self) -> None:
        index = self.line - 1
        restored = [] if self._previous_line is None else [self._previous_line]
        self.buffer.update_lines(index, index + self._inserted, restored)
        self._previous_line = None
        self._inserted = 0


class DeleteCommand(BaseCommand):
    """Remove ``length`` characters from ``line`` starting at ``col``."""

    label = "delete"

    def __init__(self, buffer: LineBuffer, line: int, col: int, length: int) -> None:
        super().__init__()
        self.buffer = buffer
        self.line = line
        self.col = col
        self.length = length
        self._previous_line: Optional[str] = None

    def describe(self) -> str:
        return f"delete {self.line}:{self.col} x{self.length}"

    def _apply(self) -> Dict[str, Any]:
        ensure_delete_range(self.buffer, self.line, self.col, self.length)
        index = self.line - 1
        original = self.buffer.get_line(index)
        start = self.col - 1
        self.buffer.set_line(index, original[:start] + original[start + self.length :])
        self._previous_line = original
        return {
            "line": self.line,
            "col": self.col,
            "removed": original[start : start + self.length],
        }

    def _revert(self) -> None:
        # Restoring the whole line keeps undo exact regardless of the span.
        if self._previous_line is None:
            raise RuntimeError("delete has no applied state to revert")
        self.buffer.set_line(self.line - 1, self._previous_line)
        self._previous_line = None


class ReplaceCommand(BaseCommand):
    """Delete then insert at the same coordinates; undone in reverse order.

    The delete bounds are checked against the line as it is before the
    replace. The insert step always fits afterwards, since ``col`` never
    exceeds the shortened line length plus one.
    """

    label = "replace"

    def __init__(
        self, buffer: LineBuffer, line: int, col: int, length: int, text: str
    ) -> None:
        super().__init__()
        self.buffer = buffer
        self.line = line
        self.col = col
        self.length = length
        self.text = text
        self._delete = DeleteCommand(buffer, line, col, length)
        self._insert = InsertCommand(buffer, line, col, text)

    def describe(self) -> str:
        return f"replace {self.line}:{self.col} x{self.length} {self.text!r}"

    def _apply(self) -> Dict[str, Any]:
        ensure_delete_range(self.buffer, self.line, self.col, self.length)
        deleted = self._delete.execute().raise_for_error()
        try:
            inserted = self._insert.execute().raise_for_error()
        except EditError:
            self._delete.undo()
            raise
        return {
            "line": self.line,
            "col": self.col,
            "removed": deleted.details.get("removed", ""),
            "lines": inserted.details.get("lines", 1),
        }

    def _revert(self) -> None:
        self._insert.undo()
        self._delete.undo()
