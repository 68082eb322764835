"""Line-oriented text document façade."""

from __future__ import annotations

from typing import Optional, Sequence

from doc_engine.commands import CommandResult, EditError, ErrorKind
from doc_engine.document import EditableDocument
from doc_engine.events import EditorBus

from .commands import AppendCommand, DeleteCommand, InsertCommand, ReplaceCommand
from .lines import LineBuffer


class TextDocument(EditableDocument):
    kind = "text"

    def __init__(
        self,
        lines: Optional[Sequence[str]] = None,
        *,
        name: str = "untitled",
        bus: Optional[EditorBus] = None,
        log_enabled: bool = False,
        max_history: int | None = None,
    ) -> None:
        super().__init__(
            name=name, bus=bus, log_enabled=log_enabled, max_history=max_history
        )
        self.buffer = LineBuffer(list(lines or []))

    @classmethod
    def from_text(cls, text: str, *, name: str = "untitled") -> "TextDocument":
        document = cls(name=name)
        document.buffer = LineBuffer.from_text(text)
        return document

    @property
    def lines(self) -> Sequence[str]:
        return self.buffer.snapshot()

    @property
    def line_count(self) -> int:
        return self.buffer.line_count

    def get_content(self) -> str:
        return self.buffer.to_text()

    def append(self, text: str) -> CommandResult:
        return self._run(AppendCommand(self.buffer, text))

    def insert(self, line: int, col: int, text: str) -> CommandResult:
        return self._run(InsertCommand(self.buffer, line, col, text))

    def delete(self, line: int, col: int, length: int) -> CommandResult:
        return self._run(DeleteCommand(self.buffer, line, col, length))

    def replace(self, line: int, col: int, length: int, text: str) -> CommandResult:
        return self._run(ReplaceCommand(self.buffer, line, col, length, text))

    def show(self, start: Optional[int] = None, end: Optional[int] = None) -> str:
        """Render lines ``start..end`` (1-based, inclusive) with line numbers.

        ``end`` is clamped to the last line; omitting both shows everything.
        """

        count = self.buffer.line_count
        if count == 0:
            return "(empty)"
        first = 1 if start is None else start
        last = count if end is None else min(end, count)
        if first < 1 or first > count:
            raise EditError(
                ErrorKind.OUT_OF_RANGE,
                f"start line {first} is outside 1..{count}",
                details={"start": first, "line_count": count},
            )
        if first > last:
            raise EditError(
                ErrorKind.OUT_OF_RANGE,
                "start line is after end line",
                details={"start": first, "end": last},
            )
        width = len(str(count))
        return "\n".join(
            f"{number:>{width}}: {self.buffer.get_line(number - 1)}"
            for number in range(first, last + 1)
        )
