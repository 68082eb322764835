"""Validation helpers shared across text commands."""

from __future__ import annotations

from doc_engine.commands import EditError, ErrorKind

from .lines import LineBuffer


def _out_of_range(message: str, **details: object) -> EditError:
    return EditError(ErrorKind.OUT_OF_RANGE, message, details=details)


def ensure_line(buffer: LineBuffer, line: int) -> str:
    """Return the content of 1-based ``line``."""

    if line < 1 or line > buffer.line_count:
        raise _out_of_range(
            f"line {line} is outside 1..{buffer.line_count}",
            line=line,
            line_count=buffer.line_count,
        )
    return buffer.get_line(line - 1)


def ensure_insert_position(buffer: LineBuffer, line: int, col: int) -> None:
    if buffer.line_count == 0:
        if line != 1 or col != 1:
            raise _out_of_range(
                "an empty document only accepts insertion at 1:1", line=line, col=col
            )
        return
    target = ensure_line(buffer, line)
    if col < 1 or col > len(target) + 1:
        raise _out_of_range(
            f"column {col} is outside 1..{len(target) + 1}", line=line, col=col
        )


def ensure_delete_range(buffer: LineBuffer, line: int, col: int, length: int) -> None:
    target = ensure_line(buffer, line)
    if length <= 0:
        raise _out_of_range("length must be positive", length=length)
    if col < 1 or col > len(target):
        raise _out_of_range(
            f"column {col} is outside 1..{len(target)}", line=line, col=col
        )
    if col - 1 + length > len(target):
        raise _out_of_range(
            "range runs past the end of the line",
            line=line,
            col=col,
            length=length,
        )
