"""Line-oriented text buffer and its commands."""

from .commands import AppendCommand, DeleteCommand, InsertCommand, ReplaceCommand
from .document import TextDocument
from .lines import LineBuffer
from .validation import ensure_delete_range, ensure_insert_position, ensure_line

__all__ = [
    "AppendCommand",
    "DeleteCommand",
    "InsertCommand",
    "LineBuffer",
    "ReplaceCommand",
    "TextDocument",
    "ensure_delete_range",
    "ensure_insert_position",
    "ensure_line",
]
