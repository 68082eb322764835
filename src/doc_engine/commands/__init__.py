"""Command contract and undo/redo history."""

from .base import BaseCommand, Command, CommandResult, EditError, ErrorKind
from .history import UndoHistory

__all__ = [
    "BaseCommand",
    "Command",
    "CommandResult",
    "EditError",
    "ErrorKind",
    "UndoHistory",
]
