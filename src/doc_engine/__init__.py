"""Reversible, position-addressed editing for text buffers and XML trees."""

from .commands import CommandResult, EditError, ErrorKind, UndoHistory
from .events import EditorBus
from .loader import dump_document, load_document, split_log_marker
from .text import TextDocument
from .tree import XmlDocument, XmlElement

__all__ = [
    "CommandResult",
    "EditError",
    "EditorBus",
    "ErrorKind",
    "TextDocument",
    "UndoHistory",
    "XmlDocument",
    "XmlElement",
    "dump_document",
    "load_document",
    "split_log_marker",
]

__version__ = "0.1.0"
