"""Linear undo/redo history shared by text and XML documents."""

from __future__ import annotations

from typing import List, Optional

from .base import Command


class UndoHistory:
    """Two stacks of executed commands; pushing a new command drops the redo branch."""

    def __init__(self, *, max_history: int | None = None) -> None:
        if max_history is not None and max_history < 1:
            raise ValueError("max_history must be >= 1")
        self._max_history = max_history
        self._undo: List[Command] = []
        self._redo: List[Command] = []

    def push(self, command: Command) -> None:
        self._undo.append(command)
        self._redo.clear()
        self._trim()

    def can_undo(self) -> bool:
        return bool(self._undo)

    def can_redo(self) -> bool:
        return bool(self._redo)

    def peek_undo(self) -> Optional[Command]:
        return self._undo[-1] if self._undo else None

    def peek_redo(self) -> Optional[Command]:
        return self._redo[-1] if self._redo else None

    def undone(self) -> None:
        """Move the top undo entry onto the redo stack."""

        self._redo.append(self._undo.pop())

    def redone(self) -> None:
        """Move the top redo entry back onto the undo stack."""

        self._undo.append(self._redo.pop())
        self._trim()

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def _trim(self) -> None:
        if self._max_history is None:
            return
        overflow = len(self._undo) - self._max_history
        if overflow > 0:
            del self._undo[0:overflow]
