"""Shared façade for editable documents: history, dirty flag, and event wiring."""

from __future__ import annotations

from typing import Optional

from doc_engine.runtime import telemetry

from .commands import Command, CommandResult, UndoHistory
from .events import EditorBus


class EditableDocument:
    """Base class both document kinds inherit.

    Every mutation goes through :meth:`_run`: the command is executed and,
    only if it applied, pushed onto the undo stack (which drops any redo
    history). Failed commands leave the document and both stacks untouched.
    """

    kind: str = "document"

    def __init__(
        self,
        *,
        name: str = "untitled",
        bus: Optional[EditorBus] = None,
        log_enabled: bool = False,
        max_history: int | None = None,
    ) -> None:
        self.name = name
        self.bus = bus or EditorBus()
        self.history = UndoHistory(max_history=max_history)
        self._modified = False
        self._log_enabled = log_enabled
        self.logger = telemetry.get_logger(f"doc_engine.{self.kind}")

    # ------------------------------------------------------------- state flags

    def is_modified(self) -> bool:
        return self._modified

    def mark_modified(self, modified: bool) -> None:
        self._modified = bool(modified)

    def is_log_enabled(self) -> bool:
        return self._log_enabled

    def set_log_enabled(self, enabled: bool) -> None:
        if self._log_enabled == bool(enabled):
            return
        self._log_enabled = bool(enabled)
        self._modified = True

    def get_content(self) -> str:  # pragma: no cover - abstract override
        raise NotImplementedError

    # ----------------------------------------------------------------- history

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    def undo(self) -> bool:
        command = self.history.peek_undo()
        if command is None:
            return False
        with telemetry.span(
            f"{self.kind}::undo",
            component=True,
            metadata={"document": self.name, "command": command.label},
        ):
            command.undo()
            self.history.undone()
        self._modified = True
        self.bus.emit("history.undo", command.label)
        return True

    def redo(self) -> bool:
        command = self.history.peek_redo()
        if command is None:
            return False
        with telemetry.span(
            f"{self.kind}::redo",
            component=True,
            metadata={"document": self.name, "command": command.label},
        ) as handle:
            result = command.execute()
            if not result.success:
                handle.cancel(result.message)
                return False
            self.history.redone()
        self._modified = True
        self.bus.emit("history.redo", command.label)
        return True

    # ---------------------------------------------------------------- internals

    def _run(self, command: Command) -> CommandResult:
        with telemetry.span(
            f"{self.kind}::{command.label}",
            component=True,
            metadata={"document": self.name},
        ) as handle:
            result = command.execute()
            handle.add_metadata("success", result.success)

        if not result.success:
            telemetry.record_event(
                "command.rejected",
                level="debug",
                data={
                    "document": self.name,
                    "command": command.label,
                    "error": result.error.value if result.error else None,
                    "reason": result.message,
                },
            )
            self.bus.emit("command.rejected", result)
            return result

        self.history.push(command)
        self._modified = True
        self.bus.emit("command.applied", result)
        return result
