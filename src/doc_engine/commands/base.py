"""Command contract, error kinds, and structured results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable


class ErrorKind(str, Enum):
    """Reasons a command can refuse to apply."""

    OUT_OF_RANGE = "out_of_range"
    DUPLICATE_IDENTIFIER = "duplicate_identifier"
    NOT_FOUND = "not_found"
    ILLEGAL_ROOT_OPERATION = "illegal_root_operation"
    MALFORMED_CONTENT = "malformed_content"


class EditError(RuntimeError):
    """Raised by validation helpers when a mutation cannot be applied."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = dict(details or {})


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of ``Command.execute``.

    Attributes
    ----------
    success
        Whether the command mutated the document.
    label
        Command label (``"insert"``, ``"append-child"``, ...).
    message
        Human-readable summary suitable for an observer's log line.
    error
        Failure reason; ``None`` on success.
    details
        Structured arguments and diagnostics for caller logic.
    """

    success: bool
    label: str
    message: str = ""
    error: Optional[ErrorKind] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(
        cls, label: str, message: str = "", details: Optional[Mapping[str, Any]] = None
    ) -> "CommandResult":
        return cls(True, label, message, None, dict(details or {}))

    @classmethod
    def failed(cls, label: str, error: EditError) -> "CommandResult":
        return cls(False, label, error.message, error.kind, dict(error.details))

    def raise_for_error(self) -> "CommandResult":
        """Re-raise the failure as an :class:`EditError`; return self on success."""

        if not self.success:
            if self.error is None:
                raise RuntimeError(self.message)
            raise EditError(self.error, self.message, details=self.details)
        return self


@runtime_checkable
class Command(Protocol):
    """Capability every mutation exposes to a document's history."""

    label: str

    def execute(self) -> CommandResult:
        ...

    def undo(self) -> bool:
        ...

    def is_executed(self) -> bool:
        ...


class BaseCommand:
    """Template for commands: validate-then-mutate in ``_apply``, reverse in ``_revert``.

    ``_apply`` must raise :class:`EditError` before touching the document when
    its input is invalid; ``execute`` turns that into a failed result and the
    command stays unexecuted.
    """

    label: str = "command"

    def __init__(self) -> None:
        self._executed = False

    def execute(self) -> CommandResult:
        if self._executed:
            return CommandResult(False, self.label, "command is already applied")
        try:
            details = self._apply()
        except EditError as exc:
            return CommandResult.failed(self.label, exc)
        self._executed = True
        return CommandResult.ok(self.label, self.describe(), details)

    def undo(self) -> bool:
        if not self._executed:
            return False
        self._revert()
        self._executed = False
        return True

    def is_executed(self) -> bool:
        return self._executed

    def describe(self) -> str:
        return self.label

    def _apply(self) -> Optional[Dict[str, Any]]:  # pragma: no cover - abstract override
        raise NotImplementedError

    def _revert(self) -> None:  # pragma: no cover - abstract override
        raise NotImplementedError


__all__ = [
    "BaseCommand",
    "Command",
    "CommandResult",
    "EditError",
    "ErrorKind",
]
