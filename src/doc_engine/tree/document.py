"""XML document façade: a tree, its identifier index, and an undo history."""

from __future__ import annotations

from typing import Optional

from doc_engine.commands import CommandResult
from doc_engine.document import EditableDocument
from doc_engine.events import EditorBus

from .commands import (
    AppendChildCommand,
    DeleteElementCommand,
    EditIdCommand,
    EditTextCommand,
    InsertBeforeCommand,
)
from .element import XmlElement
from .model import IndexRepair, XmlTree
from .parser import parse_xml
from .serializer import render_tree, to_xml

DEFAULT_ROOT_TAG = "root"
DEFAULT_ROOT_ID = "root"


class XmlDocument(EditableDocument):
    kind = "xml"

    def __init__(
        self,
        root: Optional[XmlElement] = None,
        *,
        name: str = "untitled.xml",
        bus: Optional[EditorBus] = None,
        log_enabled: bool = False,
        max_history: int | None = None,
    ) -> None:
        super().__init__(
            name=name, bus=bus, log_enabled=log_enabled, max_history=max_history
        )
        if root is None:
            root = XmlElement(DEFAULT_ROOT_TAG, identifier=DEFAULT_ROOT_ID)
        self.tree = XmlTree(root)

    @classmethod
    def from_text(cls, content: str, *, name: str = "untitled.xml") -> "XmlDocument":
        """Parse ``content``; raises ``EditError`` when it is malformed."""

        return cls(parse_xml(content), name=name)

    @classmethod
    def empty(cls, *, name: str = "untitled.xml") -> "XmlDocument":
        return cls(name=name)

    @property
    def root(self) -> XmlElement:
        return self.tree.root

    def lookup(self, identifier: str) -> Optional[XmlElement]:
        return self.tree.lookup(identifier)

    def get_content(self) -> str:
        return to_xml(self.tree.root)

    def render_tree(self) -> str:
        return render_tree(self.tree.root)

    def insert_before(
        self, tag: str, new_id: str, target_id: str, text: str = ""
    ) -> CommandResult:
        return self._run(InsertBeforeCommand(self.tree, tag, new_id, target_id, text))

    def append_child(
        self, tag: str, new_id: str, parent_id: str, text: str = ""
    ) -> CommandResult:
        return self._run(AppendChildCommand(self.tree, tag, new_id, parent_id, text))

    def edit_id(self, old_id: str, new_id: str) -> CommandResult:
        return self._run(EditIdCommand(self.tree, old_id, new_id))

    def edit_text(self, element_id: str, text: str) -> CommandResult:
        return self._run(EditTextCommand(self.tree, element_id, text))

    def delete(self, element_id: str) -> CommandResult:
        return self._run(DeleteElementCommand(self.tree, element_id))

    def repair_index(self) -> IndexRepair:
        """Explicit consistency repair; never invoked by the commands themselves."""

        return self.tree.reindex()
