"""Structural commands over an :class:`XmlTree`.

Every command validates against the identifier index before it touches the
tree, so a refused command leaves both tree and index exactly as they were.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from lxml import etree as ET

from doc_engine.commands import BaseCommand, EditError, ErrorKind

from .element import XmlElement
from .model import XmlTree


def _ensure_tag(tag: str) -> None:
    # Parsed tags are local names, so prefixed or Clark-notation names would
    # not survive a save and reload.
    try:
        valid = ":" not in tag and "{" not in tag and bool(ET.QName(tag).localname)
    except ValueError:
        valid = False
    if not valid:
        raise EditError(
            ErrorKind.MALFORMED_CONTENT,
            f"'{tag}' is not a valid element name",
            details={"tag": tag},
        )


def _normalize_text(text: str) -> str:
    """Character data is stored trimmed, the way the parser reads it back."""

    return text.strip()


def _executed(value: Optional[Any], label: str) -> Any:
    if value is None:
        raise RuntimeError(f"{label} has no applied state to revert")
    return value


def _position_in_parent(element: XmlElement) -> tuple[XmlElement, int]:
    parent = element.parent
    if parent is None:
        raise EditError(
            ErrorKind.ILLEGAL_ROOT_OPERATION,
            f"<{element.tag}> has no parent",
            details={"id": element.identifier},
        )
    try:
        return parent, parent.index_of(element)
    except ValueError as exc:
        raise EditError(
            ErrorKind.NOT_FOUND,
            f"<{element.tag}> is missing from its parent's children",
            details={"id": element.identifier},
        ) from exc


class _CreateElementCommand(BaseCommand):
    """Shared undo for commands that add one fresh element."""

    def __init__(self, tree: XmlTree, tag: str, new_id: str, text: str) -> None:
        super().__init__()
        self.tree = tree
        self.tag = tag
        self.new_id = new_id
        self.text = _normalize_text(text)
        self._element: Optional[XmlElement] = None

    def _new_element(self) -> XmlElement:
        return XmlElement(self.tag, identifier=self.new_id, text=self.text)

    def _revert(self) -> None:
        element = _executed(self._element, self.label)
        parent = element.parent
        if parent is not None:
            parent.remove_child(element)
        self.tree.unregister(self.new_id)
        self._element = None


class InsertBeforeCommand(_CreateElementCommand):
    label = "insert-before"

    def __init__(
        self, tree: XmlTree, tag: str, new_id: str, target_id: str, text: str = ""
    ) -> None:
        super().__init__(tree, tag, new_id, text)
        self.target_id = target_id

    def describe(self) -> str:
        return f"insert-before {self.tag} {self.new_id} {self.target_id}"

    def _apply(self) -> Dict[str, Any]:
        self.tree.ensure_available(self.new_id)
        target = self.tree.require(self.target_id)
        self.tree.ensure_not_root(target, "insert before")
        parent, index = _position_in_parent(target)
        _ensure_tag(self.tag)

        element = self._new_element()
        parent.insert_child(index, element)
        self.tree.register(element)
        self._element = element
        return {"id": self.new_id, "parent": parent.identifier, "index": index}


class AppendChildCommand(_CreateElementCommand):
    label = "append-child"

    def __init__(
        self, tree: XmlTree, tag: str, new_id: str, parent_id: str, text: str = ""
    ) -> None:
        super().__init__(tree, tag, new_id, text)
        self.parent_id = parent_id

    def describe(self) -> str:
        return f"append-child {self.tag} {self.new_id} {self.parent_id}"

    def _apply(self) -> Dict[str, Any]:
        parent = self.tree.require(self.parent_id)
        self.tree.ensure_available(self.new_id)
        _ensure_tag(self.tag)

        element = self._new_element()
        parent.append_child(element)
        self.tree.register(element)
        self._element = element
        return {
            "id": self.new_id,
            "parent": self.parent_id,
            "index": len(parent.children) - 1,
        }


class EditIdCommand(BaseCommand):
    label = "edit-id"

    def __init__(self, tree: XmlTree, old_id: str, new_id: str) -> None:
        super().__init__()
        self.tree = tree
        self.old_id = old_id
        self.new_id = new_id
        self._element: Optional[XmlElement] = None

    def describe(self) -> str:
        return f"edit-id {self.old_id} {self.new_id}"

    def _apply(self) -> Dict[str, Any]:
        element = self.tree.require(self.old_id)
        self.tree.ensure_not_root(element, "rename")
        self.tree.ensure_available(self.new_id)

        self._rekey(element, self.old_id, self.new_id)
        self._element = element
        return {"old_id": self.old_id, "new_id": self.new_id}

    def _revert(self) -> None:
        self._rekey(_executed(self._element, self.label), self.new_id, self.old_id)
        self._element = None

    def _rekey(self, element: XmlElement, old: str, new: str) -> None:
        self.tree.unregister(old)
        element.identifier = new
        self.tree.register(element)


class EditTextCommand(BaseCommand):
    label = "edit-text"

    def __init__(self, tree: XmlTree, element_id: str, text: str) -> None:
        super().__init__()
        self.tree = tree
        self.element_id = element_id
        self.text = _normalize_text(text)
        self._element: Optional[XmlElement] = None
        self._previous_text: Optional[str] = None

    def describe(self) -> str:
        return f"edit-text {self.element_id} {self.text!r}"

    def _apply(self) -> Dict[str, Any]:
        element = self.tree.require(self.element_id)
        self._previous_text = element.text
        element.text = self.text
        self._element = element
        return {"id": self.element_id, "previous": self._previous_text}

    def _revert(self) -> None:
        # None means "nothing captured"; an empty string is a real previous value.
        element = _executed(self._element, self.label)
        element.text = _executed(self._previous_text, self.label)
        self._element = None
        self._previous_text = None


class DeleteElementCommand(BaseCommand):
    """Detach an element with its whole subtree; undo splices it back in place."""

    label = "delete"

    def __init__(self, tree: XmlTree, element_id: str) -> None:
        super().__init__()
        self.tree = tree
        self.element_id = element_id
        self._element: Optional[XmlElement] = None
        self._parent: Optional[XmlElement] = None
        self._index = -1
        self._removed: Dict[str, XmlElement] = {}

    def describe(self) -> str:
        return f"delete {self.element_id}"

    def _apply(self) -> Dict[str, Any]:
        element = self.tree.require(self.element_id)
        self.tree.ensure_not_root(element, "delete")
        parent, index = _position_in_parent(element)

        removed = {
            node.identifier: node for node in element.iter() if node.identifier
        }
        parent.remove_child(element)
        for identifier in removed:
            self.tree.unregister(identifier)

        self._element, self._parent, self._index = element, parent, index
        self._removed = removed
        return {"id": self.element_id, "index": index, "removed": sorted(removed)}

    def _revert(self) -> None:
        parent = _executed(self._parent, self.label)
        parent.insert_child(self._index, _executed(self._element, self.label))
        for element in self._removed.values():
            self.tree.register(element)
        self._element, self._parent, self._index = None, None, -1
        self._removed = {}
