"""Element nodes for the XML tree."""

from __future__ import annotations

import weakref
from typing import Dict, Iterator, List, Mapping, Optional


class XmlElement:
    """Tag, identifier, attributes, a single text payload, and owned children.

    The parent link is a weak reference used only for navigation; ownership
    flows from parent to child through ``children``. The identifier is kept
    mirrored to the ``"id"`` attribute.
    """

    __slots__ = (
        "tag",
        "attributes",
        "text",
        "children",
        "_identifier",
        "_parent",
        "__weakref__",
    )

    def __init__(
        self,
        tag: str,
        *,
        identifier: str = "",
        attributes: Optional[Mapping[str, str]] = None,
        text: str = "",
    ) -> None:
        self.tag = tag
        self.attributes: Dict[str, str] = dict(attributes or {})
        self.text = text
        self.children: List[XmlElement] = []
        self._parent: Optional[weakref.ReferenceType[XmlElement]] = None
        self._identifier = self.attributes.get("id", "")
        if identifier:
            self.identifier = identifier

    @property
    def identifier(self) -> str:
        return self._identifier

    @identifier.setter
    def identifier(self, value: str) -> None:
        self._identifier = value
        if value:
            self.attributes["id"] = value
        else:
            self.attributes.pop("id", None)

    @property
    def parent(self) -> Optional["XmlElement"]:
        return self._parent() if self._parent is not None else None

    def is_root(self) -> bool:
        return self.parent is None

    def index_of(self, child: "XmlElement") -> int:
        """Position of ``child`` among this element's children, by identity."""

        for index, candidate in enumerate(self.children):
            if candidate is child:
                return index
        raise ValueError(f"<{child.tag}> is not a child of <{self.tag}>")

    def append_child(self, child: "XmlElement") -> None:
        self.insert_child(len(self.children), child)

    def insert_child(self, index: int, child: "XmlElement") -> None:
        if child._parent is not None:
            raise ValueError(f"<{child.tag}> already has a parent")
        self.children.insert(index, child)
        child._parent = weakref.ref(self)

    def remove_child(self, child: "XmlElement") -> int:
        """Detach ``child`` and return the index it occupied."""

        index = self.index_of(child)
        del self.children[index]
        child._parent = None
        return index

    def iter(self) -> Iterator["XmlElement"]:
        """Depth-first, pre-order walk over this element and its descendants."""

        yield self
        for child in self.children:
            yield from child.iter()

    def find(self, identifier: str) -> Optional["XmlElement"]:
        """Scan the subtree for ``identifier`` without consulting any index."""

        for element in self.iter():
            if element.identifier == identifier:
                return element
        return None

    def structurally_equal(self, other: "XmlElement") -> bool:
        """Compare tag, attributes, text, and children (in order) recursively."""

        if (
            self.tag != other.tag
            or self.attributes != other.attributes
            or self.text != other.text
            or len(self.children) != len(other.children)
        ):
            return False
        return all(
            mine.structurally_equal(theirs)
            for mine, theirs in zip(self.children, other.children)
        )

    def __repr__(self) -> str:
        ident = f" id={self._identifier!r}" if self._identifier else ""
        return f"<XmlElement {self.tag}{ident} children={len(self.children)}>"
