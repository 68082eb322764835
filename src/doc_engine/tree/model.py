"""XML tree ownership plus the identifier index kept in step with it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from doc_engine.commands import EditError, ErrorKind
from doc_engine.runtime import telemetry

from .element import XmlElement


@dataclass(slots=True)
class IndexRepair:
    """Identifiers :meth:`XmlTree.reindex` had to add or drop."""

    added: Tuple[str, ...] = ()
    dropped: Tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.added or self.dropped)


class XmlTree:
    """Owns the root element and maps identifiers to elements.

    The index is the single source of truth for identifier lookups. Commands
    register and unregister identifiers as they change tree shape; any
    divergence is a bug and is only mended through :meth:`reindex`.
    """

    def __init__(self, root: XmlElement) -> None:
        if root.parent is not None:
            raise ValueError("the root element cannot have a parent")
        self.root = root
        self._index: Dict[str, XmlElement] = {}
        for element in root.iter():
            if not element.identifier:
                continue
            if element.identifier in self._index:
                raise EditError(
                    ErrorKind.DUPLICATE_IDENTIFIER,
                    f"identifier '{element.identifier}' appears more than once",
                    details={"id": element.identifier},
                )
            self._index[element.identifier] = element

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._index

    def __len__(self) -> int:
        return len(self._index)

    def identifiers(self) -> Iterator[str]:
        return iter(self._index)

    def lookup(self, identifier: str) -> Optional[XmlElement]:
        return self._index.get(identifier)

    def require(self, identifier: str) -> XmlElement:
        element = self._index.get(identifier)
        if element is None:
            raise EditError(
                ErrorKind.NOT_FOUND,
                f"no element with id '{identifier}'",
                details={"id": identifier},
            )
        return element

    def ensure_available(self, identifier: str) -> None:
        if identifier in self._index:
            raise EditError(
                ErrorKind.DUPLICATE_IDENTIFIER,
                f"id '{identifier}' is already in use",
                details={"id": identifier},
            )

    def ensure_not_root(self, element: XmlElement, action: str) -> None:
        if element is self.root:
            raise EditError(
                ErrorKind.ILLEGAL_ROOT_OPERATION,
                f"cannot {action} the root element",
                details={"id": element.identifier, "action": action},
            )

    def register(self, element: XmlElement) -> None:
        if element.identifier:
            self._index[element.identifier] = element

    def unregister(self, identifier: str) -> None:
        self._index.pop(identifier, None)

    def reindex(self) -> IndexRepair:
        """Rebuild the index from tree shape and report what had diverged."""

        rebuilt: Dict[str, XmlElement] = {}
        for element in self.root.iter():
            if element.identifier and element.identifier not in rebuilt:
                rebuilt[element.identifier] = element
        added = tuple(
            ident for ident, element in rebuilt.items()
            if self._index.get(ident) is not element
        )
        dropped = tuple(ident for ident in self._index if ident not in rebuilt)
        repair = IndexRepair(added=added, dropped=dropped)
        log = telemetry.get_logger("doc_engine.tree")
        for ident in added:
            log.warning("identifier index repaired: added '{}'", ident)
        for ident in dropped:
            log.warning("identifier index repaired: dropped '{}'", ident)
        self._index = rebuilt
        return repair
