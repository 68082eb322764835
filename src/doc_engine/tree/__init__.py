"""XML element tree, identifier index, codec, and structural commands."""

from .commands import (
    AppendChildCommand,
    DeleteElementCommand,
    EditIdCommand,
    EditTextCommand,
    InsertBeforeCommand,
)
from .document import XmlDocument
from .element import XmlElement
from .model import IndexRepair, XmlTree
from .parser import parse_xml, strip_comments
from .serializer import XML_DECLARATION, escape, render_tree, to_xml

__all__ = [
    "AppendChildCommand",
    "DeleteElementCommand",
    "EditIdCommand",
    "EditTextCommand",
    "IndexRepair",
    "InsertBeforeCommand",
    "XML_DECLARATION",
    "XmlDocument",
    "XmlElement",
    "XmlTree",
    "escape",
    "parse_xml",
    "render_tree",
    "strip_comments",
    "to_xml",
]
