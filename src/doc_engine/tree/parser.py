"""Turn XML text into an :class:`XmlElement` tree.

Comments are stripped in a single pass first, then lxml's pull parser
streams start/end events. Character data follows last-write-wins: an
element keeps the last non-blank chunk (trimmed) found directly inside it.
"""

from __future__ import annotations

import re
from typing import List, Optional

from lxml import etree as ET

from doc_engine.commands import EditError, ErrorKind

from .element import XmlElement

# CDATA sections are matched alongside comments so that "<!--" inside them is
# left alone; the first "-->" after "<!--" always closes the comment.
_COMMENT_OR_CDATA = re.compile(r"<!\[CDATA\[.*?\]\]>|<!--.*?-->", re.DOTALL)
_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")


def strip_comments(content: str) -> str:
    """Remove every ``<!-- ... -->`` block, leaving CDATA sections intact."""

    def _replace(match: "re.Match[str]") -> str:
        chunk = match.group(0)
        return chunk if chunk.startswith("<![CDATA[") else ""

    return _COMMENT_OR_CDATA.sub(_replace, content)


def _local(name: str) -> str:
    return ET.QName(name).localname if name.startswith("{") else name


def _last_char_data(node: ET._Element) -> str:
    chunks = [node.text] + [child.tail for child in node]
    for chunk in reversed(chunks):
        if chunk and chunk.strip():
            return chunk.strip()
    return ""


class _TreeBuilder:
    def __init__(self) -> None:
        self.root: Optional[XmlElement] = None
        self._stack: List[XmlElement] = []

    def start(self, node: ET._Element) -> None:
        element = XmlElement(
            _local(node.tag),
            attributes={_local(key): value for key, value in node.attrib.items()},
        )
        if self._stack:
            self._stack[-1].append_child(element)
        elif self.root is None:
            self.root = element
        self._stack.append(element)

    def end(self, node: ET._Element) -> None:
        element = self._stack.pop()
        element.text = _last_char_data(node)

    def feed(self, events) -> None:
        for event, node in events:
            if event == "start":
                self.start(node)
            else:
                self.end(node)


def parse_xml(content: str) -> XmlElement:
    """Parse ``content`` and return the root element.

    Raises
    ------
    EditError
        ``MALFORMED_CONTENT`` when the text is empty or not well-formed.
    """

    cleaned = _DECLARATION.sub("", strip_comments(content), count=1)
    if not cleaned.strip():
        raise EditError(ErrorKind.MALFORMED_CONTENT, "XML content is empty")

    parser = ET.XMLPullParser(
        events=("start", "end"),
        remove_comments=True,
        remove_pis=True,
        resolve_entities=False,
    )
    builder = _TreeBuilder()
    try:
        parser.feed(cleaned.encode("utf-8"))
        builder.feed(parser.read_events())
        parser.close()
        builder.feed(parser.read_events())
    except ET.XMLSyntaxError as exc:
        raise EditError(
            ErrorKind.MALFORMED_CONTENT,
            f"XML is not well-formed: {exc}",
            details={"line": getattr(exc, "lineno", None)},
        ) from exc

    if builder.root is None:
        raise EditError(ErrorKind.MALFORMED_CONTENT, "XML has no root element")
    return builder.root
