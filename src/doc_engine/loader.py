"""Bridges between stored file content and documents.

The ``# log`` marker line belongs to the stored form only: it is stripped on
load (turning the document's log flag on) and put back by
:func:`dump_document`.
"""

from __future__ import annotations

from typing import Literal, Optional, Tuple, Union

from doc_engine.commands import EditError
from doc_engine.runtime import telemetry

from .text import TextDocument
from .tree import XmlDocument, XmlElement

LOG_MARKER = "# log"
PLACEHOLDER_TAG = "parse-error"
PLACEHOLDER_ID = "no-id"

Document = Union[TextDocument, XmlDocument]
DocumentKind = Literal["text", "xml"]


def split_log_marker(content: str) -> Tuple[bool, str]:
    """Return ``(has_marker, content_without_marker)``."""

    first, newline, rest = content.partition("\n")
    if first.strip() == LOG_MARKER:
        return True, rest
    return False, content


def guess_kind(name: str) -> DocumentKind:
    return "xml" if name.lower().endswith(".xml") else "text"


def load_document(
    content: str,
    *,
    name: str = "untitled",
    kind: Optional[DocumentKind] = None,
    recover: bool = False,
) -> Document:
    """Build a document from stored ``content``.

    With ``recover=True`` an unparsable XML body yields a document holding
    only a ``<parse-error id="no-id"/>`` root instead of raising.
    """

    log_enabled, body = split_log_marker(content)
    resolved = kind or guess_kind(name)
    document: Document
    if resolved == "text":
        document = TextDocument.from_text(body, name=name)
    elif not body.strip():
        document = XmlDocument.empty(name=name)
    else:
        try:
            document = XmlDocument.from_text(body, name=name)
        except EditError as exc:
            if not recover:
                raise
            telemetry.record_event(
                "load.recovered",
                level="warning",
                data={"document": name, "reason": exc.message},
            )
            placeholder = XmlElement(PLACEHOLDER_TAG, identifier=PLACEHOLDER_ID)
            document = XmlDocument(placeholder, name=name)
    document.set_log_enabled(log_enabled)
    document.mark_modified(False)
    return document


def dump_document(document: Document) -> str:
    """Stored form of ``document``, with the log marker when its flag is set."""

    content = document.get_content()
    if document.is_log_enabled():
        return f"{LOG_MARKER}\n{content}"
    return content
