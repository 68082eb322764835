"""Render an :class:`XmlElement` tree as XML text or as a diagnostic tree dump."""

from __future__ import annotations

from typing import List

from .element import XmlElement

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'
DEFAULT_INDENT = "    "

_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def escape(value: str) -> str:
    for raw, entity in _ESCAPES:
        value = value.replace(raw, entity)
    return value


def to_xml(
    root: XmlElement, *, indent: str = DEFAULT_INDENT, declaration: bool = True
) -> str:
    """Serialize ``root`` depth-first, one ``indent`` per level.

    Elements without text or children self-close; otherwise the text sits on
    its own line ahead of the children.
    """

    out: List[str] = [XML_DECLARATION] if declaration else []
    _emit(root, 0, indent, out)
    return "".join(out)


def _emit(element: XmlElement, depth: int, indent: str, out: List[str]) -> None:
    pad = indent * depth
    attrs = "".join(
        f' {name}="{escape(value)}"' for name, value in element.attributes.items()
    )
    if not element.text and not element.children:
        out.append(f"{pad}<{element.tag}{attrs}/>\n")
        return
    out.append(f"{pad}<{element.tag}{attrs}>\n")
    if element.text:
        out.append(f"{pad}{indent}{escape(element.text)}\n")
    for child in element.children:
        _emit(child, depth + 1, indent, out)
    out.append(f"{pad}</{element.tag}>\n")


def render_tree(root: XmlElement) -> str:
    """ASCII tree view: identifier and attributes in brackets, text as a quoted leaf."""

    lines: List[str] = []
    _render(root, "", True, True, lines)
    return "\n".join(lines)


def _label(element: XmlElement) -> str:
    parts = []
    if element.identifier:
        parts.append(f'id="{element.identifier}"')
    parts.extend(
        f'{name}="{escape(value)}"'
        for name, value in element.attributes.items()
        if name != "id"
    )
    tag = element.tag or "?"
    return f"{tag} [{', '.join(parts)}]" if parts else tag


def _render(
    element: XmlElement, prefix: str, is_last: bool, is_top: bool, lines: List[str]
) -> None:
    connector = "" if is_top else ("└── " if is_last else "├── ")
    lines.append(f"{prefix}{connector}{_label(element)}")
    child_prefix = prefix if is_top else prefix + ("    " if is_last else "│   ")
    if element.text:
        leaf = "├── " if element.children else "└── "
        lines.append(f'{child_prefix}{leaf}"{escape(element.text)}"')
    for position, child in enumerate(element.children):
        _render(child, child_prefix, position == len(element.children) - 1, False, lines)
