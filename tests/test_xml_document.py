from __future__ import annotations

from typing import List

import pytest

from doc_engine import EditError, EditorBus, ErrorKind, XmlDocument
from doc_engine.runtime import telemetry
from doc_engine.tree import DeleteElementCommand, EditTextCommand, XmlElement, parse_xml

LIBRARY = """<library id="root">
    <shelf id="s1">
        <book id="b1">
            <title id="t1">Dune</title>
            <note>no id here<ref id="r1"/></note>
        </book>
        <book id="b2"/>
    </shelf>
    <shelf id="s2"/>
</library>"""


def make_document() -> XmlDocument:
    return XmlDocument.from_text(LIBRARY, name="library.xml")


def child_ids(element: XmlElement) -> List[str]:
    return [child.identifier for child in element.children]


def assert_index_matches_tree(document: XmlDocument) -> None:
    in_tree = [e.identifier for e in document.root.iter() if e.identifier]
    assert len(in_tree) == len(set(in_tree))
    assert sorted(document.tree.identifiers()) == sorted(in_tree)
    for identifier in in_tree:
        assert document.lookup(identifier) is document.root.find(identifier)


def test_empty_document_has_default_root() -> None:
    document = XmlDocument.empty()

    assert document.root.tag == "root"
    assert document.lookup("root") is document.root
    assert document.get_content().endswith('<root id="root"/>\n')


def test_append_child_scenario() -> None:
    document = XmlDocument.empty()

    result = document.append_child("book", "b2", "root", "Title")

    assert result.success
    child = document.root.children[-1]
    assert (child.tag, child.identifier, child.text) == ("book", "b2", "Title")
    assert child.attributes == {"id": "b2"}
    assert child.parent is document.root
    assert document.lookup("b2") is child


def test_edit_id_and_undo_scenario() -> None:
    document = XmlDocument.empty()
    document.append_child("book", "b2", "root", "Title")

    assert document.edit_id("b2", "b3").success
    assert "b2" not in document.tree
    assert document.lookup("b3").attributes["id"] == "b3"

    document.undo()
    assert "b3" not in document.tree
    assert document.lookup("b2").attributes["id"] == "b2"


def test_delete_and_undo_scenario() -> None:
    document = XmlDocument.empty()
    document.append_child("book", "b2", "root", "Title")
    before = document.get_content()

    assert document.delete("b2").success
    assert document.root.children == []
    assert "b2" not in document.tree

    document.undo()
    assert child_ids(document.root) == ["b2"]
    assert document.get_content() == before


def test_insert_before_root_is_illegal() -> None:
    document = XmlDocument.empty()
    before = document.get_content()

    result = document.insert_before("tag", "x", "root", "")

    assert result.error is ErrorKind.ILLEGAL_ROOT_OPERATION
    assert document.get_content() == before
    assert "x" not in document.tree
    assert document.can_undo() is False


def test_insert_before_places_element_ahead_of_target() -> None:
    document = make_document()
    shelf = document.lookup("s1")

    result = document.insert_before("book", "b0", "b2", "Intro")

    assert result.success
    assert child_ids(shelf) == ["b1", "b0", "b2"]
    assert document.lookup("b0").parent is shelf

    document.undo()
    assert child_ids(shelf) == ["b1", "b2"]
    assert "b0" not in document.tree


@pytest.mark.parametrize(
    "args,error",
    [
        (("book", "b1", "b2", ""), ErrorKind.DUPLICATE_IDENTIFIER),
        (("book", "new", "missing", ""), ErrorKind.NOT_FOUND),
        (("book", "new", "root", ""), ErrorKind.ILLEGAL_ROOT_OPERATION),
    ],
)
def test_insert_before_failures(args: tuple, error: ErrorKind) -> None:
    document = make_document()
    before = document.get_content()

    result = document.insert_before(*args)

    assert result.error is error
    assert document.get_content() == before


def test_append_child_failures() -> None:
    document = make_document()

    assert document.append_child("x", "n1", "nope").error is ErrorKind.NOT_FOUND
    assert document.append_child("x", "b1", "s2").error is ErrorKind.DUPLICATE_IDENTIFIER
    assert document.lookup("s2").children == []


def test_append_child_uses_only_the_index() -> None:
    document = make_document()
    shelf = document.lookup("s2")
    document.tree.unregister("s2")

    result = document.append_child("book", "b9", "s2")

    assert result.error is ErrorKind.NOT_FOUND
    assert shelf.children == []


def test_edit_id_failures() -> None:
    document = make_document()

    assert document.edit_id("missing", "z").error is ErrorKind.NOT_FOUND
    assert document.edit_id("root", "z").error is ErrorKind.ILLEGAL_ROOT_OPERATION
    assert document.edit_id("b1", "b2").error is ErrorKind.DUPLICATE_IDENTIFIER
    assert document.lookup("root") is document.root
    assert_index_matches_tree(document)


def test_edit_text_and_undo_restores_empty_previous_text() -> None:
    document = make_document()

    assert document.edit_text("b2", "Fresh").success
    assert document.lookup("b2").text == "Fresh"
    document.undo()
    assert document.lookup("b2").text == ""

    document.edit_text("t1", "")
    assert document.lookup("t1").text == ""
    document.undo()
    assert document.lookup("t1").text == "Dune"


def test_edit_text_missing_element() -> None:
    document = make_document()

    assert document.edit_text("ghost", "x").error is ErrorKind.NOT_FOUND


def test_delete_subtree_and_undo_restores_every_identifier() -> None:
    document = make_document()
    shelf = document.lookup("s1")
    book = document.lookup("b1")

    result = document.delete("b1")

    assert result.success
    assert sorted(result.details["removed"]) == ["b1", "r1", "t1"]
    assert child_ids(shelf) == ["b2"]
    for identifier in ("b1", "t1", "r1"):
        assert identifier not in document.tree
    assert_index_matches_tree(document)

    document.undo()
    assert child_ids(shelf) == ["b1", "b2"]
    assert document.lookup("b1") is book
    assert document.lookup("r1") is book.children[1].children[0]
    assert book.parent is shelf
    assert_index_matches_tree(document)


def test_delete_failures() -> None:
    document = make_document()

    assert document.delete("root").error is ErrorKind.ILLEGAL_ROOT_OPERATION
    assert document.delete("missing").error is ErrorKind.NOT_FOUND


def test_deleted_identifier_can_be_reused_then_undo_in_order() -> None:
    document = make_document()
    original = document.get_content()

    document.delete("b2")
    document.append_child("book", "b2", "s2", "moved")
    assert document.lookup("b2").parent is document.lookup("s2")

    document.undo()
    document.undo()
    assert document.get_content() == original
    assert_index_matches_tree(document)


def test_redo_reapplies_structural_commands() -> None:
    document = make_document()
    document.append_child("book", "b3", "s2", "Three")
    document.edit_id("b3", "b4")
    expected = document.get_content()

    document.undo()
    document.undo()
    assert document.redo() and document.redo()

    assert document.get_content() == expected
    assert_index_matches_tree(document)


def test_identifier_uniqueness_after_command_sequence() -> None:
    document = make_document()
    document.append_child("a", "n1", "s2")
    document.insert_before("a", "n2", "n1")
    document.edit_id("n1", "n3")
    document.append_child("a", "n1", "n3")
    document.delete("s1")
    document.undo()
    document.edit_text("n1", "hello")
    document.insert_before("a", "n3", "n2")

    assert_index_matches_tree(document)


def test_duplicate_identifiers_rejected_on_load() -> None:
    with pytest.raises(EditError) as excinfo:
        XmlDocument.from_text('<a id="x"><b id="x"/></a>')

    assert excinfo.value.kind is ErrorKind.DUPLICATE_IDENTIFIER


def test_get_content_round_trips() -> None:
    document = make_document()
    document.append_child("book", "b5", "s2", "Five & more")

    reparsed = parse_xml(document.get_content())

    assert reparsed.structurally_equal(document.root)


def test_repair_index_reports_divergence() -> None:
    document = make_document()
    document.tree.unregister("t1")
    stray = XmlElement("ghost", identifier="ghost")
    document.tree.register(stray)

    repair = document.repair_index()

    assert repair.added == ("t1",)
    assert repair.dropped == ("ghost",)
    assert_index_matches_tree(document)
    assert document.repair_index().changed is False


def test_render_tree_lists_text_leaves() -> None:
    document = make_document()

    dump = document.render_tree()

    assert dump.splitlines()[0] == 'library [id="root"]'
    assert '"Dune"' in dump


def test_bus_sees_structural_results() -> None:
    bus = EditorBus()
    seen: List[object] = []
    bus.subscribe("command.applied", seen.append)
    bus.subscribe("command.rejected", seen.append)
    document = XmlDocument(name="bus.xml", bus=bus)

    document.append_child("a", "a1", "root")
    document.delete("root")

    assert [(r.label, r.success) for r in seen] == [("append-child", True), ("delete", False)]


@pytest.mark.parametrize("tag", ["", "two words", "1x", "a<b", "ns:book", "{urn:x}book"])
def test_structural_commands_reject_invalid_tags(tag: str) -> None:
    document = make_document()
    before = document.get_content()

    appended = document.append_child(tag, "n1", "s2")
    inserted = document.insert_before(tag, "n2", "b2")

    assert appended.error is ErrorKind.MALFORMED_CONTENT
    assert inserted.error is ErrorKind.MALFORMED_CONTENT
    assert document.get_content() == before
    assert "n1" not in document.tree and "n2" not in document.tree
    assert document.can_undo() is False


def test_text_is_stored_trimmed_so_content_round_trips() -> None:
    document = make_document()

    document.edit_text("b1", "  x ")
    document.append_child("book", "b6", "s2", "\n  padded\t")
    document.insert_before("book", "b7", "b2", "   ")

    assert document.lookup("b1").text == "x"
    assert document.lookup("b6").text == "padded"
    assert document.lookup("b7").text == ""
    assert parse_xml(document.get_content()).structurally_equal(document.root)


def test_repair_index_warns_once_per_identifier() -> None:
    messages: List[str] = []
    telemetry.configure(sink=messages.append, level="DEBUG")
    try:
        document = make_document()
        document.tree.unregister("t1")
        document.tree.unregister("r1")
        document.tree.register(XmlElement("ghost", identifier="ghost"))

        document.repair_index()
    finally:
        telemetry.configure(enabled=False)

    warnings = [line for line in messages if "identifier index repaired" in line]
    assert len(warnings) == 3
    assert sum("WARNING" in line for line in warnings) == 3


def test_revert_without_applied_state_raises() -> None:
    document = make_document()

    with pytest.raises(RuntimeError):
        DeleteElementCommand(document.tree, "b1")._revert()
    with pytest.raises(RuntimeError):
        EditTextCommand(document.tree, "b1", "x")._revert()
    assert document.lookup("b1").parent is document.lookup("s1")
