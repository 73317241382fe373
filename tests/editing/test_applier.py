"""Tests for the EditApplier."""

import random

import pytest

from format_applier.editing.applier import ApplyResult, EditApplier
from format_applier.editing.document import Document
from format_applier.editing.edits import Edit, EditBatch
from format_applier.errors import EncodingAlignment, RangeOutOfBounds, RangeOverlap


class RecordingDocument(Document):
    """Document that remembers every splice it was asked to make."""

    def __init__(self, text: str):
        super().__init__(text)
        self.splices: list[list[tuple[int, int, str]]] = []

    def splice(self, replacements):
        replacements = list(replacements)
        self.splices.append(replacements)
        return super().splice(replacements)


def _apply_forward(data: bytes, edits: list[Edit]) -> bytes:
    """Apply edits front to back, tracking the cumulative size delta."""
    out = bytearray(data)
    shift = 0
    for edit in sorted(edits, key=lambda e: (e.offset, e.length)):
        start = edit.offset + shift
        new = edit.encoded_text("utf-8")
        out[start:start + edit.length] = new
        shift += len(new) - edit.length
    return bytes(out)


def _random_batch(rng: random.Random, size: int) -> list[Edit]:
    """Non-overlapping edits at distinct offsets, in shuffled order."""
    count = rng.randint(1, 6)
    points = sorted(rng.sample(range(size + 1), count * 2))
    edits = []
    for i in range(count):
        start, end = points[2 * i], points[2 * i + 1]
        length = 0 if rng.random() < 0.25 else end - start
        text = "".join(rng.choice("xyz \n") for _ in range(rng.randint(0, 3)))
        edits.append(Edit(start, length, text or None))
    rng.shuffle(edits)
    return edits


class TestSingleEdit:
    def test_collapse_whitespace(self):
        doc = Document("int   x;")
        result = EditApplier().apply(doc, 8, EditBatch([Edit(3, 3, " ")]))
        assert doc.text == "int x;"
        assert result.document is doc
        # Cursor at end of line follows the two-byte shrink
        assert result.cursor == 6
        assert result.edits_applied == 1

    def test_zero_length_insertion_consumes_nothing(self):
        doc = Document("ab")
        EditApplier().apply(doc, None, EditBatch([Edit(1, 0, "XYZ")]))
        assert doc.text == "aXYZb"

    def test_pure_deletion(self):
        doc = Document("a  b")
        EditApplier().apply(doc, None, EditBatch([Edit(1, 1)]))
        assert doc.text == "a b"

    def test_edit_end(self):
        assert Edit(1, 2).end == 3
        assert Edit(1, 0, "x").end == 1

    def test_multibyte_replacement(self):
        doc = Document("x=é;")
        # Replace é (bytes 2-3) with a three-byte char
        EditApplier().apply(doc, None, EditBatch([Edit(2, 2, "€")]))
        assert doc.text == "x=€;"


class TestOrdering:
    def test_descending_offsets_applied_first(self):
        doc = RecordingDocument("0123456789abcdef")
        batch = EditBatch([Edit(4, 2, "<>"), Edit(10, 2, "[long]")])
        EditApplier().apply(doc, None, batch)

        # One splice, offset-10 edit first, both spans in original coordinates
        assert doc.splices == [[(10, 12, "[long]"), (4, 6, "<>")]]
        assert doc.text == "0123<>6789[long]cdef"

    def test_same_offset_deletion_then_insertion(self):
        doc = RecordingDocument("0123456789")
        batch = EditBatch([Edit(5, 0, "X"), Edit(5, 2)])
        EditApplier().apply(doc, None, batch)
        assert doc.splices == [[(5, 7, ""), (5, 5, "X")]]
        assert doc.text == "01234X789"

    def test_many_edits_single_splice(self):
        text = "a  " * 500
        doc = RecordingDocument(text)
        edits = [Edit(i * 3 + 1, 2, " ") for i in range(500)]
        EditApplier().apply(doc, None, EditBatch(edits))
        assert len(doc.splices) == 1
        assert doc.text == "a " * 500

    def test_adjacent_edits_allowed(self):
        doc = Document("aabbcc")
        EditApplier().apply(doc, None, EditBatch([Edit(2, 2, "B"), Edit(0, 2, "A")]))
        assert doc.text == "ABcc"

    def test_batch_ordered_helper(self):
        batch = EditBatch([Edit(1, 0), Edit(5, 1), Edit(5, 3), Edit(0, 1)])
        assert batch.ordered() == [Edit(5, 3), Edit(5, 1), Edit(1, 0), Edit(0, 1)]

    @pytest.mark.parametrize("seed", range(20))
    def test_matches_forward_application_with_delta_tracking(self, seed):
        rng = random.Random(seed)
        text = "".join(rng.choice("abc def\n") for _ in range(40))
        edits = _random_batch(rng, len(text))

        expected = _apply_forward(text.encode("utf-8"), edits)
        doc = Document(text)
        EditApplier().apply(doc, None, EditBatch(list(edits)))
        assert doc.encode() == expected


class TestValidation:
    def test_overlap_rejected(self):
        doc = Document("0123456789")
        with pytest.raises(RangeOverlap):
            EditApplier().apply(doc, None, EditBatch([Edit(2, 4, "x"), Edit(5, 2, "y")]))
        assert doc.text == "0123456789"

    def test_same_offset_non_empty_ranges_overlap(self):
        doc = Document("0123456789")
        with pytest.raises(RangeOverlap):
            EditApplier().apply(doc, None, EditBatch([Edit(3, 1), Edit(3, 2)]))

    def test_insertion_inside_deletion_overlaps(self):
        doc = Document("0123456789")
        with pytest.raises(RangeOverlap):
            EditApplier().apply(doc, None, EditBatch([Edit(2, 4), Edit(4, 0, "x")]))

    def test_out_of_bounds_rejected(self):
        doc = Document("abc")
        with pytest.raises(RangeOutOfBounds):
            EditApplier().apply(doc, None, EditBatch([Edit(0, 1, "z"), Edit(2, 5)]))
        assert doc.text == "abc"

    def test_edit_bisecting_character_rejected(self):
        doc = Document("a€b")
        with pytest.raises(EncodingAlignment):
            EditApplier().apply(doc, None, EditBatch([Edit(4, 1, "B"), Edit(2, 1, "x")]))
        # Nothing applied, not even the aligned edit
        assert doc.text == "a€b"


class TestCursor:
    def test_relocated_cursor_wins(self):
        doc = Document("int   x;")
        batch = EditBatch([Edit(3, 3, " ")], cursor=4)
        result = EditApplier().apply(doc, 8, batch)
        assert result.cursor == 4

    def test_relocated_cursor_translated_against_result(self):
        doc = Document("é  =1;")
        batch = EditBatch([Edit(2, 2, " ")], cursor=3)
        result = EditApplier().apply(doc, 0, batch)
        assert doc.text == "é =1;"
        assert result.cursor == 2

    def test_relocated_cursor_mid_character_rejected(self):
        doc = Document("a  €")
        batch = EditBatch([Edit(1, 2, " ")], cursor=3)
        with pytest.raises(EncodingAlignment):
            EditApplier().apply(doc, 0, batch)
        assert doc.text == "a  €"

    def test_cursor_before_edit_unchanged(self):
        doc = Document("ab   c")
        result = EditApplier().apply(doc, 1, EditBatch([Edit(2, 3, " ")]))
        assert result.cursor == 1

    def test_cursor_inside_removed_span_moves_to_start(self):
        doc = Document("ab   c")
        result = EditApplier().apply(doc, 3, EditBatch([Edit(2, 3, " ")]))
        assert result.cursor == 2

    def test_cursor_without_edits(self):
        doc = Document("éx")
        result = EditApplier().apply(doc, 2, EditBatch())
        assert result.cursor == 1
        assert result.edits_applied == 0

    def test_no_cursor(self):
        doc = Document("abc")
        result = EditApplier().apply(doc, None, EditBatch([Edit(0, 1, "z")]))
        assert result.cursor is None


class TestApplyResult:
    def test_incomplete_flag_forwarded(self):
        doc = Document("x")
        result = EditApplier().apply(doc, None, EditBatch(incomplete=True))
        assert isinstance(result, ApplyResult)
        assert result.incomplete is True
