"""
Tests for table reconstruction module.
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from regionocr.utils.ocr_text import BoundingBox, RecognitionResult, TextFragment
from regionocr.utils.tables import Row, Table, group_rows, reconstruct


def frag(text, x0, y0, x1=None, y1=None):
    """Fragment with a box; right/bottom default to a 10px square."""
    return TextFragment(
        text=text,
        bbox=BoundingBox(x0, y0, x0 + 10 if x1 is None else x1, y0 + 10 if y1 is None else y1)
    )


class TestTableResult:
    """Tests for Row and Table data classes."""

    def test_empty_row_rejected(self):
        """Rows are never empty."""
        with pytest.raises(ValueError):
            Row(fragments=())

    def test_ragged_rows(self):
        """Rows keep their own lengths."""
        table = Table(rows=(
            Row(fragments=(frag("A", 0, 0), frag("B", 20, 0))),
            Row(fragments=(frag("C", 0, 50),)),
        ))

        assert table.to_list() == [["A", "B"], ["C"]]
        assert table.num_rows == 2
        assert table.max_cols == 2

    def test_table_to_dict(self):
        """Table serialization."""
        table = Table(rows=(Row(fragments=(frag("X", 1, 2, 3, 4),)),))

        d = table.to_dict()

        assert d["rows"] == [["X"]]
        assert d["num_rows"] == 1
        assert d["fragments"][0][0]["bbox"] == (1, 2, 3, 4)


class TestGroupRows:
    """Tests for row grouping."""

    def test_scenario_same_row(self):
        """Top edges 2px apart share a row."""
        table = group_rows([frag("A", 0, 0), frag("B", 20, 2)])

        assert table.to_list() == [["A", "B"]]

    def test_scenario_separate_rows(self):
        """A 50px gap starts a new row."""
        table = group_rows([frag("A", 0, 0), frag("B", 0, 50)])

        assert table.to_list() == [["A"], ["B"]]

    def test_scenario_out_of_order_within_row(self):
        """Cells are sorted left to right regardless of input order."""
        table = group_rows([frag("B", 20, 0), frag("A", 0, 1)])

        assert table.to_list() == [["A", "B"]]

    def test_scenario_no_fragments(self):
        """No fragments means no table, not an empty table."""
        assert group_rows([]) is None

    def test_no_table_distinct_from_empty_cell(self):
        """A single empty fragment is still a one-cell table."""
        table = group_rows([frag("", 0, 0)])

        assert table is not None
        assert table.to_list() == [[""]]

    def test_all_within_tolerance(self):
        """Fragments pairwise within tolerance form one row sorted by x."""
        fragments = [frag("c", 300, 4), frag("a", 10, 0), frag("d", 400, 9), frag("b", 150, 6)]

        table = group_rows(fragments)

        assert table.to_list() == [["a", "b", "c", "d"]]

    def test_all_beyond_tolerance(self):
        """Fragments far apart each get a row, in crossing order."""
        fragments = [frag("a", 0, 0), frag("b", 0, 30), frag("c", 0, 70), frag("d", 0, 200)]

        table = group_rows(fragments)

        assert table.to_list() == [["a"], ["b"], ["c"], ["d"]]

    def test_rows_follow_input_order(self):
        """Without presorting, row order is the order boundaries are crossed."""
        table = group_rows([frag("B", 0, 50), frag("A", 0, 0)])

        assert table.to_list() == [["B"], ["A"]]

    def test_tolerance_is_inclusive(self):
        """A difference of exactly the tolerance stays on the row."""
        same = group_rows([frag("A", 0, 0), frag("B", 20, 10)])
        split = group_rows([frag("A", 0, 0), frag("B", 20, 11)])

        assert same.to_list() == [["A", "B"]]
        assert split.to_list() == [["A"], ["B"]]

    def test_reference_not_moved_by_members(self):
        """Joining a row does not shift the row's reference edge."""
        fragments = [frag("a", 0, 0), frag("b", 20, 8), frag("c", 40, 16)]

        table = group_rows(fragments)

        # c is 8px from b but 16px from the reference set by a
        assert table.to_list() == [["a", "b"], ["c"]]

    def test_custom_tolerance(self):
        """Tolerance is configurable."""
        fragments = [frag("a", 0, 0), frag("b", 20, 15)]

        assert group_rows(fragments, tolerance=20).to_list() == [["a", "b"]]
        assert group_rows(fragments, tolerance=5).to_list() == [["a"], ["b"]]

    def test_equal_x_keeps_input_order(self):
        """Sorting by left edge is stable."""
        table = group_rows([frag("first", 5, 0), frag("second", 5, 3), frag("left", 0, 1)])

        assert table.to_list() == [["left", "first", "second"]]

    def test_cell_order_invariant_to_input_order(self):
        """Any permutation of one row's fragments gives the same cells."""
        fragments = [frag("a", 0, 0), frag("b", 50, 2), frag("c", 100, 1)]

        for permutation in ([0, 1, 2], [2, 1, 0], [1, 2, 0], [2, 0, 1]):
            table = group_rows([fragments[i] for i in permutation])
            assert table.to_list() == [["a", "b", "c"]]

    def test_vertical_out_of_order_without_presort(self):
        """Engine order that jumps back up splits an otherwise shared row."""
        fragments = [frag("a", 0, 0), frag("b", 0, 50), frag("c", 40, 2)]

        table = group_rows(fragments)

        assert table.to_list() == [["a"], ["b"], ["c"]]

    def test_vertical_out_of_order_with_presort(self):
        """Presorting by top edge regroups such rows."""
        fragments = [frag("a", 0, 0), frag("b", 0, 50), frag("c", 40, 2)]

        table = group_rows(fragments, presort=True)

        assert table.to_list() == [["a", "c"], ["b"]]

    def test_malformed_fragments_skipped(self):
        """Fragments without a box or with an inverted box are dropped."""
        fragments = [
            TextFragment(text="nobox", bbox=None),
            frag("A", 0, 0),
            TextFragment(text="inverted", bbox=BoundingBox(10, 10, 0, 20)),
            frag("B", 20, 3),
        ]

        table = group_rows(fragments)

        assert table.to_list() == [["A", "B"]]

    def test_only_malformed_fragments(self):
        """If nothing usable remains there is no table."""
        assert group_rows([TextFragment(text="x", bbox=None)]) is None

    def test_input_not_modified(self):
        """The caller's list is left in its original order."""
        fragments = [frag("B", 20, 0), frag("A", 0, 1)]
        snapshot = list(fragments)

        group_rows(fragments, presort=True)

        assert fragments == snapshot

    def test_independent_calls(self):
        """Repeated calls do not accumulate state."""
        first = group_rows([frag("A", 0, 0)])
        second = group_rows([frag("B", 0, 100)])

        assert first.to_list() == [["A"]]
        assert second.to_list() == [["B"]]


class TestReconstruct:
    """Tests for mode dispatch."""

    @pytest.fixture
    def recognition(self):
        return RecognitionResult(
            transcript="Hello\nWorld",
            fragments=(frag("World", 0, 40), frag("Hello", 0, 0))
        )

    def test_text_mode_returns_transcript(self, recognition):
        """Text mode returns the engine transcript verbatim."""
        assert reconstruct(recognition, "text") == "Hello\nWorld"

    def test_table_mode_groups_rows(self, recognition):
        """Table mode groups the fragments."""
        table = reconstruct(recognition, "table")

        assert table.to_list() == [["World"], ["Hello"]]

    def test_table_mode_presort(self, recognition):
        """Presorting is passed through."""
        table = reconstruct(recognition, "table", presort=True)

        assert table.to_list() == [["Hello"], ["World"]]

    def test_table_mode_no_fragments(self):
        """Table mode on an empty result is no table."""
        assert reconstruct(RecognitionResult(transcript=""), "table") is None

    def test_unknown_mode(self, recognition):
        """Only text and table are valid."""
        with pytest.raises(ValueError):
            reconstruct(recognition, "grid")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
