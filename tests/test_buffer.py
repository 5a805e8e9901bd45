"""Tests for the edit-logged text buffer and offset rebasing."""

import pytest

from bbstyle.buffer import Affinity, Edit, TextBuffer


class TestEditMap:
    """Single-edit offset mapping."""

    def test_offset_before_edit_unchanged(self) -> None:
        edit = Edit(position=5, removed=3, inserted=0)
        assert edit.map(2, Affinity.BEFORE) == 2

    def test_offset_after_deletion_shifts_left(self) -> None:
        edit = Edit(position=2, removed=3, inserted=0)
        assert edit.map(7, Affinity.BEFORE) == 4

    def test_offset_after_insertion_shifts_right(self) -> None:
        edit = Edit(position=2, removed=0, inserted=4)
        assert edit.map(3, Affinity.BEFORE) == 7

    def test_offset_at_insertion_point(self) -> None:
        edit = Edit(position=2, removed=0, inserted=4)
        assert edit.map(2, Affinity.BEFORE) == 2
        assert edit.map(2, Affinity.AFTER) == 6

    def test_offset_inside_deleted_range_collapses(self) -> None:
        edit = Edit(position=2, removed=5, inserted=0)
        assert edit.map(4, Affinity.BEFORE) == 2

    def test_offset_at_end_of_replaced_range(self) -> None:
        edit = Edit(position=0, removed=7, inserted=9)
        assert edit.map(7, Affinity.AFTER) == 9
        assert edit.map(0, Affinity.BEFORE) == 0


class TestTextBuffer:
    """Buffer edits and the edit log."""

    def test_delete(self) -> None:
        buf = TextBuffer("ab[b]cd")
        buf.delete(2, 5)
        assert buf.text == "abcd"
        assert len(buf) == 4
        assert buf.revision == 1

    def test_insert(self) -> None:
        buf = TextBuffer("ad")
        buf.insert(1, "bc", origin=3)
        assert str(buf) == "abcd"
        assert buf.edits == (Edit(1, 0, 2, 3),)

    def test_replace(self) -> None:
        buf = TextBuffer("id-1 here")
        buf.replace(0, 4, "Room")
        assert buf.text == "Room here"

    def test_noop_edit_not_logged(self) -> None:
        buf = TextBuffer("abc")
        buf.insert(1, "")
        assert buf.revision == 0

    @pytest.mark.parametrize(("start", "end"), [(-1, 0), (2, 1), (0, 4)])
    def test_out_of_range_raises(self, start: int, end: int) -> None:
        buf = TextBuffer("abc")
        with pytest.raises(ValueError, match="outside buffer"):
            buf.replace(start, end, "x")

    def test_find_and_slice(self) -> None:
        buf = TextBuffer("a[b]c[d]")
        assert buf.find("[", 2) == 5
        assert buf.find("z") == -1
        assert buf.slice(1, 4) == "[b]"


class TestRebase:
    """Mapping offsets through several edits."""

    def test_rebase_through_deletions(self) -> None:
        buf = TextBuffer("[b]hi[/b] there")
        rev = buf.revision
        buf.delete(0, 3)
        buf.delete(2, 6)
        assert buf.text == "hi there"
        assert buf.rebase(9, rev, Affinity.BEFORE) == 2

    def test_rebase_since_later_revision(self) -> None:
        buf = TextBuffer("xx[i]y")
        buf.delete(0, 2)
        rev = buf.revision
        buf.delete(0, 3)
        assert buf.rebase(3, rev, Affinity.BEFORE) == 0

    def test_callable_affinity_chosen_per_edit(self) -> None:
        buf = TextBuffer("")
        rev = buf.revision
        buf.insert(0, "AA", origin=0)
        buf.insert(0, "B", origin=5)

        def affinity(edit: Edit) -> Affinity:
            return Affinity.AFTER if edit.origin == 0 else Affinity.BEFORE

        # After "AA" (moves past it), then "B" lands at 0 so the offset shifts
        assert buf.text == "BAA"
        assert buf.rebase(0, rev, affinity) == 3
