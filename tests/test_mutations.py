"""
Tests for structural board mutations.

Covers:
    - item operations   : add / remove / move / update / complete / reorder
    - column operations : add / remove / rename / move
    - bulk operations   : clone / merge / archive_done
"""

import pytest

from kanban_vault import mutations
from kanban_vault.codec import parse_board
from kanban_vault.errors import (
    ConflictError,
    InputFormatError,
    NotFoundError,
    OutOfBoundsError,
)
from kanban_vault.schema import Board, Column, Item


def texts(board, column):
    return [i.text for i in board.get_column(column).items]


def make_board(*names):
    return Board(columns=[Column(name=n) for n in names])


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Items
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestAddItem:

    def test_appends_to_end(self, sample_board):
        item = mutations.add_item(sample_board, "To Do", "Task 5")
        assert texts(sample_board, "To Do") == ["Task 1", "Task 2", "Task 5"]
        assert item.completed is False

    def test_completed_flag(self, sample_board):
        item = mutations.add_item(sample_board, "Done", "Shipped", completed=True)
        assert item.completed is True

    def test_text_trimmed(self, sample_board):
        mutations.add_item(sample_board, "To Do", "  padded  ")
        assert texts(sample_board, "To Do")[-1] == "padded"

    def test_missing_column(self, sample_board):
        with pytest.raises(NotFoundError) as exc_info:
            mutations.add_item(sample_board, "Nope", "x")
        assert exc_info.value.alternatives == ["To Do", "Doing", "Done"]

    def test_injection_rejected_and_board_unchanged(self, sample_board):
        before = sample_board.to_dict()
        with pytest.raises(InputFormatError):
            mutations.add_item(sample_board, "To Do", "x\n## Injected")
        assert sample_board.to_dict() == before


class TestRemoveItem:

    def test_removes_item(self, sample_board):
        removed = mutations.remove_item(sample_board, "To Do", "Task 1")
        assert removed.text == "Task 1"
        assert texts(sample_board, "To Do") == ["Task 2"]

    def test_first_match_only(self):
        board = parse_board("## A\n- [ ] dup\n- [x] dup\n")
        removed = mutations.remove_item(board, "A", "dup")
        assert removed.completed is False
        assert [(i.text, i.completed) for i in board.columns[0].items] == [("dup", True)]

    def test_missing_item(self, sample_board):
        with pytest.raises(NotFoundError) as exc_info:
            mutations.remove_item(sample_board, "To Do", "Task 9")
        assert exc_info.value.entity == "item"
        assert exc_info.value.alternatives == ["Task 1", "Task 2"]

    def test_missing_column(self, sample_board):
        with pytest.raises(NotFoundError):
            mutations.remove_item(sample_board, "Nope", "Task 1")

    def test_add_then_remove_restores_board(self, sample_board):
        before = sample_board.to_dict()
        mutations.add_item(sample_board, "Doing", "Temp")
        mutations.remove_item(sample_board, "Doing", "Temp")
        assert sample_board.to_dict() == before


class TestMoveItem:

    def test_moves_to_end_of_target(self, sample_board):
        item = mutations.move_item(sample_board, "Task 1", "To Do", "Done")
        assert texts(sample_board, "To Do") == ["Task 2"]
        assert texts(sample_board, "Done") == ["Task 4", "Task 1"]
        assert item.completed is False

    def test_item_unchanged(self, sample_board):
        mutations.move_item(sample_board, "Task 4", "Done", "To Do")
        assert sample_board.get_column("To Do").items[-1].completed is True

    def test_missing_target_leaves_source(self, sample_board):
        with pytest.raises(NotFoundError):
            mutations.move_item(sample_board, "Task 1", "To Do", "Nope")
        assert texts(sample_board, "To Do") == ["Task 1", "Task 2"]

    def test_missing_item(self, sample_board):
        with pytest.raises(NotFoundError):
            mutations.move_item(sample_board, "Ghost", "To Do", "Done")

    def test_same_column_moves_to_end(self, sample_board):
        mutations.move_item(sample_board, "Task 1", "To Do", "To Do")
        assert texts(sample_board, "To Do") == ["Task 2", "Task 1"]


class TestUpdateItem:

    def test_text_replaced(self, sample_board):
        item = mutations.update_item(sample_board, "Done", "Task 4", "Task Four")
        assert item.text == "Task Four"
        assert item.completed is True

    def test_metadata_kept(self):
        board = Board(columns=[Column("A", [Item("x", metadata={"tags": ["a"]})])])
        mutations.update_item(board, "A", "x", "y")
        assert board.columns[0].items[0].metadata == {"tags": ["a"]}

    def test_new_text_validated(self, sample_board):
        with pytest.raises(InputFormatError):
            mutations.update_item(sample_board, "To Do", "Task 1", "")
        assert texts(sample_board, "To Do") == ["Task 1", "Task 2"]

    def test_missing_item(self, sample_board):
        with pytest.raises(NotFoundError):
            mutations.update_item(sample_board, "To Do", "Ghost", "x")


class TestCompleteItem:

    def test_toggle(self, sample_board):
        assert mutations.complete_item(sample_board, "To Do", "Task 1").completed is True
        assert mutations.complete_item(sample_board, "To Do", "Task 1").completed is False

    def test_explicit_value(self, sample_board):
        item = mutations.complete_item(sample_board, "Done", "Task 4", completed=True)
        assert item.completed is True
        item = mutations.complete_item(sample_board, "Done", "Task 4", completed=False)
        assert item.completed is False

    def test_missing_item(self, sample_board):
        with pytest.raises(NotFoundError):
            mutations.complete_item(sample_board, "Done", "Ghost")


class TestReorderItem:

    @pytest.fixture
    def board(self):
        return Board(columns=[Column("A", [Item(t) for t in ("a", "b", "c", "d")])])

    def test_move_to_front(self, board):
        assert mutations.reorder_item(board, "A", "c", 0) == (2, 0)
        assert texts(board, "A") == ["c", "a", "b", "d"]

    def test_move_down(self, board):
        assert mutations.reorder_item(board, "A", "a", 2) == (0, 2)
        assert texts(board, "A") == ["b", "c", "a", "d"]

    def test_large_position_means_last(self, board):
        assert mutations.reorder_item(board, "A", "a", 99) == (0, 3)
        assert texts(board, "A") == ["b", "c", "d", "a"]

    def test_negative_position_clamped_to_zero(self, board):
        assert mutations.reorder_item(board, "A", "d", -5) == (3, 0)
        assert texts(board, "A") == ["d", "a", "b", "c"]

    def test_missing_item(self, board):
        with pytest.raises(NotFoundError):
            mutations.reorder_item(board, "A", "z", 0)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Columns
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestAddColumn:

    def test_insert_at_position(self):
        board = make_board("A", "B", "C")
        mutations.add_column(board, "Review", position=1)
        assert board.column_names == ["A", "Review", "B", "C"]

    def test_default_appends(self):
        board = make_board("A")
        column = mutations.add_column(board, "B")
        assert board.column_names == ["A", "B"]
        assert column.items == []

    def test_position_equal_to_length_appends(self):
        board = make_board("A", "B")
        mutations.add_column(board, "C", position=2)
        assert board.column_names == ["A", "B", "C"]

    def test_position_past_end_rejected(self):
        board = make_board("A", "B")
        with pytest.raises(OutOfBoundsError) as exc_info:
            mutations.add_column(board, "C", position=3)
        assert exc_info.value.limit == 2
        assert board.column_names == ["A", "B"]

    def test_negative_position_rejected(self):
        with pytest.raises(OutOfBoundsError):
            mutations.add_column(make_board("A"), "B", position=-1)

    def test_out_of_bounds_is_a_conflict(self):
        with pytest.raises(ConflictError):
            mutations.add_column(make_board("A"), "B", position=5)

    def test_duplicate_rejected(self):
        with pytest.raises(ConflictError, match="already exists"):
            mutations.add_column(make_board("A", "B"), "B")

    def test_add_then_remove_restores_board(self, sample_board):
        before = sample_board.to_dict()
        mutations.add_column(sample_board, "Review", position=1)
        mutations.remove_column(sample_board, "Review")
        assert sample_board.to_dict() == before


class TestRemoveColumn:

    def test_remove_empty(self):
        board = make_board("A", "B")
        mutations.remove_column(board, "A")
        assert board.column_names == ["B"]

    def test_non_empty_without_target_rejected(self, sample_board):
        with pytest.raises(ConflictError, match="contains 2 item"):
            mutations.remove_column(sample_board, "To Do")
        assert sample_board.column_names == ["To Do", "Doing", "Done"]

    def test_items_moved_to_target(self, sample_board):
        mutations.remove_column(sample_board, "To Do", target_column="Doing")
        assert sample_board.column_names == ["Doing", "Done"]
        assert texts(sample_board, "Doing") == ["Task 3", "Task 1", "Task 2"]

    def test_self_target_rejected(self, sample_board):
        with pytest.raises(ConflictError, match="same column"):
            mutations.remove_column(sample_board, "To Do", target_column="To Do")

    def test_missing_target_rejected(self, sample_board):
        with pytest.raises(NotFoundError):
            mutations.remove_column(sample_board, "To Do", target_column="Nope")
        assert texts(sample_board, "To Do") == ["Task 1", "Task 2"]

    def test_missing_column(self, sample_board):
        with pytest.raises(NotFoundError):
            mutations.remove_column(sample_board, "Nope")


class TestRenameColumn:

    def test_rename(self, sample_board):
        mutations.rename_column(sample_board, "Doing", "In Progress")
        assert sample_board.column_names == ["To Do", "In Progress", "Done"]
        assert texts(sample_board, "In Progress") == ["Task 3"]

    def test_existing_name_rejected(self, sample_board):
        with pytest.raises(ConflictError):
            mutations.rename_column(sample_board, "Doing", "Done")

    def test_missing_column(self, sample_board):
        with pytest.raises(NotFoundError):
            mutations.rename_column(sample_board, "Nope", "X")

    def test_rename_round_trip(self, sample_board):
        before = sample_board.to_dict()
        mutations.rename_column(sample_board, "Doing", "Tmp")
        mutations.rename_column(sample_board, "Tmp", "Doing")
        assert sample_board.to_dict() == before


class TestMoveColumn:

    def test_move(self):
        board = make_board("A", "B", "C")
        assert mutations.move_column(board, "A", 2) == (0, 2)
        assert board.column_names == ["B", "C", "A"]

    def test_same_position_is_noop(self):
        board = make_board("A", "B", "C")
        assert mutations.move_column(board, "B", 1) == (1, 1)
        assert board.column_names == ["A", "B", "C"]

    def test_position_equal_to_length_rejected(self):
        board = make_board("A", "B", "C")
        with pytest.raises(OutOfBoundsError):
            mutations.move_column(board, "A", 3)
        assert board.column_names == ["A", "B", "C"]

    def test_negative_position_rejected(self):
        with pytest.raises(OutOfBoundsError):
            mutations.move_column(make_board("A", "B"), "A", -1)

    def test_missing_column(self):
        with pytest.raises(NotFoundError):
            mutations.move_column(make_board("A"), "Z", 0)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Bulk
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestCloneBoard:

    def test_deep_copy(self, sample_board):
        clone = mutations.clone_board(sample_board, "copy.md")
        assert clone.path == "copy.md"
        assert clone.columns == sample_board.columns
        clone.columns[0].items[0].text = "changed"
        clone.settings["extra"] = 1
        assert sample_board.columns[0].items[0].text == "Task 1"
        assert "extra" not in sample_board.settings


class TestMergeBoards:

    def test_dedup_by_text(self):
        first = Board(columns=[Column("To Do", [Item("Same")])])
        second = Board(columns=[Column("To Do", [Item("Same")])])
        target = Board()
        mutations.merge_boards(target, [first, second])
        assert target.column_names == ["To Do"]
        assert texts(target, "To Do") == ["Same"]

    def test_missing_columns_created_at_end(self, sample_board):
        source = Board(columns=[Column("Ideas", [Item("Idea")])])
        mutations.merge_boards(sample_board, [source])
        assert sample_board.column_names == ["To Do", "Doing", "Done", "Ideas"]

    def test_items_appended_in_order(self, sample_board):
        source = Board(columns=[Column("To Do", [Item("Task 2"), Item("New")])])
        mutations.merge_boards(sample_board, [source])
        assert texts(sample_board, "To Do") == ["Task 1", "Task 2", "New"]

    def test_sources_not_shared(self, sample_board):
        source = Board(columns=[Column("X", [Item("x")])])
        mutations.merge_boards(sample_board, [source])
        sample_board.get_column("X").items[0].text = "changed"
        assert source.columns[0].items[0].text == "x"


class TestArchiveDone:

    def test_default_archive(self):
        board = parse_board(
            "---\nkanban-plugin: basic\n---\n"
            "## Backlog\n- [ ] Task 1\n- [ ] Task 2\n"
            "## Done\n- [x] Done task\n"
        )
        mutations.archive_done(board)
        assert board.column_names == ["Backlog", "Done", "Archive"]
        assert texts(board, "Backlog") == ["Task 1", "Task 2"]
        assert texts(board, "Done") == []
        archived = board.get_column("Archive").items
        assert [(i.text, i.completed) for i in archived] == [("Done task", True)]

    def test_collected_in_board_order(self):
        board = parse_board(
            "## A\n- [x] a1\n- [ ] a2\n- [x] a3\n"
            "## B\n- [x] b1\n"
        )
        mutations.archive_done(board, "Old")
        assert texts(board, "Old") == ["a1", "a3", "b1"]
        assert texts(board, "A") == ["a2"]

    def test_existing_archive_column_reused(self):
        board = parse_board("## Archive\n- [x] old\n## A\n- [x] new\n")
        mutations.archive_done(board)
        assert board.column_names == ["Archive", "A"]
        assert texts(board, "Archive") == ["old", "new"]

    def test_invalid_archive_name(self, sample_board):
        with pytest.raises(InputFormatError):
            mutations.archive_done(sample_board, "Bad\nName")
