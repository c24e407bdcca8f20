"""
Structural board mutations.

Each function mutates the Board it is given in place and returns the element
it touched. Lookups by column name or item text use the FIRST exact match in
document order; duplicate item text is legal and is not an error. Callers
that need to address a specific duplicate must disambiguate the text first.

Failures raise before anything is changed, so a failed call leaves the Board
exactly as it was.
"""
import copy
from typing import Iterable, List, Optional, Tuple

from .errors import ConflictError, NotFoundError, OutOfBoundsError
from .schema import Board, Column, Item
from .validators import validate_column_name, validate_item_text

DEFAULT_ARCHIVE_COLUMN = "Archive"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Lookup helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def require_column(board: Board, name: str) -> Column:
    column = board.get_column(name)
    if column is None:
        raise NotFoundError("column", name, alternatives=board.column_names)
    return column


def require_item_index(column: Column, text: str) -> int:
    index = column.find_item(text)
    if index == -1:
        raise NotFoundError(
            "item", text,
            alternatives=[i.text for i in column.items],
            container=f'column "{column.name}"',
        )
    return index


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Item operations
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def add_item(board: Board, column: str, text: str, completed: bool = False) -> Item:
    """Append a new item to the end of a column."""
    text = validate_item_text(text)
    target = require_column(board, column)
    item = Item(text=text, completed=bool(completed))
    target.items.append(item)
    return item


def remove_item(board: Board, column: str, text: str) -> Item:
    """Remove the first item in column whose text matches."""
    target = require_column(board, column)
    index = require_item_index(target, text)
    return target.items.pop(index)


def move_item(board: Board, text: str, source_column: str, target_column: str) -> Item:
    """Move the first matching item from source to the end of target."""
    source = require_column(board, source_column)
    target = require_column(board, target_column)
    index = require_item_index(source, text)
    item = source.items.pop(index)
    target.items.append(item)
    return item


def update_item(board: Board, column: str, old_text: str, new_text: str) -> Item:
    """Replace an item's text; completion and metadata are kept."""
    new_text = validate_item_text(new_text)
    target = require_column(board, column)
    item = target.items[require_item_index(target, old_text)]
    item.text = new_text
    return item


def complete_item(
    board: Board, column: str, text: str, completed: Optional[bool] = None
) -> Item:
    """Set an item's completion, or flip it when completed is None."""
    target = require_column(board, column)
    item = target.items[require_item_index(target, text)]
    item.completed = (not item.completed) if completed is None else bool(completed)
    return item


def reorder_item(board: Board, column: str, text: str, position: int) -> Tuple[int, int]:
    """
    Move an item to a new index within its column.

    position is clamped to [0, len(items)] where len is measured after the
    item has been taken out, so any large value means "last".

    Returns:
        (old_position, new_position)
    """
    target = require_column(board, column)
    old_position = require_item_index(target, text)
    item = target.items.pop(old_position)
    new_position = max(0, min(int(position), len(target.items)))
    target.items.insert(new_position, item)
    return old_position, new_position


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Column operations
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def add_column(board: Board, name: str, position: Optional[int] = None) -> Column:
    """Insert an empty column at position (default: end)."""
    name = validate_column_name(name)
    if board.find_column(name) != -1:
        raise ConflictError(
            f'Column "{name}" already exists in board. '
            f"Existing columns: {', '.join(board.column_names)}",
            name=name,
        )

    limit = len(board.columns)
    if position is None:
        position = limit
    if position < 0 or position > limit:
        raise OutOfBoundsError(position, limit, name=name)

    column = Column(name=name)
    board.columns.insert(position, column)
    return column


def remove_column(board: Board, name: str, target_column: Optional[str] = None) -> Column:
    """
    Remove a column, first moving its items to target_column if given.

    Raises:
        NotFoundError if name or target_column is missing.
        ConflictError if the column has items and no target was given,
        or if the target is the column being removed.
    """
    index = board.find_column(name)
    if index == -1:
        raise NotFoundError("column", name, alternatives=board.column_names)
    column = board.columns[index]

    if column.items and not target_column:
        raise ConflictError(
            f'Column "{name}" contains {len(column.items)} item(s). '
            f"Specify a target column to move items before removal.",
            name=name,
        )

    if target_column:
        if target_column == name:
            raise ConflictError(
                "Cannot move items to the same column being removed", name=name
            )
        target = require_column(board, target_column)
        target.items.extend(column.items)
        column.items = []

    del board.columns[index]
    return column


def rename_column(board: Board, old_name: str, new_name: str) -> Column:
    """Rename a column in place; its items are untouched."""
    new_name = validate_column_name(new_name)
    column = require_column(board, old_name)
    if board.find_column(new_name) != -1:
        raise ConflictError(f'Column "{new_name}" already exists in board', name=new_name)
    column.name = new_name
    return column


def move_column(board: Board, name: str, position: int) -> Tuple[int, int]:
    """
    Move a column to an existing index.

    Returns:
        (old_position, new_position); a no-op when already there.
    """
    index = board.find_column(name)
    if index == -1:
        raise NotFoundError("column", name, alternatives=board.column_names)

    limit = len(board.columns)
    if position < 0 or position >= limit:
        raise OutOfBoundsError(position, limit, name=name)

    if index != position:
        column = board.columns.pop(index)
        board.columns.insert(position, column)
    return index, position


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Bulk operations
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def clone_board(source: Board, path: str = "") -> Board:
    """Deep copy of a board under a new path."""
    return Board(
        path=path,
        settings=copy.deepcopy(source.settings),
        columns=[
            Column(name=c.name, items=[i.copy() for i in c.items])
            for c in source.columns
        ],
    )


def _find_or_create_column(board: Board, name: str) -> Column:
    column = board.get_column(name)
    if column is None:
        column = Column(name=name)
        board.columns.append(column)
    return column


def merge_boards(target: Board, sources: Iterable[Board]) -> Board:
    """
    Merge source boards' columns into target.

    Columns are matched by name (created at the end when missing). A source
    item is appended only if no item with the same text is already in that
    target column.
    """
    for source in sources:
        for source_column in source.columns:
            column = _find_or_create_column(target, source_column.name)
            for item in source_column.items:
                if not column.has_item(item.text):
                    column.items.append(item.copy())
    return target


def archive_done(board: Board, archive_column: str = DEFAULT_ARCHIVE_COLUMN) -> Board:
    """
    Move every completed item into the archive column.

    The archive column is created at the end if missing. Items are collected
    column by column in board order and keep their relative order.
    """
    archive_column = validate_column_name(archive_column)
    archive = _find_or_create_column(board, archive_column)

    archived: List[Item] = []
    for column in board.columns:
        if column is archive:
            continue
        archived.extend(i for i in column.items if i.completed)
        column.items = [i for i in column.items if not i.completed]

    archive.items.extend(archived)
    return board
