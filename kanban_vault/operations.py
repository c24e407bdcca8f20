"""
Named board operations: validate -> read -> mutate -> write.

BoardService is what a protocol layer (MCP server, CLI, HTTP API) calls.
Each method validates its string arguments with the text validators, then
runs one read/mutate/write cycle against a single board file and returns a
plain dict result.

Within one process, cycles against the same board path are serialized by a
per-path lock. Separate processes are not coordinated: the last writer wins,
but every individual write is still atomic.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional, Tuple

from . import mutations
from .errors import NotFoundError
from .paths import resolve_vault_path
from .schema import Board, default_settings
from .store import BoardStore
from .validators import validate_column_name, validate_item_text

logger = logging.getLogger(__name__)

# path -> [lock, number of callers holding or waiting on it]
_locks: Dict[str, list] = {}
_locks_guard = threading.Lock()


@contextmanager
def board_lock(path: str):
    """Hold the in-process lock for one resolved board path."""
    with _locks_guard:
        entry = _locks.setdefault(path, [threading.Lock(), 0])
        entry[1] += 1
    try:
        with entry[0]:
            yield
    finally:
        with _locks_guard:
            entry[1] -= 1
            if entry[1] == 0:
                del _locks[path]


class BoardService:
    """Board operations over a vault, one read/mutate/write per call."""

    def __init__(
        self,
        store: Optional[BoardStore] = None,
        archive_column: str = mutations.DEFAULT_ARCHIVE_COLUMN,
    ):
        self.store = store or BoardStore()
        self.archive_column = archive_column

    def _mutate(
        self, vault: str, board_path: str, mutation: Callable[[Board], Any]
    ) -> Tuple[Board, Any]:
        path = resolve_vault_path(vault, board_path)
        with board_lock(path):
            board = self.store.read(vault, board_path)
            result = mutation(board)
            self.store.write(vault, board_path, board)
        return board, result

    # ──────────────────────────────────────────
    # Boards
    # ──────────────────────────────────────────

    def read_board(self, vault: str, board: str) -> Dict[str, Any]:
        return self.store.read(vault, board).to_dict()

    def list_boards(self, vault: str, path: str = ".") -> Dict[str, Any]:
        directory = resolve_vault_path(vault, path or ".")
        return {
            "directory": directory,
            "boards": self.store.list(vault, path or "."),
        }

    def create_board(
        self,
        vault: str,
        path: str,
        columns: List[str],
        settings: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        resolved = resolve_vault_path(vault, path)
        with board_lock(resolved):
            board = self.store.create(vault, path, columns, settings)
        return {"path": board.path, "board": board.to_dict()}

    def delete_board(self, vault: str, board: str) -> Dict[str, Any]:
        resolved = resolve_vault_path(vault, board)
        with board_lock(resolved):
            path = self.store.delete(vault, board)
        return {"path": path, "deleted": True}

    # ──────────────────────────────────────────
    # Items
    # ──────────────────────────────────────────

    def add_item(
        self, vault: str, board: str, column: str, text: str, completed: bool = False
    ) -> Dict[str, Any]:
        column = validate_column_name(column)
        text = validate_item_text(text)
        _, item = self._mutate(
            vault, board, lambda b: mutations.add_item(b, column, text, completed)
        )
        logger.info(f"Item added: board={board} column={column!r}")
        return {"board": board, "column": column, "item": item.to_dict()}

    def remove_item(self, vault: str, board: str, column: str, text: str) -> Dict[str, Any]:
        column = validate_column_name(column)
        text = validate_item_text(text)
        _, removed = self._mutate(
            vault, board, lambda b: mutations.remove_item(b, column, text)
        )
        logger.info(f"Item removed: board={board} column={column!r}")
        return {"board": board, "column": column, "removed": removed.to_dict()}

    def move_item(
        self, vault: str, board: str, text: str, source_column: str, target_column: str
    ) -> Dict[str, Any]:
        text = validate_item_text(text)
        source_column = validate_column_name(source_column)
        target_column = validate_column_name(target_column)
        _, item = self._mutate(
            vault, board,
            lambda b: mutations.move_item(b, text, source_column, target_column),
        )
        logger.info(
            f"Item moved: board={board} {source_column!r} -> {target_column!r}"
        )
        return {
            "board": board,
            "source_column": source_column,
            "target_column": target_column,
            "item": item.to_dict(),
        }

    def update_item(
        self, vault: str, board: str, column: str, old_text: str, new_text: str
    ) -> Dict[str, Any]:
        column = validate_column_name(column)
        old_text = validate_item_text(old_text)
        new_text = validate_item_text(new_text)

        def mutate(b: Board):
            before = b.get_column(column)
            old_item = None
            if before is not None and before.has_item(old_text):
                old_item = before.items[before.find_item(old_text)].to_dict()
            return old_item, mutations.update_item(b, column, old_text, new_text)

        _, (old_item, item) = self._mutate(vault, board, mutate)
        logger.info(f"Item updated: board={board} column={column!r}")
        return {
            "board": board,
            "column": column,
            "old_item": old_item,
            "new_item": item.to_dict(),
        }

    def complete_item(
        self,
        vault: str,
        board: str,
        column: str,
        text: str,
        completed: Optional[bool] = None,
    ) -> Dict[str, Any]:
        column = validate_column_name(column)
        text = validate_item_text(text)

        def mutate(b: Board):
            target = mutations.require_column(b, column)
            was = target.items[mutations.require_item_index(target, text)].completed
            return was, mutations.complete_item(b, column, text, completed)

        _, (was_completed, item) = self._mutate(vault, board, mutate)
        logger.info(
            f"Item completion: board={board} column={column!r} "
            f"{was_completed} -> {item.completed}"
        )
        return {
            "board": board,
            "column": column,
            "item": item.to_dict(),
            "was_completed": was_completed,
            "is_completed": item.completed,
        }

    def reorder_item(
        self, vault: str, board: str, column: str, text: str, position: int
    ) -> Dict[str, Any]:
        column = validate_column_name(column)
        text = validate_item_text(text)
        b, (old, new) = self._mutate(
            vault, board, lambda b: mutations.reorder_item(b, column, text, position)
        )
        item = b.get_column(column).items[new]
        logger.info(f"Item reordered: board={board} column={column!r} {old} -> {new}")
        return {
            "board": board,
            "column": column,
            "item": item.to_dict(),
            "old_position": old,
            "new_position": new,
        }

    # ──────────────────────────────────────────
    # Columns
    # ──────────────────────────────────────────

    def add_column(
        self, vault: str, board: str, name: str, position: Optional[int] = None
    ) -> Dict[str, Any]:
        name = validate_column_name(name)
        b, column = self._mutate(
            vault, board, lambda b: mutations.add_column(b, name, position)
        )
        index = b.find_column(name)
        logger.info(f"Column added: board={board} name={name!r} position={index}")
        return {"board": board, "column": column.to_dict(), "position": index}

    def remove_column(
        self, vault: str, board: str, name: str, target_column: Optional[str] = None
    ) -> Dict[str, Any]:
        name = validate_column_name(name)
        if target_column:
            target_column = validate_column_name(target_column)

        def mutate(b: Board):
            existing = b.get_column(name)
            count = len(existing.items) if existing is not None else 0
            mutations.remove_column(b, name, target_column)
            return count

        _, count = self._mutate(vault, board, mutate)
        logger.info(f"Column removed: board={board} name={name!r} items={count}")
        result: Dict[str, Any] = {
            "board": board,
            "removed_column": name,
            "items_removed": count,
        }
        if target_column and count:
            result["target_column"] = target_column
            result["items_moved"] = count
        return result

    def rename_column(
        self, vault: str, board: str, old_name: str, new_name: str
    ) -> Dict[str, Any]:
        old_name = validate_column_name(old_name)
        new_name = validate_column_name(new_name)
        _, column = self._mutate(
            vault, board, lambda b: mutations.rename_column(b, old_name, new_name)
        )
        logger.info(f"Column renamed: board={board} {old_name!r} -> {new_name!r}")
        return {
            "board": board,
            "old_name": old_name,
            "new_name": new_name,
            "column": column.to_dict(),
        }

    def move_column(
        self, vault: str, board: str, name: str, position: int
    ) -> Dict[str, Any]:
        name = validate_column_name(name)
        b, (old, new) = self._mutate(
            vault, board, lambda b: mutations.move_column(b, name, position)
        )
        logger.info(f"Column moved: board={board} name={name!r} {old} -> {new}")
        return {
            "board": board,
            "column_name": name,
            "old_position": old,
            "new_position": new,
            "column": b.columns[new].to_dict(),
        }

    # ──────────────────────────────────────────
    # Bulk
    # ──────────────────────────────────────────

    def clone_board(
        self, vault: str, source_board: str, target_board: str
    ) -> Dict[str, Any]:
        """Copy source_board to target_board (an existing target is overwritten)."""
        source = self.store.read(vault, source_board)
        target_path = resolve_vault_path(vault, target_board)
        clone = mutations.clone_board(source, target_path)
        with board_lock(target_path):
            self.store.write(vault, target_board, clone)
        logger.info(f"Board cloned: {source_board} -> {target_board}")
        return clone.to_dict()

    def merge_boards(
        self, vault: str, source_boards: List[str], target_board: str
    ) -> Dict[str, Any]:
        """Merge source boards into target_board, creating it if missing."""
        target_path = resolve_vault_path(vault, target_board)
        with board_lock(target_path):
            try:
                target = self.store.read(vault, target_board)
            except NotFoundError:
                target = Board(path=target_path, settings=default_settings())
            sources = [self.store.read(vault, s) for s in source_boards]
            mutations.merge_boards(target, sources)
            self.store.write(vault, target_board, target)
        logger.info(f"Boards merged: {source_boards} -> {target_board}")
        return target.to_dict()

    def archive_done(
        self, vault: str, board: str, archive_column: Optional[str] = None
    ) -> Dict[str, Any]:
        archive_column = validate_column_name(archive_column or self.archive_column)
        b, _ = self._mutate(
            vault, board, lambda b: mutations.archive_done(b, archive_column)
        )
        archived = len(b.get_column(archive_column).items)
        logger.info(
            f"Archived done items: board={board} column={archive_column!r} "
            f"(archive now holds {archived})"
        )
        return b.to_dict()
