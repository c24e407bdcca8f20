"""
Board file storage backend.

BoardStore is the only component that touches board files. Every method
resolves its path through the vault guard first, so nothing here can read or
write outside the vault.
"""
import logging
import os
from typing import Any, Dict, List, Optional

from .codec import parse_board, serialize_board
from .errors import BoardIOError, ConflictError, InputFormatError, NotFoundError
from .paths import resolve_vault_path, vault_relative
from .schema import Board, Column, PluginMode, PLUGIN_KEY, default_settings
from .validators import validate_column_name
from .writer import atomic_write

logger = logging.getLogger(__name__)

BOARD_SUFFIX = ".md"
BOARD_MARKER = f"{PLUGIN_KEY}:"


class BoardStore:
    """Markdown-file-backed store for kanban boards inside a vault."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def _read_text(self, path: str, rel_path: str) -> str:
        try:
            with open(path, "r", encoding=self.encoding, newline="") as f:
                return f.read()
        except FileNotFoundError:
            raise NotFoundError("board", rel_path)
        except (OSError, UnicodeDecodeError) as e:
            raise BoardIOError(f"Failed to read kanban file: {e}", path=path) from e

    def _ensure_parent(self, path: str):
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
        except OSError as e:
            raise BoardIOError(f"Failed to create board directory: {e}", path=path) from e

    def read(self, vault: str, rel_path: str) -> Board:
        """Read and parse a board; the resolved path is stamped on the Board."""
        path = resolve_vault_path(vault, rel_path)
        board = parse_board(self._read_text(path, rel_path))
        board.path = path
        return board

    def write(self, vault: str, rel_path: str, board: Board) -> str:
        """Serialize and atomically write a board. Returns the resolved path."""
        path = resolve_vault_path(vault, rel_path)
        self._ensure_parent(path)
        atomic_write(path, serialize_board(board))
        logger.info(
            f"Board written: {path} "
            f"({len(board.columns)} columns)"
        )
        return path

    def create(
        self,
        vault: str,
        rel_path: str,
        columns: List[str],
        settings: Optional[Dict[str, Any]] = None,
    ) -> Board:
        """
        Create a new board file with empty columns.

        Raises:
            ConflictError if the file already exists or names repeat.
            InputFormatError for no columns, bad names or an unknown mode.
        """
        path = resolve_vault_path(vault, rel_path)
        if os.path.lexists(path):
            raise ConflictError(f"Board already exists at {rel_path}", name=rel_path)

        if not columns:
            raise InputFormatError("At least one column is required", field="columns")

        names: List[str] = []
        for raw in columns:
            name = validate_column_name(raw)
            if name in names:
                raise ConflictError(f'Column "{name}" is listed more than once', name=name)
            names.append(name)

        board_settings = default_settings()
        if settings:
            board_settings.update(settings)
        mode = board_settings.get(PLUGIN_KEY)
        if mode not in {m.value for m in PluginMode}:
            raise InputFormatError(
                f"Invalid {PLUGIN_KEY} mode: {mode!r}. Allowed: basic, advanced",
                field="settings",
            )

        board = Board(
            path=path,
            settings=board_settings,
            columns=[Column(name=n) for n in names],
        )

        self._ensure_parent(path)
        atomic_write(path, serialize_board(board))

        logger.info(f"Board created: {path} (columns={names})")
        return board

    def delete(self, vault: str, rel_path: str) -> str:
        """Delete a board file and return its resolved path."""
        path = resolve_vault_path(vault, rel_path)
        if not os.path.isfile(path):
            raise NotFoundError("board", rel_path)
        try:
            os.unlink(path)
        except OSError as e:
            raise BoardIOError(f"Failed to delete board: {e}", path=path) from e
        logger.info(f"Board deleted: {path}")
        return path

    def list(self, vault: str, rel_dir: str = ".") -> List[str]:
        """
        List board files directly inside rel_dir (non-recursive).

        A board is a .md file containing the kanban-plugin marker. Entries
        that resolve outside the vault or cannot be read are skipped.
        Returns vault-relative POSIX paths, sorted.
        """
        directory = resolve_vault_path(vault, rel_dir)
        if not os.path.isdir(directory):
            raise NotFoundError("directory", rel_dir)

        boards: List[str] = []
        try:
            entries = sorted(os.scandir(directory), key=lambda e: e.name)
        except OSError as e:
            raise BoardIOError(f"Failed to list kanban files: {e}", path=directory) from e

        for entry in entries:
            if not entry.name.endswith(BOARD_SUFFIX) or not entry.is_file():
                continue
            listed = os.path.join(directory, entry.name)
            rel = vault_relative(vault, listed)
            try:
                target = resolve_vault_path(vault, rel)
                with open(target, "r", encoding=self.encoding) as f:
                    content = f.read()
            except Exception as e:
                logger.debug(f"Skipping {listed}: {e}")
                continue
            if BOARD_MARKER in content:
                boards.append(rel)

        return boards
