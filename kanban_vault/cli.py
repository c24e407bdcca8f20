#!/usr/bin/env python3
"""
kanban-vault: command line entry point

Every sub-command runs one BoardService operation against a board inside the
vault and prints the result as JSON.

Usage:
    kanban-vault --vault ~/notes create Projects/Work.md
    kanban-vault --vault ~/notes item-add Projects/Work.md Backlog "Write report"
    kanban-vault --vault ~/notes item-move Projects/Work.md "Write report" Backlog Done
    kanban-vault --vault ~/notes archive Projects/Work.md
    KANBAN_VAULT=~/notes kanban-vault list Projects
"""

import argparse
import json
import logging
import os
import sys

from . import __version__
from .config import Config
from .errors import KanbanError, format_error
from .operations import BoardService
from .vault import init_vault

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NO_VAULT = 2


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Sub-command handlers: (service, vault, args, cfg) -> result
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _cmd_read(svc, vault, args, cfg):
    return svc.read_board(vault, args.board)


def _cmd_list(svc, vault, args, cfg):
    return svc.list_boards(vault, args.directory)


def _cmd_create(svc, vault, args, cfg):
    columns = args.column or cfg.default_columns
    return svc.create_board(vault, args.board, columns, {"kanban-plugin": args.mode})


def _cmd_delete(svc, vault, args, cfg):
    return svc.delete_board(vault, args.board)


def _cmd_init(svc, vault, args, cfg):
    return {"obsidian_dir": init_vault(vault)}


def _cmd_item_add(svc, vault, args, cfg):
    return svc.add_item(vault, args.board, args.column, args.text, completed=args.done)


def _cmd_item_remove(svc, vault, args, cfg):
    return svc.remove_item(vault, args.board, args.column, args.text)


def _cmd_item_move(svc, vault, args, cfg):
    return svc.move_item(vault, args.board, args.text, args.source, args.target)


def _cmd_item_update(svc, vault, args, cfg):
    return svc.update_item(vault, args.board, args.column, args.old_text, args.new_text)


def _cmd_item_complete(svc, vault, args, cfg):
    return svc.complete_item(vault, args.board, args.column, args.text, args.completed)


def _cmd_item_reorder(svc, vault, args, cfg):
    return svc.reorder_item(vault, args.board, args.column, args.text, args.position)


def _cmd_column_add(svc, vault, args, cfg):
    return svc.add_column(vault, args.board, args.name, args.position)


def _cmd_column_remove(svc, vault, args, cfg):
    return svc.remove_column(vault, args.board, args.name, args.target)


def _cmd_column_rename(svc, vault, args, cfg):
    return svc.rename_column(vault, args.board, args.old_name, args.new_name)


def _cmd_column_move(svc, vault, args, cfg):
    return svc.move_column(vault, args.board, args.name, args.position)


def _cmd_clone(svc, vault, args, cfg):
    return svc.clone_board(vault, args.source, args.target)


def _cmd_merge(svc, vault, args, cfg):
    return svc.merge_boards(vault, args.sources, args.target)


def _cmd_archive(svc, vault, args, cfg):
    return svc.archive_done(vault, args.board, args.column)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="kanban-vault",
        description="Edit Obsidian kanban boards stored in a vault",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument(
        "--vault", default=None,
        help="Vault root directory (default: KANBAN_VAULT or config)",
    )
    ap.add_argument(
        "--config", default=None,
        help="Path to config.yaml",
    )
    ap.add_argument(
        "-v", "--verbose", action="store_true",
        help="Debug logging",
    )
    sub = ap.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    def command(name, func, summary):
        p = sub.add_parser(name, help=summary)
        p.set_defaults(func=func)
        return p

    # ── Boards ──
    p = command("read", _cmd_read, "Print a board as JSON")
    p.add_argument("board")

    p = command("list", _cmd_list, "List boards in a vault directory")
    p.add_argument("directory", nargs="?", default=".")

    p = command("create", _cmd_create, "Create a new board")
    p.add_argument("board")
    p.add_argument(
        "--column", action="append",
        help="Column name, repeatable (default: config default_columns)",
    )
    p.add_argument("--mode", choices=["basic", "advanced"], default="basic")

    p = command("delete", _cmd_delete, "Delete a board file")
    p.add_argument("board")

    # ── Vault ──
    command("init", _cmd_init, "Create the .obsidian folder in the vault")

    # ── Items ──
    p = command("item-add", _cmd_item_add, "Append an item to a column")
    p.add_argument("board")
    p.add_argument("column")
    p.add_argument("text")
    p.add_argument("--done", action="store_true", help="Add the item already completed")

    p = command("item-remove", _cmd_item_remove, "Remove an item")
    p.add_argument("board")
    p.add_argument("column")
    p.add_argument("text")

    p = command("item-move", _cmd_item_move, "Move an item to another column")
    p.add_argument("board")
    p.add_argument("text")
    p.add_argument("source")
    p.add_argument("target")

    p = command("item-update", _cmd_item_update, "Change an item's text")
    p.add_argument("board")
    p.add_argument("column")
    p.add_argument("old_text")
    p.add_argument("new_text")

    p = command("item-complete", _cmd_item_complete, "Set or toggle an item's checkbox")
    p.add_argument("board")
    p.add_argument("column")
    p.add_argument("text")
    state = p.add_mutually_exclusive_group()
    state.add_argument("--done", dest="completed", action="store_const", const=True)
    state.add_argument("--undone", dest="completed", action="store_const", const=False)

    p = command("item-reorder", _cmd_item_reorder, "Move an item within its column")
    p.add_argument("board")
    p.add_argument("column")
    p.add_argument("text")
    p.add_argument("position", type=int)

    # ── Columns ──
    p = command("column-add", _cmd_column_add, "Add an empty column")
    p.add_argument("board")
    p.add_argument("name")
    p.add_argument("--position", type=int, default=None)

    p = command("column-remove", _cmd_column_remove, "Remove a column")
    p.add_argument("board")
    p.add_argument("name")
    p.add_argument("--target", default=None, help="Move the column's items here first")

    p = command("column-rename", _cmd_column_rename, "Rename a column")
    p.add_argument("board")
    p.add_argument("old_name")
    p.add_argument("new_name")

    p = command("column-move", _cmd_column_move, "Move a column to a new position")
    p.add_argument("board")
    p.add_argument("name")
    p.add_argument("position", type=int)

    # ── Bulk ──
    p = command("clone", _cmd_clone, "Copy a board to a new path")
    p.add_argument("source")
    p.add_argument("target")

    p = command("merge", _cmd_merge, "Merge boards into a target board")
    p.add_argument("target")
    p.add_argument("sources", nargs="+")

    p = command("archive", _cmd_archive, "Move completed items to the archive column")
    p.add_argument("board")
    p.add_argument("--column", default=None, help="Archive column (default: config)")

    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    cfg = Config.load(args.config)
    if args.vault:
        cfg.vault = os.path.expanduser(args.vault)
    if args.verbose:
        cfg.log_level = "DEBUG"

    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s [kanban-vault] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    if not cfg.vault:
        print("No vault given: pass --vault or set KANBAN_VAULT", file=sys.stderr)
        return EXIT_NO_VAULT
    vault = os.path.abspath(cfg.vault)
    if not os.path.isdir(vault):
        print(f"Vault directory not found: {vault}", file=sys.stderr)
        return EXIT_NO_VAULT

    service = BoardService(archive_column=cfg.archive_column)
    try:
        result = args.func(service, vault, args, cfg)
    except KanbanError as e:
        logger.debug(f"{args.command} failed: {e.to_dict()}")
        print(format_error(e), file=sys.stderr)
        return EXIT_ERROR

    print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
