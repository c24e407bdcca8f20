"""
Markdown <-> Board codec for Obsidian kanban files.

Document layout:

    ---

    kanban-plugin: basic

    ---

    ## Backlog

    - [ ] Task 1
    - [x] Task 2

    %% kanban:settings
    ```
    {"kanban-plugin":"basic"}
    ```
    %%

Parsing is permissive: unrecognized lines are ignored, and everything from
the first "%%" line onward is skipped. Serializing is deterministic: the same
Board always produces the same bytes.
"""
import json
import logging
import re
from typing import Any, Dict, List, Tuple

import yaml

from .errors import InputFormatError
from .schema import Board, Column, Item, PluginMode, PLUGIN_KEY

logger = logging.getLogger(__name__)

FRONTMATTER_DELIMITER = "---"
SETTINGS_SENTINEL = "%%"
SETTINGS_HEADER = "%% kanban:settings"
BOM = "\ufeff"

COLUMN_RE = re.compile(r"##\s+(.+)")
ITEM_RE = re.compile(r"-\s+\[([ x])\]\s+(.*)")


def _split_frontmatter(lines: List[str]) -> Tuple[str, List[str]]:
    """Split a leading '---' block off the document lines."""
    if not lines or lines[0].strip() != FRONTMATTER_DELIMITER:
        return "", lines
    for index in range(1, len(lines)):
        if lines[index].strip() == FRONTMATTER_DELIMITER:
            return "\n".join(lines[1:index]), lines[index + 1:]
    # Unterminated block: treat the whole thing as body
    return "", lines


def _parse_settings(raw: str) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(raw) if raw.strip() else {}
    except yaml.YAMLError as e:
        raise InputFormatError(f"Invalid board metadata block: {e}", field="metadata")
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InputFormatError(
            "Board metadata block must be a key: value mapping", field="metadata"
        )

    settings: Dict[str, Any] = {PLUGIN_KEY: PluginMode.BASIC.value}
    for key, value in data.items():
        settings[str(key)] = value

    mode = settings[PLUGIN_KEY]
    normalized = PluginMode.from_str(mode).value
    if mode is not None and str(mode).strip().lower() != normalized:
        logger.warning(f"Unknown {PLUGIN_KEY} mode {mode!r}, using '{normalized}'")
    settings[PLUGIN_KEY] = normalized
    return settings


def parse_board(text: str) -> Board:
    """
    Parse board markdown into a Board (path left empty for the caller).

    Raises:
        InputFormatError if the metadata block is not valid YAML mapping.
    """
    if text.startswith(BOM):
        text = text[len(BOM):]
    lines = [line.rstrip("\r") for line in text.split("\n")]
    raw_settings, body = _split_frontmatter(lines)
    settings = _parse_settings(raw_settings)

    columns: List[Column] = []
    current = None

    for line in body:
        header = COLUMN_RE.fullmatch(line)
        if header:
            if current is not None:
                columns.append(current)
            current = Column(name=header.group(1).strip())
            continue

        item = ITEM_RE.fullmatch(line)
        if item:
            if current is not None:
                current.items.append(Item(
                    text=item.group(2).strip(),
                    completed=item.group(1) == "x",
                ))
            continue

        if line.strip().startswith(SETTINGS_SENTINEL):
            break

    if current is not None:
        columns.append(current)

    logger.debug(
        f"Parsed board: {len(columns)} columns, "
        f"{sum(len(c.items) for c in columns)} items"
    )
    return Board(path="", settings=settings, columns=columns)


class _MetadataDumper(yaml.SafeDumper):
    """SafeDumper that keeps every string scalar on one line."""


def _represent_str(dumper, data):
    # Double quotes escape newlines, so a value can never emit a bare '---' line
    style = '"' if "\n" in data or "\r" in data else None
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style=style)


_MetadataDumper.add_representer(str, _represent_str)


def _metadata_lines(settings: Dict[str, Any]) -> List[str]:
    mode = PluginMode.from_str(settings.get(PLUGIN_KEY, "basic")).value
    lines = [f"{PLUGIN_KEY}: {mode}"]
    extra = {k: v for k, v in settings.items() if k != PLUGIN_KEY}
    if extra:
        dumped = yaml.dump(
            extra,
            Dumper=_MetadataDumper,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
            width=float("inf"),
        )
        lines.extend(dumped.rstrip("\n").split("\n"))
    return lines


def _settings_snapshot(settings: Dict[str, Any]) -> str:
    snapshot = dict(settings)
    snapshot[PLUGIN_KEY] = PluginMode.from_str(settings.get(PLUGIN_KEY, "basic")).value
    return json.dumps(
        snapshot, separators=(",", ":"), ensure_ascii=False, default=str
    )


def serialize_board(board: Board) -> str:
    """Serialize a Board back to Obsidian kanban markdown."""
    parts: List[str] = [FRONTMATTER_DELIMITER, ""]
    parts.extend(_metadata_lines(board.settings))
    parts.extend(["", FRONTMATTER_DELIMITER, ""])

    for column in board.columns:
        parts.append(f"## {column.name}")
        parts.append("")
        for item in column.items:
            checkbox = "[x]" if item.completed else "[ ]"
            parts.append(f"- {checkbox} {item.text}")
        parts.append("")

    parts.append(SETTINGS_HEADER)
    parts.append("```")
    parts.append(_settings_snapshot(board.settings))
    parts.append("```")
    parts.append(SETTINGS_SENTINEL)
    parts.append("")

    text = "\n".join(parts)
    logger.debug(f"Serialized board {board.path or '<unsaved>'}: {len(text)} chars")
    return text
