"""
Kanban board schema.

A board file maps onto:
  Board  -> the whole document (settings + ordered columns)
  Column -> one "## Heading" section
  Item   -> one "- [ ] text" / "- [x] text" checkbox line

Column order and item order are significant and preserved end-to-end.
"""
import copy
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any


PLUGIN_KEY = "kanban-plugin"


class PluginMode(Enum):
    """Board mode understood by the Obsidian kanban plugin."""
    BASIC = "basic"
    ADVANCED = "advanced"

    @classmethod
    def from_str(cls, value: Any) -> "PluginMode":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.BASIC


def default_settings() -> Dict[str, Any]:
    return {PLUGIN_KEY: PluginMode.BASIC.value}


@dataclass
class Item:
    """A single checkbox entry within a column."""
    text: str
    completed: bool = False
    metadata: Optional[Dict[str, Any]] = None

    def copy(self) -> "Item":
        return Item(
            text=self.text,
            completed=self.completed,
            metadata=copy.deepcopy(self.metadata),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"text": self.text, "completed": self.completed}
        if self.metadata:
            data["metadata"] = copy.deepcopy(self.metadata)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Item":
        return cls(
            text=data.get("text", ""),
            completed=bool(data.get("completed", False)),
            metadata=copy.deepcopy(data.get("metadata")),
        )


@dataclass
class Column:
    """A named, ordered group of items."""
    name: str
    items: List[Item] = field(default_factory=list)

    def find_item(self, text: str) -> int:
        """Index of the first item whose text matches exactly, or -1."""
        for index, item in enumerate(self.items):
            if item.text == text:
                return index
        return -1

    def has_item(self, text: str) -> bool:
        return self.find_item(text) != -1

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "items": [i.to_dict() for i in self.items]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Column":
        return cls(
            name=data.get("name", ""),
            items=[Item.from_dict(i) for i in data.get("items", [])],
        )


@dataclass
class Board:
    """Parsed state of one kanban board file."""
    path: str = ""
    settings: Dict[str, Any] = field(default_factory=default_settings)
    columns: List[Column] = field(default_factory=list)

    @property
    def plugin_mode(self) -> PluginMode:
        return PluginMode.from_str(self.settings.get(PLUGIN_KEY, "basic"))

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def find_column(self, name: str) -> int:
        """Index of the first column whose name matches exactly, or -1."""
        for index, column in enumerate(self.columns):
            if column.name == name:
                return index
        return -1

    def get_column(self, name: str) -> Optional[Column]:
        index = self.find_column(name)
        return self.columns[index] if index != -1 else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "settings": copy.deepcopy(self.settings),
            "columns": [c.to_dict() for c in self.columns],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Board":
        settings = dict(data.get("settings") or default_settings())
        settings.setdefault(PLUGIN_KEY, PluginMode.BASIC.value)
        return cls(
            path=data.get("path", ""),
            settings=copy.deepcopy(settings),
            columns=[Column.from_dict(c) for c in data.get("columns", [])],
        )
