# Kanban vault: configuration
# Override via config.yaml, environment variables or CLI args.

import logging
import os
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)

CONFIG_PATH = Path("~/.config/kanban-vault/config.yaml").expanduser()


@dataclass
class Config:
    """Runtime configuration for kanban-vault."""

    # Default vault root (CLI --vault wins, then KANBAN_VAULT)
    vault: str = ""

    # Board defaults
    archive_column: str = "Archive"
    default_columns: List[str] = field(
        default_factory=lambda: ["Backlog", "In Progress", "Done"]
    )

    # Logging
    log_level: str = "INFO"

    def resolve_paths(self):
        """Apply environment overrides and expand ~ in the vault path."""
        env_vault = os.environ.get("KANBAN_VAULT")
        if env_vault:
            self.vault = env_vault
        env_level = os.environ.get("KANBAN_LOG_LEVEL")
        if env_level:
            self.log_level = env_level

        if self.vault:
            self.vault = str(Path(self.vault).expanduser())
        self.log_level = str(self.log_level).upper()

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load config from YAML file, falling back to defaults."""
        if path:
            cfg_path = Path(path).expanduser()
        else:
            cfg_path = Path(os.environ.get("KANBAN_VAULT_CONFIG", str(CONFIG_PATH))).expanduser()

        if cfg_path.exists():
            try:
                with open(cfg_path, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
                cfg = cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
            except Exception as e:
                logger.warning(f"Ignoring unreadable config {cfg_path}: {e}")
                cfg = cls()
        else:
            cfg = cls()
        cfg.resolve_paths()
        return cfg
