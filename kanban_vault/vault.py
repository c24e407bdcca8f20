"""
Vault scaffolding: the .obsidian folder Obsidian expects inside a vault.
"""
import json
import logging
import os

from .errors import BoardIOError
from .paths import resolve_vault_path
from .writer import atomic_write

logger = logging.getLogger(__name__)

OBSIDIAN_DIR = ".obsidian"
PLUGINS_DIR = "plugins"

DEFAULT_FILES = {
    "app.json": {},
    "appearance.json": {},
    "community-plugins.json": [],
    "workspace.json": {},
}


def _dump(content) -> str:
    return json.dumps(content, indent=2) + "\n"


def init_vault(vault_path: str) -> str:
    """
    Create .obsidian/ and its default config files inside an existing vault.

    Existing files are left untouched, so running this twice is harmless.
    Returns the absolute .obsidian path.
    """
    obsidian_dir = resolve_vault_path(vault_path, OBSIDIAN_DIR)
    plugins_dir = resolve_vault_path(vault_path, f"{OBSIDIAN_DIR}/{PLUGINS_DIR}")
    try:
        os.makedirs(plugins_dir, exist_ok=True)
    except OSError as e:
        raise BoardIOError(f"Failed to create {OBSIDIAN_DIR} folder: {e}", path=obsidian_dir) from e

    created = []
    for name, content in DEFAULT_FILES.items():
        path = os.path.join(obsidian_dir, name)
        if os.path.exists(path):
            continue
        atomic_write(path, _dump(content))
        created.append(name)

    logger.info(f"Vault initialized: {obsidian_dir} (created: {created or 'nothing'})")
    return obsidian_dir

