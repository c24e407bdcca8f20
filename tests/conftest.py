"""Shared test fixtures for kanban-vault tests."""

import os

import pytest

from kanban_vault.codec import parse_board

SAMPLE_BOARD = """---

kanban-plugin: basic

---

## To Do

- [ ] Task 1
- [ ] Task 2

## Doing

- [ ] Task 3

## Done

- [x] Task 4

%% kanban:settings
```
{"kanban-plugin":"basic"}
```
%%
"""


@pytest.fixture
def vault(tmp_path):
    """An empty vault directory, as a canonical absolute string."""
    root = tmp_path / "vault"
    root.mkdir()
    return os.path.realpath(str(root))


@pytest.fixture
def sample_text():
    return SAMPLE_BOARD


@pytest.fixture
def sample_board():
    return parse_board(SAMPLE_BOARD)


@pytest.fixture
def board_file(vault):
    """SAMPLE_BOARD written to <vault>/board.md; returns the relative path."""
    with open(os.path.join(vault, "board.md"), "w", encoding="utf-8") as f:
        f.write(SAMPLE_BOARD)
    return "board.md"


@pytest.fixture
def read_text(vault):
    """Read a vault-relative file back as text."""
    def _read(rel_path):
        with open(os.path.join(vault, rel_path), "r", encoding="utf-8") as f:
            return f.read()
    return _read
