# Kanban vault: Markdown kanban boards stored inside a sandboxed vault directory
#
# Components:
#   schema.py      - Data model (Board, Column, Item, PluginMode)
#   errors.py      - Tagged error taxonomy + display formatting
#   paths.py       - Vault path containment guard (symlink-aware)
#   validators.py  - Item text / column name sanitizers
#   codec.py       - Markdown <-> Board parse / serialize
#   writer.py      - Atomic temp-file-then-rename writes
#   store.py       - BoardStore: read/write/create/delete/list board files
#   mutations.py   - Structural board mutations (items, columns, bulk)
#   operations.py  - Named read -> mutate -> write operations
#   vault.py       - .obsidian folder scaffolding
#   config.py      - YAML configuration loader
#   cli.py         - argparse command line entry point

__version__ = "0.1.0"
