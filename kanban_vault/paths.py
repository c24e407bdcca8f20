"""
Vault path guard.

Every filesystem access goes through resolve_vault_path() first. It turns a
user-supplied (relative or absolute) path into an absolute path that is
guaranteed to lie inside the vault root, and raises PathSecurityError for
anything else:

    ../../etc/passwd           parent traversal
    /etc/passwd                absolute escape
    C:\\Windows\\System32        drive-letter escape (on every platform)
    notes/link -> /etc         symlink planted inside the vault
    "file\\0.md"                null byte injection
"""
import logging
import os
import re
import unicodedata
from pathlib import Path

from .errors import PathSecurityError

logger = logging.getLogger(__name__)

MAX_PATH_LENGTH = 4096

_DRIVE_RE = re.compile(r"^[A-Za-z]:")


def _reject(message: str, path=None):
    logger.warning(f"Rejected path: {message}")
    raise PathSecurityError(message, path=path)


def _check_inputs(vault_root, target) -> tuple:
    """Type/emptiness/null-byte checks; returns NFC-normalized (vault, target)."""
    if not vault_root or not isinstance(vault_root, str):
        _reject("Vault path must be a non-empty string")
    if not target or not isinstance(target, str):
        _reject("Target path must be a non-empty string")
    if "\0" in vault_root or "\0" in target:
        _reject("Path contains null byte")

    vault = unicodedata.normalize("NFC", vault_root)
    # Backslash is a separator everywhere, so "..\\x" cannot hide a traversal
    # behind a POSIX filename.
    target = unicodedata.normalize("NFC", target).replace("\\", "/")

    if not os.path.isabs(vault):
        _reject("Vault path must be absolute", path=vault_root)
    return vault, target


def _escapes(root: str, candidate: str) -> bool:
    """True if candidate lies outside root."""
    try:
        rel = os.path.relpath(candidate, root)
    except ValueError:
        # Different drives on Windows
        return True
    return rel == os.pardir or rel.startswith(os.pardir + os.sep) or os.path.isabs(rel)


def _candidate(root: str, target: str, original: str) -> str:
    """Build the normalized absolute candidate path for target."""
    if _DRIVE_RE.match(target) and os.name != "nt":
        _reject(f"Path escapes vault boundaries: {original}", path=original)
    if os.path.isabs(target) or _DRIVE_RE.match(target):
        return os.path.normpath(os.path.abspath(target))
    return os.path.normpath(os.path.join(root, target))


def _check_length(candidate: str):
    if len(candidate) > MAX_PATH_LENGTH:
        _reject(
            f"Path exceeds maximum length ({MAX_PATH_LENGTH}): {len(candidate)} chars",
            path=candidate[:256],
        )


def resolve_vault_path(vault_root: str, target: str) -> str:
    """
    Resolve target inside vault_root and return a safe absolute path.

    The vault itself must exist; it is canonicalized (symlinks resolved)
    first. If target exists, its canonical, symlink-free path is returned
    after a second containment check. If it does not exist (e.g. a board
    about to be created) the normalized path is returned, provided that its
    existing parent directories do not resolve outside the vault either.

    Raises:
        PathSecurityError if the path is malformed or outside the vault.
    """
    vault, target_norm = _check_inputs(vault_root, target)

    try:
        canonical_vault = str(Path(vault).resolve(strict=True))
    except (OSError, RuntimeError):
        _reject(f"Vault path does not exist or is not accessible: {vault}", path=vault)
    if not os.path.isdir(canonical_vault):
        _reject(f"Vault path is not a directory: {vault}", path=vault)

    candidate = _candidate(canonical_vault, target_norm, target)

    if _escapes(canonical_vault, candidate):
        # An absolute target spelled through a symlinked vault root is still
        # inside the vault; rebase it onto the canonical root.
        lexical_vault = os.path.normpath(vault)
        if os.path.isabs(target_norm) and not _escapes(lexical_vault, candidate):
            candidate = os.path.normpath(
                os.path.join(canonical_vault, os.path.relpath(candidate, lexical_vault))
            )
        else:
            _reject(f"Path escapes vault boundaries: {target} -> {candidate}", path=target)

    _check_length(candidate)

    canonical_target = os.path.realpath(candidate)
    if _escapes(canonical_vault, canonical_target):
        _reject(
            f"Symlink escapes vault boundaries: {target} -> {canonical_target}",
            path=target,
        )

    if os.path.lexists(candidate):
        return canonical_target
    return candidate


def resolve_vault_path_sync(vault_root: str, target: str) -> str:
    """
    Lexical-only variant of resolve_vault_path.

    WARNING: does not touch the filesystem, so symlinks are NOT resolved and
    the vault is not required to exist. Use only where no filesystem access
    is possible; prefer resolve_vault_path.
    """
    vault, target_norm = _check_inputs(vault_root, target)
    root = os.path.normpath(vault)

    candidate = _candidate(root, target_norm, target)
    if _escapes(root, candidate):
        _reject(f"Path escapes vault boundaries: {target}", path=target)

    _check_length(candidate)
    return candidate


def vault_relative(vault_root: str, path: str) -> str:
    """Vault-relative POSIX form of an already-resolved path."""
    root = str(Path(vault_root).resolve())
    return Path(os.path.relpath(path, root)).as_posix()
