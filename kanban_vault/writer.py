"""
Atomic file writes.

Write to "<path>.tmp", then rename onto <path>. os.replace() is atomic on
POSIX and replaces an existing target on Windows too, so readers only ever
see the old file or the new one, never a partial write.

Whatever already sits at the temp path (a stale temp file, a symlink, a hard
link) is unlinked first and the temp file is created exclusively, so the
write can never land on a file the temp name happened to point at.
"""
import logging
import os

from .errors import BoardIOError

logger = logging.getLogger(__name__)

TMP_SUFFIX = ".tmp"

_TMP_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_NOFOLLOW", 0)


def _open_temp(tmp_path: str):
    if os.path.lexists(tmp_path):
        logger.warning(f"Removing stale temp entry {tmp_path}")
        os.unlink(tmp_path)
    fd = os.open(tmp_path, _TMP_FLAGS, 0o644)
    return os.fdopen(fd, "w", encoding="utf-8", newline="\n")


def atomic_write(path: str, text: str) -> None:
    """
    Atomically replace path with text (UTF-8).

    Raises:
        BoardIOError carrying the target path; the temp file is removed.
    """
    tmp_path = f"{path}{TMP_SUFFIX}"
    try:
        with _open_temp(tmp_path) as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except Exception as e:
        try:
            os.unlink(tmp_path)
        except OSError as cleanup_error:
            logger.debug(f"Temp file cleanup failed for {tmp_path}: {cleanup_error}")
        raise BoardIOError(f"Failed to write kanban file: {e}", path=path) from e

    logger.debug(f"Wrote {len(text)} chars to {path}")
