"""
Error taxonomy for the kanban vault engine.

Every error carries a stable ``kind`` tag plus structured fields so callers
can branch on data instead of parsing messages. ``format_error`` is the one
place that turns an error into display text.
"""
from typing import Iterable, List, Optional


class KanbanError(Exception):
    """Base class for all engine errors."""
    kind = "kanban"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class PathSecurityError(KanbanError):
    """Raised when a path is malformed or escapes the vault."""
    kind = "path_security"

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["path"] = self.path
        return data


class InputFormatError(KanbanError):
    """Raised when item text or a column name would corrupt the document."""
    kind = "input_format"

    def __init__(self, message: str, field: str = ""):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["field"] = self.field
        return data


class NotFoundError(KanbanError):
    """Raised when a referenced board, column or item does not exist."""
    kind = "not_found"

    def __init__(
        self,
        entity: str,
        name: str,
        alternatives: Optional[Iterable[str]] = None,
        container: Optional[str] = None,
    ):
        self.entity = entity
        self.name = name
        self.alternatives: List[str] = list(alternatives or [])
        self.container = container
        where = f' in {container}' if container else ""
        super().__init__(f'{entity.capitalize()} "{name}" not found{where}')

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "entity": self.entity,
            "name": self.name,
            "alternatives": self.alternatives,
        })
        return data


class ConflictError(KanbanError):
    """Raised on duplicate names, self-references and non-empty removals."""
    kind = "conflict"

    def __init__(self, message: str, name: str = ""):
        super().__init__(message)
        self.name = name

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["name"] = self.name
        return data


class OutOfBoundsError(ConflictError):
    """Raised when a column position falls outside the board."""
    kind = "out_of_bounds"

    def __init__(self, position: int, limit: int, name: str = ""):
        self.position = position
        self.limit = limit
        super().__init__(
            f"Position {position} is out of bounds. Board has {limit} columns.",
            name=name,
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({"position": self.position, "limit": self.limit})
        return data


class BoardIOError(KanbanError):
    """Raised when reading, writing or renaming a board file fails."""
    kind = "io"

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["path"] = self.path
        return data


ERROR_KINDS = frozenset(
    cls.kind for cls in (
        PathSecurityError, InputFormatError, NotFoundError,
        ConflictError, OutOfBoundsError, BoardIOError,
    )
)


def format_error(err: KanbanError) -> str:
    """Render an engine error as a single human-readable line."""
    if isinstance(err, NotFoundError):
        text = err.message
        if err.alternatives:
            text += f". Available {err.entity}s: {', '.join(err.alternatives)}"
        return text
    if isinstance(err, InputFormatError) and err.field:
        return f"Invalid {err.field}: {err.message}"
    if isinstance(err, BoardIOError):
        return f"{err.message} ({err.path})"
    return err.message
