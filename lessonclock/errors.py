from __future__ import annotations


class LessonClockError(Exception):
    """Base class for errors surfaced to the caller."""


class ValidationError(LessonClockError, ValueError):
    """Rejected input; raised before anything is mutated."""


class NotFoundError(LessonClockError, LookupError):
    def __init__(self, kind: str, ident: int):
        super().__init__(f"{kind} {ident} not found")
        self.kind = kind
        self.ident = ident


class PersistenceError(LessonClockError, OSError):
    def __init__(self, key: str, message: str):
        super().__init__(f"{key}: {message}")
        self.key = key
        self.message = message


class ImportFormatError(LessonClockError, ValueError):
    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path
        self.message = message
