"""
jsoutline - Diagnostics
The sticky error slot shared by all phases of one parse pass.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class ErrorKind(Enum):
    UNEXPECTED_END     = auto()
    UNCLOSED_COMMENT   = auto()
    UNCLOSED_STRING    = auto()
    UNCLOSED_REGEX     = auto()
    UNCLOSED_BRACKET   = auto()
    UNCLOSED_BLOCK     = auto()
    EXPECTED_PAREN     = auto()   # '(' after function
    EXPECTED_ARGUMENT  = auto()
    EXPECTED_COMMA     = auto()
    MISSING_BODY       = auto()
    MISSING_SEMICOLON  = auto()
    DUPLICATE_FUNCTION = auto()
    UNKNOWN_MEMBER     = auto()
    NESTING_TOO_DEEP   = auto()
    INTERNAL           = auto()

    @property
    def is_informational(self) -> bool:
        return self in (ErrorKind.DUPLICATE_FUNCTION, ErrorKind.UNKNOWN_MEMBER)


class ScriptSyntaxError(Exception):
    def __init__(self, message: str, line: int, column: int = 0,
                 kind: Optional[ErrorKind] = None):
        super().__init__(f"[ScriptSyntaxError] Line {line}: {message}")
        self.message = message
        self.line = line
        self.column = column
        self.kind = kind


@dataclass
class ErrorState:
    """
    First-wins diagnostic for one parse pass.

    ``set`` is the only writer; once an error is recorded every later call is
    ignored until ``clear``.
    """
    has_error: bool = False
    message: str = ""
    line: int = -1
    column: int = 0
    affected_line: int = -1
    kind: Optional[ErrorKind] = None

    def set(self, kind: ErrorKind, message: str, line: int = -1, column: int = 0,
            affected_line: int = -1) -> bool:
        """Record an error unless one is already set. Returns True if recorded."""
        if self.has_error:
            return False
        self.has_error = True
        self.kind = kind
        self.message = message
        self.line = line
        self.column = column
        self.affected_line = affected_line
        return True

    def clear(self) -> None:
        self.has_error = False
        self.kind = None
        self.message = ""
        self.line = -1
        self.column = 0
        self.affected_line = -1

    def raise_if_error(self) -> None:
        if self.has_error:
            raise ScriptSyntaxError(self.message, self.line, self.column, self.kind)

    def to_dict(self) -> dict:
        return {
            "has_error": self.has_error,
            "kind": self.kind.name if self.kind else None,
            "message": self.message,
            "line": self.line,
            "column": self.column,
            "affected_line": self.affected_line,
        }
