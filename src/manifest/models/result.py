"""
Checker Result Models

Wire format a checker writes to stdout. Validated with pydantic so malformed
output is rejected before it reaches a formatter.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class Severity(str, Enum):
    """Severity of a diagnostic."""
    INFO = "Info"    # does not fail the run
    WARN = "Warn"    # does not fail the run, emphasizes caution
    ERROR = "Error"  # fails the run


class Side(str, Enum):
    """Side of the diff a line comment is attached to."""
    LEFT = "LEFT"
    RIGHT = "RIGHT"


class Comment(BaseModel):
    """A single diagnostic reported by a checker."""
    file: str = ""
    line: int = 0
    side: Optional[Side] = None
    text: str = ""
    severity: Severity = Severity.INFO

    @field_validator('file', 'text', mode='before')
    @classmethod
    def none_as_empty(cls, v):
        return "" if v is None else v

    @field_validator('line', mode='before')
    @classmethod
    def validate_line(cls, v):
        if v is None:
            return 0
        if isinstance(v, int) and v < 0:
            raise ValueError('Line numbers must be non-negative')
        return v

    @field_validator('side', mode='before')
    @classmethod
    def empty_side(cls, v):
        return None if v == "" else v

    @field_validator('severity', mode='before')
    @classmethod
    def default_severity(cls, v):
        return Severity.INFO if v in (None, "") else v

    @model_validator(mode='after')
    def require_side_for_line_comments(self):
        if self.is_line_scoped and self.side is None:
            raise ValueError(f'side is required for line comments on {self.file}:{self.line}')
        return self

    @property
    def is_line_scoped(self) -> bool:
        """Line comments need both a file and a line; anything else is top-level."""
        return bool(self.file) and self.line != 0


class Result(BaseModel):
    """Result of one checker invocation."""
    failure: str = ""
    comments: List[Comment] = Field(default_factory=list)

    @field_validator('failure', mode='before')
    @classmethod
    def none_failure(cls, v):
        return "" if v is None else v

    @field_validator('comments', mode='before')
    @classmethod
    def none_comments(cls, v):
        return [] if v is None else v

    @property
    def has_errors(self) -> bool:
        return any(c.severity == Severity.ERROR for c in self.comments)

    def warn(self, message: str) -> None:
        """Add a top-level warning."""
        self.comments.append(Comment(text=message, severity=Severity.WARN))

    def warn_line(self, file: str, side: str, line: int, message: str) -> None:
        """Add a warning on a specific line of a file."""
        self.comments.append(Comment(file=file, side=side, line=line, text=message, severity=Severity.WARN))

    def error(self, message: str) -> None:
        """Add a top-level error, which fails the run."""
        self.comments.append(Comment(text=message, severity=Severity.ERROR))

    def error_line(self, file: str, side: str, line: int, message: str) -> None:
        """Add an error on a specific line of a file, which fails the run."""
        self.comments.append(Comment(file=file, side=side, line=line, text=message, severity=Severity.ERROR))

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)
