"""
Review Data Models

Comments that live on the review host, both the ones already posted and the
ones about to be.
"""

from dataclasses import dataclass
from enum import Enum


class AnnotationKind(Enum):
    """Where an existing comment lives on the pull request."""
    REVIEW = "review"        # top-level conversation comment
    FILE_LINE = "file_line"  # comment attached to a line of the diff


RESOLVED_PREFIX = "<strike>"
RESOLVED_SUFFIX = "</strike>"


@dataclass
class ExistingAnnotation:
    """A comment fetched from the review host at the start of a run."""
    body: str
    id: int
    kind: AnnotationKind
    stale: bool = True

    @property
    def is_resolved(self) -> bool:
        """Resolved comments are struck through and never touched again."""
        return self.body.lstrip().startswith(RESOLVED_PREFIX)

    @property
    def key(self):
        return (self.kind, self.id)


@dataclass
class LineComment:
    """A new comment on a line of the pull request diff."""
    number: int
    commit_sha: str
    path: str
    line: int
    side: str  # 'RIGHT' for new code, 'LEFT' for old code
    body: str

    def __post_init__(self):
        valid_sides = {'RIGHT', 'LEFT'}
        if self.side not in valid_sides:
            raise ValueError(f"Invalid side: {self.side}")

        if self.line <= 0:
            raise ValueError("Line number must be positive")

        if not self.body.strip():
            raise ValueError("Comment body cannot be empty")


def strike(body: str) -> str:
    """Return ``body`` marked as resolved."""
    if body.lstrip().startswith(RESOLVED_PREFIX):
        return body
    return f"{RESOLVED_PREFIX}{body}{RESOLVED_SUFFIX}"
