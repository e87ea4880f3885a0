"""
Data Models

Core data models of the inspection pipeline.
"""

from .change_set import ChangeSet, FileChange, Hunk, DiffLine
from .inspection import Import, Pull
from .result import Comment, Result, Severity, Side
from .review import AnnotationKind, ExistingAnnotation, LineComment

__all__ = [
    "ChangeSet",
    "FileChange",
    "Hunk",
    "DiffLine",
    "Import",
    "Pull",
    "Comment",
    "Result",
    "Severity",
    "Side",
    "AnnotationKind",
    "ExistingAnnotation",
    "LineComment",
]
