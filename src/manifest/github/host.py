"""
Review Host

Contract the reconciliation formatter needs from wherever comments live.
"""

from abc import ABC, abstractmethod
from typing import List

from ..exceptions import ManifestError
from ..models.review import ExistingAnnotation, LineComment


class ReviewHostError(ManifestError):
    """The review host rejected or failed a request."""


class ReviewHost(ABC):
    """
    Comment storage for one repository.

    Resolving an annotation that is already resolved must be harmless.
    """

    @abstractmethod
    def fetch_thread_annotations(self, number: int) -> List[ExistingAnnotation]:
        """Top-level comments on pull request ``number``."""

    @abstractmethod
    def fetch_line_annotations(self, number: int) -> List[ExistingAnnotation]:
        """Line comments on pull request ``number``."""

    @abstractmethod
    def post_thread_comment(self, number: int, body: str) -> None:
        ...

    @abstractmethod
    def post_line_comment(self, comment: LineComment) -> None:
        ...

    @abstractmethod
    def resolve_thread_annotation(self, annotation: ExistingAnnotation) -> None:
        ...

    @abstractmethod
    def resolve_line_annotation(self, annotation: ExistingAnnotation) -> None:
        ...
