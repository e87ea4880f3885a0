"""
Shared fixtures.

FakeReviewHost keeps pull request comments in memory so reconciliation can
be exercised across several runs without talking to GitHub.
"""

import itertools
import threading
from typing import Dict, List

import pytest

from manifest.github.host import ReviewHost, ReviewHostError
from manifest.models.change_set import ChangeSet
from manifest.models.inspection import Import, Pull
from manifest.models.review import AnnotationKind, ExistingAnnotation, LineComment, strike


class FakeReviewHost(ReviewHost):
    """In-memory review host."""

    def __init__(self):
        self.comments: Dict[int, ExistingAnnotation] = {}
        self.posted_lines: List[LineComment] = []
        self.posted_threads: List[str] = []
        self.resolved: List[int] = []
        self.fail_posts = False
        self.fail_resolves = False
        self.fail_fetch = False
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def add(self, body: str, kind: AnnotationKind = AnnotationKind.REVIEW) -> int:
        with self._lock:
            comment_id = next(self._ids)
            self.comments[comment_id] = ExistingAnnotation(body=body, id=comment_id, kind=kind)
            return comment_id

    def _fetch(self, kind: AnnotationKind) -> List[ExistingAnnotation]:
        if self.fail_fetch:
            raise ReviewHostError("fetch failed")
        return [
            ExistingAnnotation(body=c.body, id=c.id, kind=c.kind)
            for c in self.comments.values()
            if c.kind == kind
        ]

    def fetch_thread_annotations(self, number: int) -> List[ExistingAnnotation]:
        return self._fetch(AnnotationKind.REVIEW)

    def fetch_line_annotations(self, number: int) -> List[ExistingAnnotation]:
        return self._fetch(AnnotationKind.FILE_LINE)

    def post_thread_comment(self, number: int, body: str) -> None:
        if self.fail_posts:
            raise ReviewHostError("post failed")
        self.posted_threads.append(body)
        self.add(body, AnnotationKind.REVIEW)

    def post_line_comment(self, comment: LineComment) -> None:
        if self.fail_posts:
            raise ReviewHostError("post failed")
        self.posted_lines.append(comment)
        self.add(comment.body, AnnotationKind.FILE_LINE)

    def resolve_thread_annotation(self, annotation: ExistingAnnotation) -> None:
        self._resolve(annotation)

    def resolve_line_annotation(self, annotation: ExistingAnnotation) -> None:
        self._resolve(annotation)

    def _resolve(self, annotation: ExistingAnnotation) -> None:
        if self.fail_resolves:
            raise ReviewHostError("resolve failed")
        self.resolved.append(annotation.id)
        stored = self.comments[annotation.id]
        stored.body = strike(stored.body)

    @property
    def open_bodies(self) -> List[str]:
        return [c.body for c in self.comments.values() if not c.is_resolved]


def make_import(number: int = 7, sha: str = "abc123", strict: bool = False) -> Import:
    return Import(
        change_set=ChangeSet(),
        pull=Pull(number=number, title="Add linting", description="Adds a lint step", owner="octo", repo="widgets"),
        current_sha=sha,
        strict=strict,
    )


@pytest.fixture
def review_host():
    return FakeReviewHost()


@pytest.fixture
def host_factory():
    """Builds fresh hosts, for tests that need one per hypothesis example."""
    return FakeReviewHost


@pytest.fixture
def pull_import():
    return make_import()


@pytest.fixture
def import_factory():
    return make_import
