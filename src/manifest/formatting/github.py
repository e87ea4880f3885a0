"""
GitHub Comment Formatter

Posts checker diagnostics to a pull request without duplicating comments
across runs, and resolves comments whose diagnostic has gone away.

Each posted comment carries a fingerprint marker. Before the run, existing
comments are indexed by fingerprint and marked stale. A diagnostic whose
fingerprint is already indexed clears the stale flag instead of posting
again. After the run, whatever is still stale is resolved.
"""

import logging
import threading
from typing import Dict, List, Optional

from ..exceptions import ReconciliationError
from ..github.host import ReviewHost, ReviewHostError
from ..models.inspection import Import
from ..models.result import Comment, Result, Severity
from ..models.review import AnnotationKind, ExistingAnnotation, LineComment
from .base import Formatter, FormatterWithHooks
from .fingerprint import extract_fingerprints, fingerprint, marker


logger = logging.getLogger(__name__)

FOOTER = "<sub>This comment was generated by the `{source}` checker using manifest</sub>"

CALLOUTS = {
    Severity.ERROR: "> [!CAUTION]",
    Severity.WARN: "> [!WARNING]",
    Severity.INFO: "> [!TIP]",
}


def render_comment(fingerprint_value: str, source: str, comments: List[Comment]) -> str:
    """
    Render diagnostics sharing one fingerprint into a comment body.

    Args:
        fingerprint_value: Fingerprint embedded as a hidden marker
        source: Checker that produced the diagnostics
        comments: Diagnostics to include, in order

    Returns:
        Markdown body
    """
    parts = [marker(fingerprint_value), ""]

    for comment in comments:
        parts.append(CALLOUTS[comment.severity])
        parts.extend(f"> {line}" for line in comment.text.split("\n"))
        parts.append("")

    parts.append(FOOTER.format(source=source))
    return "\n".join(parts)


class GitHubFormatter(FormatterWithHooks):
    """
    Reconciles checker results with the comments on a pull request.

    All reads and writes of the fingerprint index, and every call to the
    review host, happen under one lock, so results formatted from
    concurrent checkers never race each other into duplicate comments.
    """

    def __init__(self, host: ReviewHost, cli_formatter: Optional[Formatter] = None):
        """
        Initialize GitHub formatter.

        Args:
            host: Review host holding the pull request comments
            cli_formatter: Formatter that also receives every result, e.g. for terminal output
        """
        self.host = host
        self.cli_formatter = cli_formatter
        self._lock = threading.Lock()
        self._existing: Dict[str, List[ExistingAnnotation]] = {}

    def before_all(self, inspection_import: Import) -> None:
        """Index the fingerprints of every unresolved comment on the pull request."""
        number = self._pull_number(inspection_import)

        with self._lock:
            self._existing = {}
            try:
                annotations = self.host.fetch_thread_annotations(number)
                annotations += self.host.fetch_line_annotations(number)
            except ReviewHostError as e:
                raise ReconciliationError(f"could not fetch existing comments: {e}") from e

            for annotation in annotations:
                # Resolved comments are left alone; a new one is posted if the issue comes back
                if annotation.is_resolved:
                    continue

                for value in extract_fingerprints(annotation.body):
                    annotation.stale = True
                    self._existing.setdefault(value, []).append(annotation)

            logger.info(f"Indexed {len(self._existing)} fingerprints from {len(annotations)} existing comments")

    def format(self, source: str, inspection_import: Import, result: Result) -> None:
        number = self._pull_number(inspection_import)
        errors = []

        with self._lock:
            line_groups: Dict[str, List[Comment]] = {}
            top_level: List[Comment] = []

            for comment in result.comments:
                value = fingerprint(source, comment)
                existing = self._existing.get(value)
                if existing:
                    # Still a problem, so every comment carrying it stays open
                    for annotation in existing:
                        annotation.stale = False
                    continue

                if comment.is_line_scoped:
                    line_groups.setdefault(value, []).append(comment)
                else:
                    top_level.append(comment)

            for value, comments in line_groups.items():
                first = comments[0]
                line_comment = LineComment(
                    number=number,
                    commit_sha=inspection_import.current_sha,
                    path=first.file,
                    line=first.line,
                    side=first.side.value,
                    body=render_comment(value, source, comments),
                )
                try:
                    self.host.post_line_comment(line_comment)
                except ReviewHostError as e:
                    logger.error(f"Could not comment on {first.file}:{first.line} for {source}: {e}")
                    errors.append(f"{first.file}:{first.line}: {e}")

            if top_level:
                body = render_comment(fingerprint(source, top_level[0]), source, top_level)
                try:
                    self.host.post_thread_comment(number, body)
                    logger.debug(f"Commented on PR:\n{body}")
                except ReviewHostError as e:
                    logger.error(f"Could not comment on #{number} for {source}: {e}")
                    errors.append(f"#{number}: {e}")

        if self.cli_formatter is not None:
            self.cli_formatter.format(source, inspection_import, result)

        if errors:
            raise ReconciliationError(f"could not post comments for {source}: " + "; ".join(errors))

    def after_all(self, inspection_import: Import) -> None:
        """Resolve every indexed comment no checker reported again."""
        errors = []

        with self._lock:
            visited = set()
            stale = [a for annotations in self._existing.values() for a in annotations if a.stale]
            for annotation in stale:
                if annotation.key in visited:
                    continue
                visited.add(annotation.key)

                try:
                    if annotation.kind == AnnotationKind.FILE_LINE:
                        self.host.resolve_line_annotation(annotation)
                    else:
                        self.host.resolve_thread_annotation(annotation)
                except ReviewHostError as e:
                    logger.error(f"Could not resolve comment {annotation.id}: {e}")
                    errors.append(f"{annotation.id}: {e}")

            logger.info(f"Resolved {len(visited) - len(errors)} stale comments")
            self._existing = {}

        if errors:
            raise ReconciliationError("could not resolve comments: " + "; ".join(errors))

    def _pull_number(self, inspection_import: Import) -> int:
        number = inspection_import.pull.number
        if number <= 0:
            raise ReconciliationError("no pull request to comment on")
        return number
