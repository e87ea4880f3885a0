"""
Comment Fingerprints

A fingerprint identifies "the same" diagnostic location across runs. It is
embedded in each posted comment as a hidden marker:

    <!-- manifest:<checker>[:<file>:<line>:<side>] -->
"""

from typing import List

from ..models.result import Comment


FINGERPRINT_PREFIX = "manifest:"
MARKER_OPEN = "<!--"
MARKER_CLOSE = "-->"


def fingerprint(source: str, comment: Comment) -> str:
    """
    Derive the fingerprint of a diagnostic.

    Top-level diagnostics of a checker all share one fingerprint. Line
    diagnostics include the file, line and side but never the text.
    """
    if not comment.is_line_scoped:
        return f"{FINGERPRINT_PREFIX}{source}"

    # TODO: track lines by hunk position so fingerprints survive unrelated edits above them
    return f"{FINGERPRINT_PREFIX}{source}:{comment.file}:{comment.line}:{comment.side.value}"


def marker(value: str) -> str:
    return f"{MARKER_OPEN} {value} {MARKER_CLOSE}"


def extract_fingerprints(body: str) -> List[str]:
    """
    Return every fingerprint marker in a comment body, in order.

    Only complete single-line ``<!-- manifest:... -->`` markers count; any
    other HTML comment is ignored.
    """
    fingerprints = []
    position = 0

    while True:
        start = body.find(MARKER_OPEN, position)
        if start == -1:
            break

        end = body.find(MARKER_CLOSE, start + len(MARKER_OPEN))
        if end == -1:
            break

        value = body[start + len(MARKER_OPEN):end].strip(" ")
        position = end + len(MARKER_CLOSE)

        if "\n" in value or not value.startswith(FINGERPRINT_PREFIX):
            continue
        if len(value) == len(FINGERPRINT_PREFIX):
            continue

        fingerprints.append(value)

    return fingerprints
