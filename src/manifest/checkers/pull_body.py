"""Ensures the pull request has a description."""

from ..models.inspection import Import
from ..models.result import Result


def pull_body(entry: Import, result: Result) -> None:
    if not entry.pull.title and not entry.pull.description and entry.strict:
        result.failure = "No pull request description provided"

    if not entry.pull.description.strip():
        result.error("It looks like your pull request description is empty! Please provide a description of your changes.")
