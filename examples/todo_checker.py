#!/usr/bin/env python3
"""
TODO Checker

Example checker that warns about every TODO added by a change.

Usage:
    git diff main | manifest inspect -i "python examples/todo_checker.py"

Or in manifest.config.yaml:
    manifest:
      checkers:
        todos:
          command: python examples/todo_checker.py
"""

from manifest.checkers import wrap
from manifest.models.change_set import LINE_ADDED
from manifest.models.inspection import Import
from manifest.models.result import Result


def find_todos(entry: Import, result: Result) -> None:
    for file_change in entry.change_set.files:
        if file_change.binary:
            continue
        for hunk in file_change.hunks:
            for line in hunk.lines:
                if line.kind == LINE_ADDED and "TODO" in line.content:
                    result.warn_line(file_change.path, "RIGHT", line.new_line, "New TODO added; consider opening an issue instead.")


if __name__ == "__main__":
    wrap("todos", find_todos)
