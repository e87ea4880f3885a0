"""
Diff Parser

Parses unified diff text (``git diff`` output) into a ChangeSet.
"""

import re
import logging
from typing import List, Optional

from ..models.change_set import (
    ChangeSet,
    DiffLine,
    FileChange,
    Hunk,
    LINE_ADDED,
    LINE_CONTEXT,
    LINE_DELETED,
)


logger = logging.getLogger(__name__)

DEV_NULL = "/dev/null"


class DiffParser:
    """
    Parser for unified diffs.

    Understands ``git diff`` extended headers (new, deleted, renamed and
    binary files) as well as plain ``---``/``+++`` diffs.
    """

    def __init__(self):
        self.diff_header_pattern = re.compile(r'^@@\s*-(\d+)(?:,(\d+))?\s*\+(\d+)(?:,(\d+))?\s*@@(.*)$')
        self.binary_file_pattern = re.compile(r'^Binary files? .* differ')

    def parse(self, diff_text: str) -> ChangeSet:
        """
        Parse diff text into a ChangeSet.

        Args:
            diff_text: Raw unified diff

        Returns:
            ChangeSet with one FileChange per file in the diff
        """
        files: List[FileChange] = []
        current_file: Optional[FileChange] = None
        current_hunk: Optional[Hunk] = None
        old_remaining = new_remaining = 0
        old_line = new_line = 0

        for line in diff_text.splitlines():
            in_hunk = current_hunk is not None and (old_remaining > 0 or new_remaining > 0)

            if in_hunk:
                if line.startswith('\\'):
                    # "\ No newline at end of file"
                    continue
                if line.startswith('+'):
                    current_hunk.lines.append(DiffLine(LINE_ADDED, line[1:], new_line=new_line))
                    new_line += 1
                    new_remaining -= 1
                    continue
                if line.startswith('-'):
                    current_hunk.lines.append(DiffLine(LINE_DELETED, line[1:], old_line=old_line))
                    old_line += 1
                    old_remaining -= 1
                    continue
                if line.startswith(' ') or line == '':
                    current_hunk.lines.append(DiffLine(LINE_CONTEXT, line[1:], old_line=old_line, new_line=new_line))
                    old_line += 1
                    new_line += 1
                    old_remaining -= 1
                    new_remaining -= 1
                    continue
                logger.debug(f"Hunk ended early at line: {line!r}")
                current_hunk = None

            if line.startswith('diff --git '):
                current_file = self._start_file(files, current_file, self._path_from_git_header(line))
                current_hunk = None
                continue

            if line.startswith('--- ') and (current_file is None or current_file.hunks):
                # Plain unified diff without a "diff --git" header
                old_path = self._strip_prefix(line[4:])
                current_file = self._start_file(files, current_file, "" if old_path == DEV_NULL else old_path)
                if old_path == DEV_NULL:
                    current_file.status = 'added'
                current_hunk = None
                continue

            if current_file is None:
                continue

            if line.startswith('new file mode'):
                current_file.status = 'added'
            elif line.startswith('deleted file mode'):
                current_file.status = 'deleted'
            elif line.startswith('rename from '):
                current_file.old_path = line[len('rename from '):]
                current_file.status = 'renamed'
            elif line.startswith('rename to '):
                current_file.path = line[len('rename to '):]
            elif self.binary_file_pattern.match(line):
                current_file.binary = True
            elif line.startswith('--- '):
                old_path = self._strip_prefix(line[4:])
                if old_path == DEV_NULL:
                    current_file.status = 'added'
                elif current_file.status == 'deleted' or not current_file.path:
                    current_file.path = old_path
            elif line.startswith('+++ '):
                new_path = self._strip_prefix(line[4:])
                if new_path == DEV_NULL:
                    current_file.status = 'deleted'
                else:
                    current_file.path = new_path
            else:
                header_match = self.diff_header_pattern.match(line)
                if header_match:
                    current_hunk = Hunk(
                        old_start=int(header_match.group(1)),
                        old_lines=int(header_match.group(2) or 1),
                        new_start=int(header_match.group(3)),
                        new_lines=int(header_match.group(4) or 1),
                        header=header_match.group(5).strip(),
                    )
                    current_file.hunks.append(current_hunk)
                    old_line, new_line = current_hunk.old_start, current_hunk.new_start
                    old_remaining, new_remaining = current_hunk.old_lines, current_hunk.new_lines

        if current_file is not None:
            files.append(current_file)

        change_set = ChangeSet(files=files)
        logger.info(f"Parsed diff: {len(files)} files, +{change_set.total_additions}/-{change_set.total_deletions}")
        return change_set

    def _start_file(self, files: List[FileChange], current: Optional[FileChange], path: str) -> FileChange:
        if current is not None:
            files.append(current)
        return FileChange(path=path, status='modified')

    def _path_from_git_header(self, line: str) -> str:
        parts = line.split(' b/', 1)
        return parts[1] if len(parts) > 1 else ""

    def _strip_prefix(self, path: str) -> str:
        # Drop a trailing timestamp ("file\t2024-01-01 ...") and the a/ b/ prefix
        path = path.split('\t', 1)[0].strip()
        if path.startswith('a/') or path.startswith('b/'):
            return path[2:]
        return path


def parse_diff(diff_text: str) -> ChangeSet:
    """Parse unified diff text into a ChangeSet."""
    return DiffParser().parse(diff_text)
