"""
Change Set Data Models

Structured form of a unified diff handed to every checker.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


LINE_ADDED = "add"
LINE_DELETED = "delete"
LINE_CONTEXT = "context"


@dataclass
class DiffLine:
    """A single line inside a hunk."""
    kind: str  # 'add', 'delete', 'context'
    content: str
    old_line: Optional[int] = None
    new_line: Optional[int] = None

    def __post_init__(self):
        if self.kind not in {LINE_ADDED, LINE_DELETED, LINE_CONTEXT}:
            raise ValueError(f"Invalid line kind: {self.kind}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "content": self.content,
            "oldLine": self.old_line,
            "newLine": self.new_line,
        }


@dataclass
class Hunk:
    """A hunk of a file diff."""
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    header: str = ""
    lines: List[DiffLine] = field(default_factory=list)

    def __post_init__(self):
        if self.old_start < 0 or self.new_start < 0:
            raise ValueError("Line numbers must be non-negative")
        if self.old_lines < 0 or self.new_lines < 0:
            raise ValueError("Line counts must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "oldStart": self.old_start,
            "oldLines": self.old_lines,
            "newStart": self.new_start,
            "newLines": self.new_lines,
            "header": self.header,
            "lines": [line.to_dict() for line in self.lines],
        }


@dataclass
class FileChange:
    """Changes made to one file."""
    path: str
    status: str  # 'added', 'modified', 'deleted', 'renamed'
    old_path: Optional[str] = None
    binary: bool = False
    hunks: List[Hunk] = field(default_factory=list)

    def __post_init__(self):
        valid_statuses = {'added', 'modified', 'deleted', 'renamed'}
        if self.status not in valid_statuses:
            raise ValueError(f"Invalid status: {self.status}")

    @property
    def additions(self) -> int:
        return sum(1 for h in self.hunks for line in h.lines if line.kind == LINE_ADDED)

    @property
    def deletions(self) -> int:
        return sum(1 for h in self.hunks for line in h.lines if line.kind == LINE_DELETED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "oldPath": self.old_path,
            "status": self.status,
            "binary": self.binary,
            "additions": self.additions,
            "deletions": self.deletions,
            "hunks": [hunk.to_dict() for hunk in self.hunks],
        }


@dataclass
class ChangeSet:
    """All file changes of a diff."""
    files: List[FileChange] = field(default_factory=list)

    @property
    def total_additions(self) -> int:
        return sum(f.additions for f in self.files)

    @property
    def total_deletions(self) -> int:
        return sum(f.deletions for f in self.files)

    def get_file(self, path: str) -> Optional[FileChange]:
        """Return the change for ``path`` if the diff touches it."""
        for file_change in self.files:
            if file_change.path == path:
                return file_change
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"files": [f.to_dict() for f in self.files]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChangeSet":
        files = []
        for file_data in data.get("files") or []:
            hunks = []
            for hunk_data in file_data.get("hunks") or []:
                lines = [
                    DiffLine(
                        kind=line["type"],
                        content=line.get("content", ""),
                        old_line=line.get("oldLine"),
                        new_line=line.get("newLine"),
                    )
                    for line in hunk_data.get("lines") or []
                ]
                hunks.append(Hunk(
                    old_start=hunk_data["oldStart"],
                    old_lines=hunk_data["oldLines"],
                    new_start=hunk_data["newStart"],
                    new_lines=hunk_data["newLines"],
                    header=hunk_data.get("header", ""),
                    lines=lines,
                ))
            files.append(FileChange(
                path=file_data["path"],
                status=file_data.get("status", "modified"),
                old_path=file_data.get("oldPath"),
                binary=file_data.get("binary", False),
                hunks=hunks,
            ))
        return cls(files=files)
