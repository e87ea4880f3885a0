"""
Inspection Import Models

The Import is the read-only context every checker receives on stdin.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from .change_set import ChangeSet


@dataclass(frozen=True)
class Pull:
    """Pull request metadata."""
    number: int = 0
    title: str = ""
    description: str = ""
    owner: str = ""
    repo: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "title": self.title,
            "description": self.description,
            "owner": self.owner,
            "repo": self.repo,
        }


@dataclass(frozen=True)
class Import:
    """
    Input handed to every checker.

    Created once per run. Checkers only ever see its JSON form.
    """
    change_set: ChangeSet
    pull: Pull = field(default_factory=Pull)
    current_sha: str = ""
    strict: bool = False

    def with_pull(self, pull: Pull, current_sha: Optional[str] = None) -> "Import":
        """Return a copy with pull request details filled in."""
        return replace(
            self,
            pull=pull,
            current_sha=self.current_sha if current_sha is None else current_sha,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pull": self.pull.to_dict(),
            "strict": self.strict,
            "currentSha": self.current_sha,
            "diff": self.change_set.to_dict(),
        }

    def to_json(self) -> bytes:
        return json.dumps(self.to_dict()).encode("utf-8")

    @classmethod
    def from_json(cls, raw) -> "Import":
        data = json.loads(raw)
        pull_data = data.get("pull") or {}
        return cls(
            change_set=ChangeSet.from_dict(data.get("diff") or {}),
            pull=Pull(
                number=pull_data.get("number", 0),
                title=pull_data.get("title", ""),
                description=pull_data.get("description", ""),
                owner=pull_data.get("owner", ""),
                repo=pull_data.get("repo", ""),
            ),
            current_sha=data.get("currentSha", ""),
            strict=data.get("strict", False),
        )
