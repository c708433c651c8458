"""Git values handed to wizards and returned to callers."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class ReferenceType(str, Enum):
    BRANCH = "branch"
    TAG = "tag"
    REVISION = "revision"


class GitReference(BaseModel):
    """A branch, tag or bare revision."""

    model_config = ConfigDict(frozen=True)

    name: str
    ref: str
    ref_type: ReferenceType = ReferenceType.BRANCH
    remote: bool = False
    sha: str | None = None

    @property
    def name_without_remote(self) -> str:
        """'origin/feature/x' -> 'feature/x' for remote branches."""
        if self.remote and "/" in self.name:
            return self.name.split("/", 1)[1]
        return self.name

    @property
    def label(self) -> str:
        if self.ref_type is ReferenceType.REVISION:
            return (self.sha or self.ref)[:8]
        return self.name


class GitBranch(GitReference):
    current: bool = False
    upstream: str | None = None


class GitWorktree(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: Path
    branch: str | None = None
    sha: str | None = None
    is_default: bool = False
    detached: bool = False

    @property
    def name(self) -> str:
        return self.branch or self.path.name


class GitStash(BaseModel):
    model_config = ConfigDict(frozen=True)

    ref: str
    message: str
