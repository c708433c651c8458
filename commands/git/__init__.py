"""Git collaborator: models, failures and the CLI-backed repository."""

from commands.git.errors import (
    BranchDeleteError,
    BranchDeleteErrorReason,
    BranchError,
    BranchErrorReason,
    GitError,
    StashPushError,
    StashPushErrorReason,
    WorktreeCreateError,
    WorktreeCreateErrorReason,
    WorktreeDeleteError,
    WorktreeDeleteErrorReason,
)
from commands.git.models import GitBranch, GitReference, GitStash, GitWorktree, ReferenceType
from commands.git.repository import Repository, discover_repositories

__all__ = [
    "BranchDeleteError",
    "BranchDeleteErrorReason",
    "BranchError",
    "BranchErrorReason",
    "GitBranch",
    "GitError",
    "GitReference",
    "GitStash",
    "GitWorktree",
    "ReferenceType",
    "Repository",
    "StashPushError",
    "StashPushErrorReason",
    "WorktreeCreateError",
    "WorktreeCreateErrorReason",
    "WorktreeDeleteError",
    "WorktreeDeleteErrorReason",
    "discover_repositories",
]
