"""Git action failures, classified by reason from git's output."""

import re
from enum import Enum


class GitError(Exception):
    """A git command failed."""

    def __init__(self, message: str, *, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


class _ReasonedError(GitError):
    """GitError carrying a reason parsed from git's output."""

    Reason: type[Enum]
    _patterns: tuple[tuple[re.Pattern[str], Enum], ...] = ()
    _messages: dict = {}

    def __init__(self, reason: Enum | None, *, target: str = "", stderr: str = "") -> None:
        detail = self._messages.get(reason) if reason is not None else None
        message = detail.format(target=target) if detail else (stderr.strip() or "git failed")
        super().__init__(message, stderr=stderr)
        self.reason = reason
        self.target = target

    @classmethod
    def from_output(cls, output: str, *, target: str = "") -> "_ReasonedError":
        for pattern, reason in cls._patterns:
            if pattern.search(output):
                return cls(reason, target=target, stderr=output)
        return cls(None, target=target, stderr=output)

    def is_reason(self, reason: Enum) -> bool:
        return self.reason is reason


class BranchErrorReason(str, Enum):
    ALREADY_EXISTS = "already_exists"
    INVALID_NAME = "invalid_name"


class BranchError(_ReasonedError):
    Reason = BranchErrorReason
    _patterns = (
        (re.compile(r"already exists", re.I), BranchErrorReason.ALREADY_EXISTS),
        (re.compile(r"is not a valid branch name", re.I), BranchErrorReason.INVALID_NAME),
    )
    _messages = {
        BranchErrorReason.ALREADY_EXISTS: "Branch '{target}' already exists",
        BranchErrorReason.INVALID_NAME: "'{target}' is not a valid branch name",
    }


class BranchDeleteErrorReason(str, Enum):
    NOT_FULLY_MERGED = "not_fully_merged"
    CHECKED_OUT = "checked_out"


class BranchDeleteError(_ReasonedError):
    Reason = BranchDeleteErrorReason
    _patterns = (
        (re.compile(r"not fully merged", re.I), BranchDeleteErrorReason.NOT_FULLY_MERGED),
        (re.compile(r"checked out at|used by worktree", re.I), BranchDeleteErrorReason.CHECKED_OUT),
    )
    _messages = {
        BranchDeleteErrorReason.NOT_FULLY_MERGED: "Branch '{target}' is not fully merged",
        BranchDeleteErrorReason.CHECKED_OUT: "Branch '{target}' is checked out in a worktree",
    }


class StashPushErrorReason(str, Enum):
    NOTHING_TO_SAVE = "nothing_to_save"
    CONFLICTING_STAGED_AND_UNSTAGED_LINES = "conflicting_staged_and_unstaged_lines"


class StashPushError(_ReasonedError):
    Reason = StashPushErrorReason
    _patterns = (
        (re.compile(r"No local changes to save", re.I), StashPushErrorReason.NOTHING_TO_SAVE),
        (
            re.compile(r"Cannot remove worktree changes", re.I),
            StashPushErrorReason.CONFLICTING_STAGED_AND_UNSTAGED_LINES,
        ),
    )
    _messages = {
        StashPushErrorReason.NOTHING_TO_SAVE: "No changes to stash",
        StashPushErrorReason.CONFLICTING_STAGED_AND_UNSTAGED_LINES: (
            "Staged changes share lines with unstaged changes and can't be stashed on their own"
        ),
    }


class WorktreeCreateErrorReason(str, Enum):
    ALREADY_CHECKED_OUT = "already_checked_out"
    ALREADY_EXISTS = "already_exists"


class WorktreeCreateError(_ReasonedError):
    Reason = WorktreeCreateErrorReason
    _patterns = (
        (re.compile(r"already checked out|already used by worktree", re.I), WorktreeCreateErrorReason.ALREADY_CHECKED_OUT),
        (re.compile(r"^fatal: '.*' already exists", re.I | re.M), WorktreeCreateErrorReason.ALREADY_EXISTS),
    )
    _messages = {
        WorktreeCreateErrorReason.ALREADY_CHECKED_OUT: "'{target}' is already checked out in another worktree",
        WorktreeCreateErrorReason.ALREADY_EXISTS: "'{target}' already exists and is not empty",
    }


class WorktreeDeleteErrorReason(str, Enum):
    DEFAULT_WORKING_TREE = "default_working_tree"
    DIRECTORY_NOT_EMPTY = "directory_not_empty"
    UNCOMMITTED_CHANGES = "uncommitted_changes"


class WorktreeDeleteError(_ReasonedError):
    Reason = WorktreeDeleteErrorReason
    _patterns = (
        (re.compile(r"is a main working tree", re.I), WorktreeDeleteErrorReason.DEFAULT_WORKING_TREE),
        (re.compile(r"contains modified or untracked files", re.I), WorktreeDeleteErrorReason.UNCOMMITTED_CHANGES),
        (re.compile(r"Directory not empty", re.I), WorktreeDeleteErrorReason.DIRECTORY_NOT_EMPTY),
    )
    _messages = {
        WorktreeDeleteErrorReason.DEFAULT_WORKING_TREE: "'{target}' is the main working tree and can't be deleted",
        WorktreeDeleteErrorReason.DIRECTORY_NOT_EMPTY: "'{target}' could not be removed: directory not empty",
        WorktreeDeleteErrorReason.UNCOMMITTED_CHANGES: "'{target}' has uncommitted changes",
    }
