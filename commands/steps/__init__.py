"""Step builders shared by the git wizards."""

from commands.steps.branches import input_branch_name_step, pick_branches_step
from commands.steps.references import pick_branch_or_tag_step
from commands.steps.repositories import (
    append_repos_to_title,
    pick_repository_step,
    repository_step,
    resolve_repository,
)
from commands.steps.worktrees import get_worktrees, pick_worktrees_step

__all__ = [
    "append_repos_to_title",
    "get_worktrees",
    "input_branch_name_step",
    "pick_branch_or_tag_step",
    "pick_branches_step",
    "pick_repository_step",
    "pick_worktrees_step",
    "repository_step",
    "resolve_repository",
]
