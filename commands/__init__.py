"""Git wizards and the registry they are resolved through."""

from commands.branch_create import BranchCreateCommand
from commands.branch_delete import BranchDeleteCommand
from commands.stash_push import StashPushCommand
from commands.worktree_create import WorktreeCreateCommand
from commands.worktree_delete import WorktreeDeleteCommand
from wizard.registry import CommandRegistry

COMMANDS = (
    BranchCreateCommand,
    BranchDeleteCommand,
    StashPushCommand,
    WorktreeCreateCommand,
    WorktreeDeleteCommand,
)


def build_registry() -> CommandRegistry:
    """Registry holding every git wizard, in menu order."""
    registry = CommandRegistry()
    for command in COMMANDS:
        registry.register(command)
    return registry


__all__ = [
    "COMMANDS",
    "BranchCreateCommand",
    "BranchDeleteCommand",
    "StashPushCommand",
    "WorktreeCreateCommand",
    "WorktreeDeleteCommand",
    "build_registry",
]
