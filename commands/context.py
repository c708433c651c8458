"""Step contexts and the host for git wizards."""

from dataclasses import dataclass, field
from pathlib import Path

from commands.git import GitWorktree, Repository
from wizard.context import StepContext
from wizard.host import WizardHost


@dataclass
class GitWizardHost(WizardHost):
    """Host with the repositories open in this session."""

    repos: list[Repository]


@dataclass
class GitContext(StepContext):
    repos: list[Repository] = field(default_factory=list)
    show_tags: bool = True


@dataclass
class WorktreeContext(GitContext):
    default_root: Path | None = None
    picked_root_folder: Path | None = None
    picked_specific_folder: Path | None = None
    worktrees: list[GitWorktree] | None = None
