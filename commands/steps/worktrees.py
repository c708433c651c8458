"""Worktree lookups and choice."""

from collections.abc import Callable

from commands.context import WorktreeContext
from commands.git import GitWorktree, Repository
from wizard.outcome import BREAK, Continue, StepOutcome
from wizard.steps import (
    Directive,
    PickItem,
    can_pick_step_continue,
    create_directive_item,
    create_pick_step,
)


async def get_worktrees(repo: Repository, context: WorktreeContext) -> list[GitWorktree]:
    """Worktrees of `repo`, looked up once per wizard instance."""
    if context.worktrees is None:
        context.worktrees = await repo.get_worktrees()
    return context.worktrees


async def pick_worktrees_step(
    repo: Repository,
    context: WorktreeContext,
    *,
    title: str,
    placeholder: str,
    filter: Callable[[GitWorktree], bool] | None = None,
    picked: list[GitWorktree] | None = None,
    can_go_back: bool = True,
) -> StepOutcome[list[GitWorktree]]:
    worktrees = [w for w in await get_worktrees(repo, context) if filter is None or filter(w)]
    picked_paths = {w.path for w in picked or []}
    items: list[PickItem] = [
        PickItem(
            label=worktree.name,
            item=worktree,
            description=str(worktree.path),
            detail="detached" if worktree.detached else (worktree.sha or "")[:8],
            picked=worktree.path in picked_paths,
        )
        for worktree in worktrees
    ]
    if not items:
        placeholder = "No worktrees found"
        items = [create_directive_item(Directive.BACK), create_directive_item(Directive.CANCEL)]
    step = create_pick_step(title, items, placeholder=placeholder, multiselect=bool(worktrees), can_go_back=can_go_back)
    selection = await context.show(step)
    if not can_pick_step_continue(step, selection):
        return BREAK
    return Continue([i.item for i in selection])
