"""Branch naming and branch choice."""

from collections.abc import Callable

from commands.context import GitContext
from commands.git import GitBranch, Repository
from wizard.outcome import BREAK, Continue, StepOutcome
from wizard.steps import (
    Directive,
    PickItem,
    can_input_step_continue,
    can_pick_step_continue,
    create_directive_item,
    create_input_step,
    create_pick_step,
)


def _branch_name_validator(repo: Repository):
    async def validate(value: str) -> tuple[bool, str | None]:
        name = value.strip()
        if not name:
            return False, "Please enter a branch name"
        if not await repo.is_valid_branch_name(name):
            return False, f"'{name}' is not a valid branch name"
        if await repo.get_branch(name) is not None:
            return False, f"A branch named '{name}' already exists"
        return True, None

    return validate


async def input_branch_name_step(
    repo: Repository,
    context: GitContext,
    *,
    title: str,
    prompt: str = "Please provide a name for the new branch",
    placeholder: str = "Branch name",
    value: str | None = None,
    can_go_back: bool = True,
) -> StepOutcome[str]:
    step = create_input_step(
        title,
        prompt=prompt,
        placeholder=placeholder,
        value=value or "",
        validate=_branch_name_validator(repo),
        can_go_back=can_go_back,
    )
    value = await context.show(step)
    if not await can_input_step_continue(step, value):
        return BREAK
    return Continue(value.strip())


async def pick_branches_step(
    repo: Repository,
    context: GitContext,
    *,
    title: str,
    placeholder: str,
    filter: Callable[[GitBranch], bool] | None = None,
    picked: list[str] | None = None,
    can_go_back: bool = True,
) -> StepOutcome[list[GitBranch]]:
    """Multi-select over branches."""
    branches = [b for b in await repo.get_branches() if filter is None or filter(b)]
    picked_names = set(picked or [])
    items: list[PickItem] = [
        PickItem(
            label=branch.name,
            item=branch,
            description="remote" if branch.remote else "",
            detail=(branch.sha or "")[:8],
            picked=branch.name in picked_names,
        )
        for branch in branches
    ]
    if not items:
        placeholder = "No branches found"
        items = [create_directive_item(Directive.BACK), create_directive_item(Directive.CANCEL)]
    step = create_pick_step(title, items, placeholder=placeholder, multiselect=bool(branches), can_go_back=can_go_back)
    selection = await context.show(step)
    if not can_pick_step_continue(step, selection):
        return BREAK
    return Continue([i.item for i in selection])
