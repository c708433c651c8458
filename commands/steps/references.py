"""Branch / tag choice."""

from commands.context import GitContext
from commands.git import GitReference, Repository
from wizard.outcome import BREAK, Continue, StepOutcome
from wizard.steps import PickItem, SeparatorItem, can_pick_step_continue, create_pick_step


async def _reference_items(
    repo: Repository, *, include_tags: bool, picked: str | None
) -> list[PickItem]:
    items: list[PickItem] = []
    branches = await repo.get_branches()
    for branch in sorted(branches, key=lambda b: (b.remote, not b.current, b.name)):
        items.append(
            PickItem(
                label=branch.name,
                item=branch,
                description="current" if branch.current else ("remote" if branch.remote else ""),
                detail=(branch.sha or "")[:8],
                picked=branch.name == picked,
            )
        )
    if include_tags:
        tags = await repo.get_tags()
        if tags and items:
            items.append(SeparatorItem())
        for tag in tags:
            items.append(
                PickItem(label=tag.name, item=tag, description="tag", detail=(tag.sha or "")[:8], picked=tag.name == picked)
            )
    return items


async def pick_branch_or_tag_step(
    repo: Repository,
    context: GitContext,
    *,
    title: str,
    placeholder: str,
    picked: GitReference | str | None = None,
    can_go_back: bool = True,
) -> StepOutcome[GitReference]:
    picked_name = picked.name if isinstance(picked, GitReference) else picked
    step = create_pick_step(
        title,
        _reference_items(repo, include_tags=context.show_tags, picked=picked_name),
        placeholder=placeholder,
        can_go_back=can_go_back,
    )
    selection = await context.show(step)
    if not can_pick_step_continue(step, selection):
        return BREAK
    reference = selection[0].item
    if not isinstance(reference, GitReference):
        return BREAK
    return Continue(reference)
