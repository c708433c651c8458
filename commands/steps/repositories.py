"""Repository choice."""

from commands.context import GitContext
from commands.git import Repository
from wizard.controller import StepsController
from wizard.outcome import BREAK, Break, Continue, StepOutcome
from wizard.steps import PickItem, can_pick_step_continue, create_pick_step


def append_repos_to_title(title: str, repo: Repository | None, context: GitContext) -> str:
    """'Create Branch' -> 'Create Branch · repo' when more than one repository is open."""
    if repo is None or len(context.repos) < 2:
        return title
    return f"{title} · {repo.name}"


def resolve_repository(value: Repository | str | None, context: GitContext) -> Repository | None:
    """Match a repository given by name or path against the open ones."""
    if value is None or isinstance(value, Repository):
        return value
    for repo in context.repos:
        if value in (repo.name, str(repo.path)):
            return repo
    return None


async def pick_repository_step(
    context: GitContext,
    *,
    picked: Repository | str | None = None,
    placeholder: str = "Choose a repository",
    can_go_back: bool = True,
) -> StepOutcome[Repository]:
    active = resolve_repository(picked, context)
    items = [
        PickItem(label=repo.name, item=repo, description=str(repo.path), picked=repo == active)
        for repo in context.repos
    ]
    step = create_pick_step(
        context.title,
        items,
        placeholder=placeholder if items else "No repositories found",
        active=next((i for i in items if i.picked), None),
        can_go_back=can_go_back,
    )
    selection = await context.show(step)
    if not can_pick_step_continue(step, selection):
        return BREAK
    return Continue(selection[0].item)


async def repository_step(state, context: GitContext, steps: StepsController, name: str) -> bool:
    """Fill `state.repo`, showing the picker only when it can't be decided.

    Skipped (and kept off the back-navigation stack) when a single repository
    is open or the state names one. Returns False when the body should stop.
    """
    revisit = steps.is_at_step(name)
    if not revisit and isinstance(state.repo, Repository):
        return True
    with steps.enter_step(name) as step:
        resolved = resolve_repository(state.repo, context)
        if len(context.repos) == 1 or (resolved is not None and not revisit):
            step.skip()
            state.repo = resolved or context.repos[0]
            return True
        result = await pick_repository_step(context, picked=state.repo, can_go_back=steps.can_go_back)
        if isinstance(result, Break):
            step.go_back()
            return False
        state.repo = result.value
        return True
