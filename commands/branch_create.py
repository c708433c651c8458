"""Create a branch, optionally switching to it or opening it in a new worktree."""

import logging
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict

from commands.context import GitContext
from commands.git import (
    BranchError,
    BranchErrorReason,
    GitBranch,
    GitError,
    GitReference,
    GitWorktree,
    Repository,
)
from commands.steps import (
    append_repos_to_title,
    input_branch_name_step,
    pick_branch_or_tag_step,
    repository_step,
)
from wizard.command import WizardCommand
from wizard.context import StepContext
from wizard.controller import StepsController
from wizard.deferred import Deferred, cancel_if_pending
from wizard.errors import WizardCancelledError
from wizard.outcome import BREAK, Break, Continue, StepOutcome
from wizard.registry import WizardInvocation, run_nested
from wizard.render.base import MessageLevel
from wizard.steps import can_pick_step_continue, create_confirm_step, create_flags_item

logger = logging.getLogger(__name__)


class Steps:
    PICK_REPO = "branch-create:pick-repo"
    PICK_REF = "branch-create:pick-ref"
    INPUT_NAME = "branch-create:input-name"
    CONFIRM = "branch-create:confirm"
    CONFIRM_CREATE_WORKTREE = "branch-create:confirm-create-worktree"


class BranchCreateResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    branch: GitBranch | None = None
    worktree: GitWorktree | None = None


@dataclass
class BranchCreateState:
    repo: Repository | str | None = None
    reference: GitReference | str | None = None
    name: str | None = None
    suggested_name: str | None = None
    flags: list[str] = field(default_factory=list)
    confirm: bool | None = None
    confirm_options: list[str] | None = None
    result: Deferred[BranchCreateResult] | None = None


class BranchCreateCommand(WizardCommand[BranchCreateState]):
    key = "branch-create"
    label = "create branch"
    title = "Create Branch"
    description = "creates a new branch"
    state_type = BranchCreateState

    def create_context(self, parent: StepContext | None = None) -> GitContext:
        if parent is not None:
            return parent.derive(GitContext, title=self.title)
        return GitContext(title=self.title, repos=list(self.host.repos), show_tags=True)

    async def steps(self, state: BranchCreateState, context: GitContext) -> StepOutcome[None]:
        state.flags = list(state.flags)
        with StepsController(context, self) as steps:
            try:
                while not steps.is_complete:
                    context.title = self.title

                    if not await repository_step(state, context, steps, Steps.PICK_REPO):
                        break
                    repo: Repository = state.repo

                    if isinstance(state.reference, str):
                        state.reference = await repo.get_reference(state.reference)

                    if steps.is_at_step(Steps.PICK_REF) or state.reference is None:
                        with steps.enter_step(Steps.PICK_REF) as step:
                            result = await pick_branch_or_tag_step(
                                repo,
                                context,
                                title=append_repos_to_title(f"{context.title} from", repo, context),
                                placeholder="Choose a base to create the new branch from",
                                picked=state.reference,
                                can_go_back=steps.can_go_back,
                            )
                            if isinstance(result, Break):
                                state.reference = None
                                if step.go_back() is None:
                                    break
                                continue
                            state.reference = result.value

                    reference: GitReference = state.reference
                    if steps.is_at_step(Steps.INPUT_NAME) or not state.name:
                        with steps.enter_step(Steps.INPUT_NAME) as step:
                            result = await input_branch_name_step(
                                repo,
                                context,
                                title=append_repos_to_title(f"{context.title} from {reference.label}", repo, context),
                                value=state.name
                                or state.suggested_name
                                or (reference.name_without_remote if reference.remote else None),
                                can_go_back=steps.can_go_back,
                            )
                            if isinstance(result, Break):
                                if step.go_back() is None:
                                    break
                                continue
                            state.name = result.value

                    if self.confirm(state.confirm) and steps.is_at_step_or_unset(Steps.CONFIRM):
                        with steps.enter_step(Steps.CONFIRM) as step:
                            result = await self._confirm_step(state, context, steps.can_go_back)
                            if isinstance(result, Break):
                                if step.go_back() is None:
                                    break
                                continue
                            state.flags = result.value

                    if "--worktree" in state.flags:
                        with steps.enter_step(Steps.CONFIRM_CREATE_WORKTREE) as step:
                            worktree_result: Deferred[GitWorktree] | None = (
                                Deferred() if state.result is not None else None
                            )
                            outcome = await run_nested(
                                self.host,
                                WizardInvocation(
                                    "worktree-create",
                                    state={
                                        "repo": repo,
                                        "reference": reference,
                                        "create_branch": state.name,
                                        "flags": ["-b"],
                                    },
                                    result=worktree_result,
                                ),
                                context,
                                self.key,
                            )
                            if isinstance(outcome, Break):
                                if step.go_back() is None:
                                    break
                                continue
                            steps.mark_steps_complete()
                            if worktree_result is not None and state.result is not None:
                                try:
                                    worktree = await worktree_result.wait()
                                except WizardCancelledError as e:
                                    state.result.cancel(e)
                                else:
                                    branch = await repo.get_branch(state.name)
                                    state.result.resolve(BranchCreateResult(branch=branch, worktree=worktree))
                        continue

                    try:
                        if "--switch" in state.flags:
                            await repo.switch(reference, create_branch=state.name)
                        else:
                            await repo.create_branch(state.name, reference.ref)
                    except BranchError as e:
                        if e.reason in (BranchErrorReason.ALREADY_EXISTS, BranchErrorReason.INVALID_NAME):
                            await self.host.ui.show_message(MessageLevel.WARNING, f"Unable to create branch: {e}")
                            steps.go_back_to_step(Steps.INPUT_NAME)
                            continue
                        await self.host.ui.show_message(MessageLevel.ERROR, f"Unable to create branch '{state.name}': {e}")
                        break
                    except GitError as e:
                        logger.warning("Creating branch %s failed: %s", state.name, e)
                        await self.host.ui.show_message(MessageLevel.ERROR, f"Unable to create branch '{state.name}': {e}")
                        break

                    logger.info("Created branch %s from %s in %s", state.name, reference.name, repo.name)
                    if state.result is not None:
                        state.result.resolve(BranchCreateResult(branch=await repo.get_branch(state.name)))
                    steps.mark_steps_complete()
            finally:
                cancel_if_pending(state.result, "Create Branch cancelled")

            return Continue(None) if steps.is_complete else BREAK

    async def _confirm_step(
        self, state: BranchCreateState, context: GitContext, can_go_back: bool
    ) -> StepOutcome[list[str]]:
        reference: GitReference = state.reference
        detail = f"Will create a new branch named {state.name} from {reference.label}"
        confirmations = [
            create_flags_item(state.flags, [], "Create Branch", detail=detail),
            create_flags_item(
                state.flags,
                ["--switch"],
                "Create & Switch to Branch",
                detail=f"{detail} and switch to it",
            ),
            create_flags_item(
                state.flags,
                ["--worktree"],
                "Create Branch in New Worktree",
                detail=f"{detail} in a new worktree",
            ),
        ]
        if state.confirm_options is not None:
            confirmations = [c for c in confirmations if not c.flags or c.flags[0] in state.confirm_options]
        step = create_confirm_step(
            append_repos_to_title(f"Confirm {context.title}", state.repo, context),
            confirmations,
            context,
            can_go_back=can_go_back,
        )
        selection = await context.show(step)
        if not can_pick_step_continue(step, selection):
            return BREAK
        return Continue(list(selection[0].item))
