"""Delete local branches."""

import logging
from dataclasses import dataclass, field

from commands.context import GitContext
from commands.git import BranchDeleteError, BranchDeleteErrorReason, GitBranch, GitError, Repository
from commands.steps import append_repos_to_title, pick_branches_step, repository_step
from wizard.command import WizardCommand
from wizard.context import StepContext
from wizard.controller import StepsController
from wizard.deferred import Deferred, cancel_if_pending
from wizard.outcome import BREAK, Break, Continue, StepOutcome
from wizard.render.base import MessageLevel
from wizard.steps import can_pick_step_continue, create_confirm_step, create_flags_item

logger = logging.getLogger(__name__)


class Steps:
    PICK_REPO = "branch-delete:pick-repo"
    PICK_BRANCHES = "branch-delete:pick-branches"
    CONFIRM = "branch-delete:confirm"


@dataclass
class BranchDeleteState:
    repo: Repository | str | None = None
    references: list[GitBranch | str] | None = None
    flags: list[str] = field(default_factory=list)
    confirm: bool | None = None
    result: Deferred[list[str]] | None = None


class BranchDeleteCommand(WizardCommand[BranchDeleteState]):
    key = "branch-delete"
    label = "delete branches"
    title = "Delete Branches"
    description = "deletes the specified local branches"
    state_type = BranchDeleteState

    def create_context(self, parent: StepContext | None = None) -> GitContext:
        if parent is not None:
            return parent.derive(GitContext, title=self.title)
        return GitContext(title=self.title, repos=list(self.host.repos))

    async def steps(self, state: BranchDeleteState, context: GitContext) -> StepOutcome[None]:
        state.flags = list(state.flags)
        with StepsController(context, self) as steps:
            try:
                while not steps.is_complete:
                    context.title = self.title

                    if not await repository_step(state, context, steps, Steps.PICK_REPO):
                        break
                    repo: Repository = state.repo

                    if state.references and any(isinstance(r, str) for r in state.references):
                        state.references = await self._resolve(repo, state.references)

                    if steps.is_at_step(Steps.PICK_BRANCHES) or not state.references:
                        with steps.enter_step(Steps.PICK_BRANCHES) as step:
                            result = await pick_branches_step(
                                repo,
                                context,
                                title=append_repos_to_title(context.title, repo, context),
                                placeholder="Choose branches to delete",
                                filter=lambda b: not b.current and not b.remote,
                                picked=[r.name for r in state.references or []],
                                can_go_back=steps.can_go_back,
                            )
                            if isinstance(result, Break):
                                state.references = None
                                if step.go_back() is None:
                                    break
                                continue
                            state.references = result.value

                    if self.confirm(state.confirm) and steps.is_at_step_or_unset(Steps.CONFIRM):
                        with steps.enter_step(Steps.CONFIRM) as step:
                            result = await self._confirm_step(state, context, steps.can_go_back)
                            if isinstance(result, Break):
                                if step.go_back() is None:
                                    break
                                continue
                            state.flags = result.value

                    deleted = await self._delete(state, repo)
                    if state.result is not None:
                        state.result.resolve(deleted)
                    steps.mark_steps_complete()
            finally:
                cancel_if_pending(state.result, "Delete Branches cancelled")

            return Continue(None) if steps.is_complete else BREAK

    @staticmethod
    async def _resolve(repo: Repository, references: list[GitBranch | str]) -> list[GitBranch]:
        branches: list[GitBranch] = []
        for ref in references:
            if isinstance(ref, str):
                branch = await repo.get_branch(ref)
                if branch is None:
                    logger.warning("Branch %s not found in %s", ref, repo.name)
                    continue
                ref = branch
            branches.append(ref)
        return branches

    async def _delete(self, state: BranchDeleteState, repo: Repository) -> list[str]:
        deleted: list[str] = []
        for branch in state.references or []:
            force = "--force" in state.flags
            while True:
                try:
                    await repo.delete_branch(branch.name, force=force)
                except BranchDeleteError as e:
                    if e.is_reason(BranchDeleteErrorReason.NOT_FULLY_MERGED) and not force:
                        choice = await self.host.ui.show_message(
                            MessageLevel.WARNING,
                            f"Unable to delete branch '{branch.name}' as it is not fully merged.\n\n"
                            "Would you like to force delete it?",
                            "Force Delete",
                            "Cancel",
                            modal=True,
                        )
                        if choice == "Force Delete":
                            force = True
                            continue
                        break
                    await self.host.ui.show_message(MessageLevel.ERROR, f"Unable to delete branch: {e}")
                    break
                except GitError as e:
                    logger.warning("Deleting branch %s failed: %s", branch.name, e)
                    await self.host.ui.show_message(MessageLevel.ERROR, f"Unable to delete branch: {e}")
                    break
                logger.info("Deleted branch %s in %s", branch.name, repo.name)
                deleted.append(branch.name)
                break
        return deleted

    async def _confirm_step(
        self, state: BranchDeleteState, context: GitContext, can_go_back: bool
    ) -> StepOutcome[list[str]]:
        names = [b.name for b in state.references or []]
        target = f"branch {names[0]}" if len(names) == 1 else f"{len(names)} branches"
        confirmations = [
            create_flags_item(state.flags, [], "Delete Branches", detail=f"Will delete {target}"),
            create_flags_item(
                state.flags,
                ["--force"],
                "Force Delete Branches",
                detail=f"Will forcibly delete {target}, even if unmerged",
            ),
        ]
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
