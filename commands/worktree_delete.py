"""Delete worktrees, optionally queueing deletion of their branches."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from commands.context import WorktreeContext
from commands.git import GitError, GitWorktree, Repository, WorktreeDeleteError, WorktreeDeleteErrorReason
from commands.steps import append_repos_to_title, get_worktrees, pick_worktrees_step, repository_step
from wizard.command import WizardCommand
from wizard.context import StepContext
from wizard.controller import StepsController
from wizard.deferred import Deferred, cancel_if_pending
from wizard.outcome import BREAK, Break, Continue, StepOutcome
from wizard.registry import WizardInvocation
from wizard.render.base import MessageLevel
from wizard.steps import can_pick_step_continue, create_confirm_step, create_flags_item

logger = logging.getLogger(__name__)


class Steps:
    PICK_REPO = "worktree-delete:pick-repo"
    PICK_WORKTREES = "worktree-delete:pick-worktrees"
    CONFIRM = "worktree-delete:confirm"


@dataclass
class WorktreeDeleteState:
    repo: Repository | str | None = None
    worktrees: list[GitWorktree | Path | str] | None = None
    flags: list[str] = field(default_factory=list)
    confirm: bool | None = None
    result: Deferred[list[GitWorktree]] | None = None


class WorktreeDeleteCommand(WizardCommand[WorktreeDeleteState]):
    key = "worktree-delete"
    label = "delete worktrees"
    title = "Delete Worktrees"
    description = "deletes the specified worktrees"
    state_type = WorktreeDeleteState

    @property
    def can_skip_confirm(self) -> bool:
        return False

    def create_context(self, parent: StepContext | None = None) -> WorktreeContext:
        if parent is not None:
            return parent.derive(WorktreeContext, title=self.title)
        return WorktreeContext(title=self.title, repos=list(self.host.repos))

    async def steps(self, state: WorktreeDeleteState, context: WorktreeContext) -> StepOutcome[None]:
        state.flags = list(state.flags)
        with StepsController(context, self) as steps:
            try:
                while not steps.is_complete:
                    context.title = self.title

                    if not await repository_step(state, context, steps, Steps.PICK_REPO):
                        break
                    repo: Repository = state.repo

                    if state.worktrees and any(isinstance(w, (str, Path)) for w in state.worktrees):
                        state.worktrees = await self._resolve(repo, context, state.worktrees)

                    if steps.is_at_step(Steps.PICK_WORKTREES) or not state.worktrees:
                        with steps.enter_step(Steps.PICK_WORKTREES) as step:
                            context.worktrees = None
                            result = await pick_worktrees_step(
                                repo,
                                context,
                                title=append_repos_to_title(context.title, repo, context),
                                placeholder="Choose worktrees to delete",
                                filter=lambda w: not w.is_default,
                                picked=state.worktrees,
                                can_go_back=steps.can_go_back,
                            )
                            if isinstance(result, Break):
                                state.worktrees = None
                                if step.go_back() is None:
                                    break
                                continue
                            state.worktrees = result.value

                    if self.confirm(state.confirm) and steps.is_at_step_or_unset(Steps.CONFIRM):
                        with steps.enter_step(Steps.CONFIRM) as step:
                            result = await self._confirm_step(state, context, steps.can_go_back)
                            if isinstance(result, Break):
                                if step.go_back() is None:
                                    break
                                continue
                            state.flags = result.value

                    deleted = await self._delete(state, repo)
                    context.worktrees = None
                    if state.result is not None:
                        state.result.resolve(deleted)
                    steps.mark_steps_complete()

                    branches = [w.branch for w in deleted if w.branch]
                    if "--delete-branches" in state.flags and branches:
                        logger.info("Queueing deletion of branches %s", branches)
                        self.host.execute_later(
                            WizardInvocation("branch-delete", state={"repo": repo, "references": branches})
                        )
            finally:
                cancel_if_pending(state.result, "Delete Worktrees cancelled")

            return Continue(None) if steps.is_complete else BREAK

    @staticmethod
    async def _resolve(
        repo: Repository, context: WorktreeContext, worktrees: list[GitWorktree | Path | str]
    ) -> list[GitWorktree]:
        by_path = {w.path.resolve(): w for w in await get_worktrees(repo, context)}
        resolved: list[GitWorktree] = []
        for ref in worktrees:
            if isinstance(ref, (str, Path)):
                worktree = by_path.get(Path(ref).expanduser().resolve())
                if worktree is None:
                    logger.warning("Worktree %s not found in %s", ref, repo.name)
                    continue
                ref = worktree
            resolved.append(ref)
        return resolved

    async def _delete(self, state: WorktreeDeleteState, repo: Repository) -> list[GitWorktree]:
        """Remove each picked worktree; offers a forced retry where git refuses."""
        deleted: list[GitWorktree] = []
        for worktree in state.worktrees or []:
            force = "--force" in state.flags
            while True:
                try:
                    await repo.delete_worktree(worktree.path, force=force)
                except WorktreeDeleteError as e:
                    if e.is_reason(WorktreeDeleteErrorReason.DEFAULT_WORKING_TREE):
                        await self.host.ui.show_message(
                            MessageLevel.ERROR, "Unable to delete the main worktree", modal=True
                        )
                        break
                    if not force and e.reason in (
                        WorktreeDeleteErrorReason.DIRECTORY_NOT_EMPTY,
                        WorktreeDeleteErrorReason.UNCOMMITTED_CHANGES,
                    ):
                        detail = (
                            "has uncommitted changes"
                            if e.is_reason(WorktreeDeleteErrorReason.UNCOMMITTED_CHANGES)
                            else "could not be fully removed"
                        )
                        choice = await self.host.ui.show_message(
                            MessageLevel.WARNING,
                            f"Unable to delete worktree because it {detail}.\n\n"
                            f"Would you like to force delete it?\n\n{worktree.path}",
                            "Force Delete",
                            "Cancel",
                            modal=True,
                        )
                        if choice == "Force Delete":
                            force = True
                            continue
                        break
                    await self.host.ui.show_message(MessageLevel.ERROR, f"Unable to delete worktree: {e}")
                    break
                except GitError as e:
                    logger.warning("Deleting worktree %s failed: %s", worktree.path, e)
                    await self.host.ui.show_message(MessageLevel.ERROR, f"Unable to delete worktree: {e}")
                    break
                logger.info("Deleted worktree %s", worktree.path)
                deleted.append(worktree)
                break
        return deleted

    async def _confirm_step(
        self, state: WorktreeDeleteState, context: WorktreeContext, can_go_back: bool
    ) -> StepOutcome[list[str]]:
        count = len(state.worktrees or [])
        label = "Worktree" if count == 1 else f"{count} Worktrees"
        target = state.worktrees[0].name if count == 1 else f"{count} worktrees"
        confirmations = [
            create_flags_item(state.flags, [], f"Delete {label}", detail=f"Will delete {target}"),
            create_flags_item(
                state.flags,
                ["--force"],
                f"Force Delete {label}",
                detail=f"Will forcibly delete {target}, including uncommitted changes",
            ),
            create_flags_item(
                state.flags,
                ["--delete-branches"],
                f"Delete {label} & Branches",
                detail=f"Will delete {target} and then their branches",
            ),
            create_flags_item(
                state.flags,
                ["--force", "--delete-branches"],
                f"Force Delete {label} & Branches",
                detail=f"Will forcibly delete {target}, including uncommitted changes, and then their branches",
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
