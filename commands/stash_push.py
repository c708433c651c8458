"""Stash uncommitted changes."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from commands.context import GitContext
from commands.git import GitError, GitStash, Repository, StashPushError, StashPushErrorReason
from commands.steps import append_repos_to_title, repository_step
from wizard.command import WizardCommand
from wizard.context import StepContext
from wizard.controller import StepsController
from wizard.deferred import Deferred, cancel_if_pending
from wizard.outcome import BREAK, Break, Continue, StepOutcome
from wizard.render.base import MessageLevel
from wizard.steps import (
    InputStep,
    StepButton,
    can_input_step_continue,
    can_pick_step_continue,
    create_confirm_step,
    create_flags_item,
    create_input_step,
)

logger = logging.getLogger(__name__)

GENERATE_MESSAGE = StepButton("Generate Message", "Generate a stash message from the changes")


class Steps:
    PICK_REPO = "stash-push:pick-repo"
    INPUT_MESSAGE = "stash-push:input-message"
    CONFIRM = "stash-push:confirm"


@dataclass
class StashPushState:
    repo: Repository | str | None = None
    message: str | None = None
    paths: list[Path] | None = None
    only_staged_paths: list[Path] | None = None
    flags: list[str] = field(default_factory=list)
    confirm: bool | None = None
    result: Deferred[GitStash] | None = None


async def generate_stash_message(repo: Repository, *, staged: bool = False) -> str:
    """Summarize the changed files and diff size into a one-line message."""
    files = await repo.get_changed_files(staged=staged)
    if not files:
        raise StashPushError(StashPushErrorReason.NOTHING_TO_SAVE)
    names = ", ".join(Path(f).name for f in files[:3])
    if len(files) > 3:
        names += f" and {len(files) - 3} more"
    stat = await repo.get_diff_stat(staged=staged)
    return f"{names} ({stat})" if stat else names


class StashPushCommand(WizardCommand[StashPushState]):
    key = "stash-push"
    label = "push stash"
    title = "Push Stash"
    description = "stashes uncommitted changes"
    state_type = StashPushState

    def create_context(self, parent: StepContext | None = None) -> GitContext:
        if parent is not None:
            return parent.derive(GitContext, title=self.title)
        return GitContext(title=self.title, repos=list(self.host.repos))

    async def steps(self, state: StashPushState, context: GitContext) -> StepOutcome[None]:
        state.flags = list(state.flags)
        confirm_override: bool | None = None

        with StepsController(context, self) as steps:
            try:
                while not steps.is_complete:
                    context.title = self.title

                    if not await repository_step(state, context, steps, Steps.PICK_REPO):
                        break
                    repo: Repository = state.repo

                    if steps.is_at_step(Steps.INPUT_MESSAGE) or state.message is None:
                        with steps.enter_step(Steps.INPUT_MESSAGE) as step:
                            result = await self._input_message_step(state, context, steps.can_go_back)
                            if isinstance(result, Break):
                                state.message = None
                                if step.go_back() is None:
                                    break
                                continue
                            state.message = result.value

                    if self.confirm(confirm_override if confirm_override is not None else state.confirm) and (
                        steps.is_at_step_or_unset(Steps.CONFIRM)
                    ):
                        with steps.enter_step(Steps.CONFIRM) as step:
                            result = await self._confirm_step(state, context, steps.can_go_back)
                            if isinstance(result, Break):
                                if step.go_back() is None:
                                    break
                                continue
                            state.flags = result.value

                    try:
                        if "--snapshot" in state.flags:
                            stash = await repo.stash_snapshot(state.message)
                        else:
                            stash = await repo.stash_push(
                                state.message,
                                paths=state.paths,
                                include_untracked="--include-untracked" in state.flags,
                                keep_index="--keep-index" in state.flags,
                                only_staged="--staged" in state.flags,
                            )
                    except StashPushError as e:
                        if e.is_reason(StashPushErrorReason.NOTHING_TO_SAVE):
                            if "--include-untracked" not in state.flags:
                                confirm_override = True
                                await self.host.ui.show_message(
                                    MessageLevel.WARNING,
                                    'No changes to stash. Choose the "Push & Include Untracked" option, '
                                    "if you have untracked files.",
                                )
                                continue
                            await self.host.ui.show_message(MessageLevel.INFO, "No changes to stash.")
                            break
                        if (
                            e.is_reason(StashPushErrorReason.CONFLICTING_STAGED_AND_UNSTAGED_LINES)
                            and "--staged" in state.flags
                        ):
                            choice = await self.host.ui.show_message(
                                MessageLevel.WARNING,
                                "Changes that are both staged and unstaged can't be stashed by themselves. "
                                "Would you like to stash everything instead?",
                                "Stash Everything",
                                "Cancel",
                                modal=True,
                            )
                            if choice == "Stash Everything":
                                state.paths = state.only_staged_paths
                                state.flags.remove("--staged")
                                continue
                            break
                        await self.host.ui.show_message(MessageLevel.ERROR, f"Unable to stash changes: {e}")
                        break
                    except GitError as e:
                        logger.warning("Stashing in %s failed: %s", repo.name, e)
                        await self.host.ui.show_message(MessageLevel.ERROR, f"Unable to stash changes: {e}")
                        break

                    logger.info("Stashed changes in %s as %s", repo.name, stash.ref)
                    if state.result is not None:
                        state.result.resolve(stash)
                    steps.mark_steps_complete()
            finally:
                cancel_if_pending(state.result, "Push Stash cancelled")

            return Continue(None) if steps.is_complete else BREAK

    async def _input_message_step(
        self, state: StashPushState, context: GitContext, can_go_back: bool
    ) -> StepOutcome[str]:
        repo: Repository = state.repo

        async def on_click(step: InputStep, button: StepButton) -> None:
            if button != GENERATE_MESSAGE:
                return
            with step.freeze():
                step.validation_message = "Generating a stash message..."
                try:
                    message = await generate_stash_message(repo, staged="--staged" in state.flags)
                except GitError as e:
                    step.validation_message = f"Unable to generate a stash message: {e}"
                    return
                step.value = message
                step.validation_message = None

        step = create_input_step(
            append_repos_to_title(context.title, repo, context),
            prompt="Please provide a stash message",
            placeholder="Stash message",
            value=state.message or "",
            buttons=[GENERATE_MESSAGE],
            on_did_click_button=on_click,
            can_go_back=can_go_back,
        )
        value = await context.show(step)
        if not await can_input_step_continue(step, value):
            return BREAK
        return Continue(value)

    async def _confirm_step(
        self, state: StashPushState, context: GitContext, can_go_back: bool
    ) -> StepOutcome[list[str]]:
        detail = "Will stash uncommitted changes"
        if state.paths:
            detail = f"Will stash changes from {len(state.paths)} file(s)"
        confirmations = [
            create_flags_item(state.flags, [], "Push", detail=detail),
            create_flags_item(
                state.flags,
                ["--include-untracked"],
                "Push & Include Untracked",
                detail=f"{detail}, including untracked files",
            ),
            create_flags_item(
                state.flags,
                ["--keep-index"],
                "Push & Keep Staged",
                detail=f"{detail}, but will keep staged files intact",
            ),
            create_flags_item(state.flags, ["--staged"], "Push Staged Only", detail="Will stash only staged changes"),
            create_flags_item(
                state.flags,
                ["--snapshot"],
                "Snapshot",
                detail="Will stash uncommitted changes without changing the working tree",
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
