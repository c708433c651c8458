"""Create a worktree for a branch, tag or revision."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from commands.context import WorktreeContext
from commands.git import (
    GitError,
    GitReference,
    GitWorktree,
    ReferenceType,
    Repository,
    WorktreeCreateError,
    WorktreeCreateErrorReason,
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
from wizard.outcome import BREAK, Break, Continue, StepOutcome
from wizard.render.base import MessageLevel
from wizard.steps import (
    Directive,
    FlagsItem,
    PickItem,
    SeparatorItem,
    can_pick_step_continue,
    can_step_continue,
    create_confirm_step,
    create_custom_step,
    create_flags_item,
)

logger = logging.getLogger(__name__)

CHANGE_ROOT = "change-root"
CHOOSE_FOLDER = "choose-folder"


class Steps:
    PICK_REPO = "worktree-create:pick-repo"
    PICK_REF = "worktree-create:pick-ref"
    INPUT_BRANCH_NAME = "worktree-create:input-branch-name"
    CONFIRM = "worktree-create:confirm"
    CONFIRM_CHOOSE_PATH = "worktree-create:confirm-choose-path"


@dataclass
class WorktreeCreateState:
    repo: Repository | str | None = None
    reference: GitReference | str | None = None
    create_branch: str | None = None
    flags: list[str] = field(default_factory=list)
    uri: Path | None = None
    confirm: bool | None = None
    title: str | None = None
    result: Deferred[GitWorktree] | None = None


class WorktreeCreateCommand(WizardCommand[WorktreeCreateState]):
    key = "worktree-create"
    label = "create worktree"
    title = "Create Worktree"
    description = "creates a new worktree"
    state_type = WorktreeCreateState

    def __init__(self, host, invocation=None) -> None:
        super().__init__(host, invocation)
        self._can_skip_confirm_override: bool | None = None

    @property
    def can_skip_confirm(self) -> bool:
        return bool(self._can_skip_confirm_override)

    def create_context(self, parent: StepContext | None = None) -> WorktreeContext:
        if parent is not None:
            return parent.derive(WorktreeContext, title=self.title)
        return WorktreeContext(title=self.title, repos=list(self.host.repos), show_tags=True)

    async def steps(self, state: WorktreeCreateState, context: WorktreeContext) -> StepOutcome[None]:
        state.flags = list(state.flags)
        if state.uri is not None:
            state.uri = Path(state.uri)
        # Always confirm, unless an error recovery below asks to retry directly.
        state.confirm = True
        self._can_skip_confirm_override = None
        choose: str | None = None

        with StepsController(context, self) as steps:
            try:
                while not steps.is_complete:
                    context.title = state.title or self.title

                    if not await repository_step(state, context, steps, Steps.PICK_REPO):
                        break
                    repo: Repository = state.repo
                    if context.default_root is None:
                        context.default_root = repo.get_worktrees_default_root(self.host.settings)

                    if isinstance(state.reference, str):
                        state.reference = await repo.get_reference(state.reference)

                    if steps.is_at_step(Steps.PICK_REF) or state.reference is None:
                        with steps.enter_step(Steps.PICK_REF) as step:
                            context.picked_root_folder = None
                            context.picked_specific_folder = None
                            result = await pick_branch_or_tag_step(
                                repo,
                                context,
                                title=append_repos_to_title(f"{context.title} from", repo, context),
                                placeholder="Choose a branch or tag to create the new worktree from",
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
                    if state.uri is None:
                        state.uri = context.default_root

                    if "-b" in state.flags and (steps.is_at_step(Steps.INPUT_BRANCH_NAME) or not state.create_branch):
                        with steps.enter_step(Steps.INPUT_BRANCH_NAME) as step:
                            result = await input_branch_name_step(
                                repo,
                                context,
                                title=append_repos_to_title(f"{context.title} and New Branch", repo, context),
                                value=state.create_branch or reference.name_without_remote,
                                can_go_back=steps.can_go_back,
                            )
                            if isinstance(result, Break):
                                if step.go_back() is None:
                                    break
                                continue
                            state.create_branch = result.value

                    if self.confirm(state.confirm) and steps.is_at_step_or_unset(Steps.CONFIRM):
                        with steps.enter_step(Steps.CONFIRM) as step:
                            result = await self._confirm_step(state, context, steps.can_go_back)
                            if isinstance(result, Break):
                                if step.go_back() is None:
                                    break
                                continue
                            flags, target = result.value
                            if target in (CHANGE_ROOT, CHOOSE_FOLDER):
                                choose = target
                            else:
                                state.flags = flags
                                state.uri = target

                    if choose is not None:
                        with steps.enter_step(Steps.CONFIRM_CHOOSE_PATH) as step:
                            result = await self._choose_path_step(state, context, choose)
                            if isinstance(result, Break):
                                choose = None
                                if step.go_back() is None:
                                    break
                                continue
                            if choose == CHANGE_ROOT:
                                context.picked_root_folder = result.value
                                context.picked_specific_folder = None
                            else:
                                context.picked_specific_folder = result.value
                            choose = None
                            steps.go_back_to_step(Steps.CONFIRM)
                        continue

                    if "-b" in state.flags and not state.create_branch:
                        state.create_branch = reference.name_without_remote
                    path = self._worktree_path(state)
                    try:
                        worktree = await repo.create_worktree(
                            path,
                            commitish=reference.sha if reference.ref_type is ReferenceType.REVISION else reference.name,
                            create_branch=state.create_branch if "-b" in state.flags else None,
                            detach="--detach" in state.flags,
                            force="--force" in state.flags,
                        )
                    except WorktreeCreateError as e:
                        if e.is_reason(WorktreeCreateErrorReason.ALREADY_CHECKED_OUT) and "--force" not in state.flags:
                            if await self._recover_checked_out(state, reference):
                                continue
                            break
                        if e.is_reason(WorktreeCreateErrorReason.ALREADY_EXISTS):
                            await self.host.ui.show_message(
                                MessageLevel.ERROR,
                                f"Unable to create a new worktree in '{path}' because the folder already exists and is not empty.",
                                "OK",
                                modal=True,
                            )
                            state.confirm = True
                            self._can_skip_confirm_override = None
                            continue
                        await self.host.ui.show_message(MessageLevel.ERROR, f"Unable to create worktree: {e}")
                        break
                    except GitError as e:
                        logger.warning("Creating worktree at %s failed: %s", path, e)
                        await self.host.ui.show_message(MessageLevel.ERROR, f"Unable to create worktree: {e}")
                        break

                    context.worktrees = None
                    logger.info("Created worktree %s in %s", worktree.path, repo.name)
                    if state.result is not None:
                        state.result.resolve(worktree)
                    steps.mark_steps_complete()
            finally:
                cancel_if_pending(state.result, "Create Worktree cancelled")

            return Continue(None) if steps.is_complete else BREAK

    async def _recover_checked_out(self, state: WorktreeCreateState, reference: GitReference) -> bool:
        """Offer a new branch or a forced create. True to retry."""
        choice = await self.host.ui.show_message(
            MessageLevel.WARNING,
            f"Unable to create a new worktree because {reference.label} is already checked out.\n\n"
            "Would you like to create a new branch for this worktree or forcibly create it anyway?",
            "Create New Branch",
            "Create Anyway",
            "Cancel",
            modal=True,
        )
        if choice == "Create New Branch":
            if "-b" not in state.flags:
                state.flags.append("-b")
            state.create_branch = None
        elif choice == "Create Anyway":
            state.flags.append("--force")
        else:
            return False
        self._can_skip_confirm_override = True
        state.confirm = False
        return True

    @staticmethod
    def _worktree_path(state: WorktreeCreateState) -> Path:
        if "--direct" in state.flags:
            return state.uri
        reference: GitReference = state.reference
        name = state.create_branch if "-b" in state.flags else reference.name_without_remote
        if reference.ref_type is ReferenceType.REVISION and "-b" not in state.flags:
            name = reference.label
        return state.uri.joinpath(*name.split("/"))

    @staticmethod
    def _recommended_root(state: WorktreeCreateState, context: WorktreeContext) -> Path:
        repo: Repository = state.repo
        trailer = f"{repo.path.name}.worktrees"
        if context.picked_root_folder is not None:
            return context.picked_root_folder
        picked = state.uri or context.default_root or repo.path.parent
        if picked.is_relative_to(repo.path):
            return repo.path.parent / trailer
        if picked.name == trailer:
            return picked
        return picked / trailer

    async def _confirm_step(
        self, state: WorktreeCreateState, context: WorktreeContext, can_go_back: bool
    ) -> StepOutcome[tuple[list[str], Any]]:
        reference: GitReference = state.reference
        is_branch = reference.ref_type is ReferenceType.BRANCH
        direct = context.picked_specific_folder
        root = direct or self._recommended_root(state, context)
        extra = ["--direct"] if direct is not None else []

        def location(name: str) -> Path:
            return root if direct is not None else root.joinpath(*name.split("/"))

        confirmations: list[PickItem] = []
        if state.create_branch:
            confirmations.append(
                create_flags_item(
                    state.flags,
                    ["-b", *extra],
                    "Create Worktree for New Branch",
                    description=f"{state.create_branch} from {reference.label}",
                    detail=f"Will create worktree in {location(state.create_branch)}",
                    context=root,
                )
            )
        elif is_branch and reference.remote:
            confirmations.append(
                create_flags_item(
                    state.flags,
                    ["-b", *extra],
                    "Create Worktree for New Local Branch",
                    description=f"from {reference.label}",
                    detail=f"Will create worktree in {location(reference.name_without_remote)}",
                    context=root,
                )
            )
        else:
            kind = "Branch" if is_branch else ("Tag" if reference.ref_type is ReferenceType.TAG else "Revision")
            confirmations.append(
                create_flags_item(
                    state.flags,
                    [*extra],
                    f"Create Worktree for {kind}",
                    description=reference.label,
                    detail=f"Will create worktree in {location(reference.label)}",
                    context=root,
                )
            )
        if not is_branch:
            confirmations.append(
                create_flags_item(
                    state.flags,
                    ["--detach", *extra],
                    "Create Worktree (Detached)",
                    description=reference.label,
                    detail=f"Will create a detached worktree in {location(reference.label)}",
                    context=root,
                )
            )

        confirmations.append(SeparatorItem())
        if direct is None:
            confirmations.append(
                FlagsItem(label="Change Root Folder...", description=f"{root}", context=CHANGE_ROOT)
            )
        confirmations.append(FlagsItem(label="Choose a Specific Folder...", context=CHOOSE_FOLDER))

        step = create_confirm_step(
            append_repos_to_title(f"Confirm {context.title}", state.repo, context),
            confirmations,
            context,
            can_go_back=can_go_back,
        )
        selection = await context.show(step)
        if not can_pick_step_continue(step, selection):
            return BREAK
        item: FlagsItem = selection[0]
        return Continue((list(item.flags), item.context))

    async def _choose_path_step(
        self, state: WorktreeCreateState, context: WorktreeContext, choose: str
    ) -> StepOutcome[Path]:
        if choose == CHANGE_ROOT:
            title = "Choose a Root Folder for This Worktree"
        else:
            title = "Choose a Specific Folder for This Worktree"
        default = context.picked_root_folder or state.uri or context.default_root

        async def show(step) -> Any:
            folder = await self.host.ui.choose_folder(title, default)
            return folder if folder is not None else Directive.BACK

        step = create_custom_step(title, show)
        value = await context.show(step)
        if not can_step_continue(step, value):
            return BREAK
        return Continue(Path(value))
