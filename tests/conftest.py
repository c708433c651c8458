"""Shared fixtures: an in-memory repository, hosts and scripted drivers."""

import hashlib
import logging
from pathlib import Path
from typing import Any

import pytest

from commands import build_registry
from commands.context import GitWizardHost
from commands.git import GitBranch, GitReference, GitStash, GitWorktree, ReferenceType, Repository
from wizard.driver import WizardDriver
from wizard.registry import WizardInvocation
from wizard.render import ScriptedRenderer, ScriptedUI
from wizard.settings import CONFIG_DIR_ENV, get_default_settings, reload_settings


def branch(name: str, *, current: bool = False, remote: bool = False) -> GitBranch:
    prefix = "refs/remotes/" if remote else "refs/heads/"
    sha = hashlib.sha1(name.encode()).hexdigest()
    return GitBranch(name=name, ref=prefix + name, sha=sha, remote=remote, current=current)


class FakeRepository(Repository):
    """Repository kept in memory. Queue failures per action with fail()."""

    def __init__(self, path: Path, *, name: str | None = None) -> None:
        super().__init__(path, name=name)
        self.branches: list[GitBranch] = [branch("main", current=True), branch("origin/main", remote=True)]
        self.tags: list[GitReference] = [
            GitReference(name="v1.0", ref="refs/tags/v1.0", sha="f" * 40, ref_type=ReferenceType.TAG)
        ]
        self.worktrees: list[GitWorktree] = [GitWorktree(path=self.path, branch="main", sha="a" * 40, is_default=True)]
        self.stashes: list[GitStash] = []
        self.changed_files: list[str] = []
        self.diff_stat = ""
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self._failures: dict[str, list[Exception]] = {}

    def add_branch(self, name: str, **kwargs: Any) -> GitBranch:
        created = branch(name, **kwargs)
        self.branches.append(created)
        return created

    def fail(self, action: str, *errors: Exception) -> None:
        self._failures.setdefault(action, []).extend(errors)

    def _record(self, action: str, **kwargs: Any) -> None:
        self.calls.append((action, kwargs))
        queued = self._failures.get(action)
        if queued:
            raise queued.pop(0)

    def called(self, action: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == action]

    async def get_branches(self, *, include_remote: bool = True) -> list[GitBranch]:
        return [b for b in self.branches if include_remote or not b.remote]

    async def get_tags(self) -> list[GitReference]:
        return list(self.tags)

    async def get_reference(self, name: str) -> GitReference | None:
        for ref in [*self.branches, *self.tags]:
            if ref.name == name:
                return ref
        return None

    async def is_valid_branch_name(self, name: str) -> bool:
        return bool(name) and " " not in name and ".." not in name and not name.startswith("-")

    async def create_branch(self, name: str, ref: str, *, no_tracking: bool = False) -> None:
        self._record("create_branch", name=name, ref=ref)
        self.branches.append(branch(name))

    async def switch(self, ref: GitReference, *, create_branch: str | None = None) -> None:
        self._record("switch", ref=ref.name, create_branch=create_branch)
        if create_branch:
            self.branches = [b.model_copy(update={"current": False}) for b in self.branches]
            self.branches.append(branch(create_branch, current=True))

    async def delete_branch(self, name: str, *, force: bool = False, remote: bool = False) -> None:
        self._record("delete_branch", name=name, force=force)
        self.branches = [b for b in self.branches if b.name != name]

    async def stash_push(
        self,
        message: str | None = None,
        *,
        paths: list[Path] | None = None,
        include_untracked: bool = False,
        keep_index: bool = False,
        only_staged: bool = False,
    ) -> GitStash:
        self._record(
            "stash_push",
            message=message,
            paths=paths,
            include_untracked=include_untracked,
            keep_index=keep_index,
            only_staged=only_staged,
        )
        stash = GitStash(ref="stash@{0}", message=message or "WIP")
        self.stashes.insert(0, stash)
        return stash

    async def stash_snapshot(self, message: str | None = None) -> GitStash:
        self._record("stash_snapshot", message=message)
        stash = GitStash(ref="stash@{0}", message=message or "Snapshot")
        self.stashes.insert(0, stash)
        return stash

    async def get_changed_files(self, *, staged: bool = False) -> list[str]:
        return list(self.changed_files)

    async def get_diff_stat(self, *, staged: bool = False) -> str:
        return self.diff_stat

    async def get_worktrees(self) -> list[GitWorktree]:
        return list(self.worktrees)

    async def create_worktree(
        self,
        path: Path,
        *,
        commitish: str | None = None,
        create_branch: str | None = None,
        detach: bool = False,
        force: bool = False,
    ) -> GitWorktree:
        self._record(
            "create_worktree",
            path=Path(path),
            commitish=commitish,
            create_branch=create_branch,
            detach=detach,
            force=force,
        )
        if create_branch:
            self.branches.append(branch(create_branch))
        worktree = GitWorktree(path=Path(path), branch=create_branch or commitish, detached=detach)
        self.worktrees.append(worktree)
        return worktree

    async def delete_worktree(self, path: Path, *, force: bool = False) -> None:
        self._record("delete_worktree", path=Path(path), force=force)
        self.worktrees = [w for w in self.worktrees if w.path != Path(path)]


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point the config dir at tmp_path and clear the settings cache."""
    monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path / "config"))
    reload_settings()
    yield
    reload_settings()


@pytest.fixture
def repo(tmp_path: Path) -> FakeRepository:
    return FakeRepository(tmp_path / "demo")


@pytest.fixture
def ui() -> ScriptedUI:
    return ScriptedUI()


@pytest.fixture
def settings() -> dict[str, Any]:
    return get_default_settings()


@pytest.fixture
def host(repo: FakeRepository, ui: ScriptedUI, settings: dict[str, Any]) -> GitWizardHost:
    return GitWizardHost(registry=build_registry(), settings=settings, ui=ui, repos=[repo])


@pytest.fixture
def run_wizard(host: GitWizardHost):
    """Run one invocation against scripted responses. Returns (driver, run, renderer)."""

    async def run(responses: list, invocation: WizardInvocation | None = None):
        renderer = ScriptedRenderer(responses)
        driver = WizardDriver(host, renderer)
        result = await driver.execute(invocation)
        return driver, result, renderer

    return run


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging(): drop the handlers it added and restore the old ones."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
