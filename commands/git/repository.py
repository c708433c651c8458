"""A local git repository, driven through the git CLI."""

import logging
from pathlib import Path
from typing import Any

from commands.git.errors import (
    BranchDeleteError,
    BranchError,
    StashPushError,
    StashPushErrorReason,
    WorktreeCreateError,
    WorktreeDeleteError,
)
from commands.git.exec import ExecError, ExecResult, run_git
from commands.git.models import GitBranch, GitReference, GitStash, GitWorktree, ReferenceType
from wizard.settings import get_setting

logger = logging.getLogger(__name__)

# git prints %00 (for-each-ref) and %x00 (log formats) as NUL field separators.
_SEP = "\x00"


class Repository:
    def __init__(self, path: Path, *, name: str | None = None) -> None:
        self.path = Path(path).resolve()
        self.name = name or self.path.name

    def __repr__(self) -> str:
        return f"<Repository {self.name} at {self.path}>"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Repository) and other.path == self.path

    def __hash__(self) -> int:
        return hash(self.path)

    async def _git(self, *args: str, check: bool = True) -> ExecResult:
        return await run_git(list(args), cwd=self.path, check=check)

    @classmethod
    async def discover(cls, path: Path) -> "Repository | None":
        """Repository containing `path`, or None when it is not inside one."""
        result = await run_git(["rev-parse", "--show-toplevel"], cwd=Path(path), check=False)
        if result.returncode != 0:
            return None
        return cls(Path(result.stdout.strip()))

    # --- references ---

    async def get_branches(self, *, include_remote: bool = True) -> list[GitBranch]:
        patterns = ["refs/heads"] + (["refs/remotes"] if include_remote else [])
        result = await self._git(
            "for-each-ref",
            "--format=%(refname)%00%(refname:short)%00%(objectname)%00%(HEAD)%00%(upstream:short)",
            *patterns,
        )
        branches: list[GitBranch] = []
        for line in result.stdout.splitlines():
            if not line:
                continue
            ref, short, sha, head, upstream = line.split(_SEP)
            if ref.endswith("/HEAD"):
                continue
            branches.append(
                GitBranch(
                    name=short,
                    ref=ref,
                    sha=sha,
                    remote=ref.startswith("refs/remotes/"),
                    current=head == "*",
                    upstream=upstream or None,
                )
            )
        return branches

    async def get_branch(self, name: str | None = None) -> GitBranch | None:
        """Branch by name, or the current branch when no name is given."""
        for branch in await self.get_branches():
            if (name is None and branch.current) or branch.name == name:
                return branch
        return None

    async def get_tags(self) -> list[GitReference]:
        result = await self._git(
            "for-each-ref", "--format=%(refname)%00%(refname:short)%00%(objectname)", "refs/tags"
        )
        tags: list[GitReference] = []
        for line in result.stdout.splitlines():
            if not line:
                continue
            ref, short, sha = line.split(_SEP)
            tags.append(GitReference(name=short, ref=ref, sha=sha, ref_type=ReferenceType.TAG))
        return tags

    async def get_reference(self, name: str) -> GitReference | None:
        """Branch or tag named `name`, else a revision it resolves to."""
        for branch in await self.get_branches():
            if branch.name == name:
                return branch
        for tag in await self.get_tags():
            if tag.name == name:
                return tag
        result = await self._git("rev-parse", "--verify", "--quiet", f"{name}^{{commit}}", check=False)
        if result.returncode != 0:
            return None
        sha = result.stdout.strip()
        return GitReference(name=name, ref=sha, sha=sha, ref_type=ReferenceType.REVISION)

    async def is_valid_branch_name(self, name: str) -> bool:
        result = await self._git("check-ref-format", "--branch", name, check=False)
        return result.returncode == 0

    # --- branches ---

    async def create_branch(self, name: str, ref: str, *, no_tracking: bool = False) -> None:
        args = ["branch"] + (["--no-track"] if no_tracking else []) + [name, ref]
        await self._run(BranchError, name, *args)

    async def switch(self, ref: GitReference, *, create_branch: str | None = None) -> None:
        if create_branch:
            await self._run(BranchError, create_branch, "switch", "--create", create_branch, ref.name)
        elif ref.ref_type is ReferenceType.BRANCH and not ref.remote:
            await self._git("switch", ref.name)
        else:
            await self._git("switch", "--detach", ref.ref)

    async def delete_branch(self, name: str, *, force: bool = False, remote: bool = False) -> None:
        if remote:
            remote_name, _, branch = name.partition("/")
            await self._run(BranchDeleteError, name, "push", remote_name, "--delete", branch)
            return
        await self._run(BranchDeleteError, name, "branch", "-D" if force else "-d", name)

    # --- stashes ---

    async def stash_push(
        self,
        message: str | None = None,
        *,
        paths: list[Path] | None = None,
        include_untracked: bool = False,
        keep_index: bool = False,
        only_staged: bool = False,
    ) -> GitStash:
        args = ["stash", "push"]
        if include_untracked:
            args.append("--include-untracked")
        if keep_index:
            args.append("--keep-index")
        if only_staged:
            args.append("--staged")
        if message:
            args.extend(["--message", message])
        if paths:
            args.extend(["--", *(str(p) for p in paths)])
        result = await self._git(*args, check=False)
        if result.returncode != 0 or "No local changes to save" in result.stdout:
            raise StashPushError.from_output(result.output)
        return await self._latest_stash()

    async def stash_snapshot(self, message: str | None = None) -> GitStash:
        """Record the working tree as a stash without touching it."""
        result = await self._git("stash", "create", *([message] if message else []))
        sha = result.stdout.strip()
        if not sha:
            raise StashPushError(StashPushErrorReason.NOTHING_TO_SAVE)
        await self._git("stash", "store", "--message", message or "Snapshot", sha)
        return await self._latest_stash()

    async def _latest_stash(self) -> GitStash:
        result = await self._git("stash", "list", "-n", "1", "--format=%gd%x00%s")
        ref, _, message = result.stdout.strip().partition(_SEP)
        return GitStash(ref=ref, message=message)

    async def get_changed_files(self, *, staged: bool = False) -> list[str]:
        args = ["diff", "--name-only"] + (["--cached"] if staged else ["HEAD"])
        result = await self._git(*args, check=False)
        return [line for line in result.stdout.splitlines() if line]

    async def get_diff_stat(self, *, staged: bool = False) -> str:
        args = ["diff", "--shortstat"] + (["--cached"] if staged else ["HEAD"])
        result = await self._git(*args, check=False)
        return result.stdout.strip()

    # --- worktrees ---

    async def get_worktrees(self) -> list[GitWorktree]:
        result = await self._git("worktree", "list", "--porcelain")
        worktrees: list[GitWorktree] = []
        current: dict[str, Any] = {}
        for raw in [*result.stdout.splitlines(), ""]:
            line = raw.strip()
            if line.startswith("worktree "):
                current = {"path": Path(line.split(" ", 1)[1])}
            elif line.startswith("HEAD "):
                current["sha"] = line.split(" ", 1)[1]
            elif line.startswith("branch "):
                current["branch"] = line.split(" ", 1)[1].removeprefix("refs/heads/")
            elif line == "detached":
                current["detached"] = True
            elif not line and current:
                worktrees.append(GitWorktree(is_default=not worktrees, **current))
                current = {}
        return worktrees

    async def create_worktree(
        self,
        path: Path,
        *,
        commitish: str | None = None,
        create_branch: str | None = None,
        detach: bool = False,
        force: bool = False,
    ) -> GitWorktree:
        args = ["worktree", "add"]
        if force:
            args.append("--force")
        if create_branch:
            args.extend(["-b", create_branch])
        if detach:
            args.append("--detach")
        args.append(str(path))
        if commitish:
            args.append(commitish)
        await self._run(WorktreeCreateError, str(create_branch or commitish or path), *args)
        resolved = Path(path).resolve()
        for worktree in await self.get_worktrees():
            if worktree.path.resolve() == resolved:
                return worktree
        return GitWorktree(path=resolved, branch=create_branch)

    async def delete_worktree(self, path: Path, *, force: bool = False) -> None:
        args = ["worktree", "remove"] + (["--force"] if force else []) + [str(path)]
        await self._run(WorktreeDeleteError, str(path), *args)

    def get_worktrees_default_root(self, settings: dict[str, Any]) -> Path:
        """Configured worktrees location, else the folder containing the repository."""
        location = get_setting(settings, "worktrees.default_location")
        if location:
            root = Path(str(location).replace("${repo}", self.name)).expanduser()
            return root if root.is_absolute() else self.path / root
        return self.path.parent

    async def _run(self, error_type: type, target: str, *args: str) -> ExecResult:
        """Run git and turn a failure into `error_type` classified from its output."""
        try:
            return await self._git(*args)
        except ExecError as e:
            error = error_type.from_output(e.result.output, target=target)
            logger.info("git %s failed for %s: %s", args[0], target, error.reason or e)
            raise error from e


async def discover_repositories(paths: list[Path]) -> list[Repository]:
    """Distinct repositories containing the given paths, in order."""
    repos: list[Repository] = []
    for path in paths:
        repo = await Repository.discover(path)
        if repo is None:
            logger.warning("%s is not inside a git repository", path)
            continue
        if repo not in repos:
            repos.append(repo)
    return repos
