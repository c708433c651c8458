"""Tests for the command registry, command identity and confirmation gating."""

import pytest

from commands import COMMANDS, BranchCreateCommand, StashPushCommand, WorktreeDeleteCommand, build_registry
from wizard.errors import InvalidStateError, UnknownCommandError
from wizard.registry import CommandRegistry, WizardInvocation


class TestRegistry:
    def test_build_registry_holds_every_command(self) -> None:
        registry = build_registry()
        assert len(registry) == len(COMMANDS)
        assert "branch-create" in registry
        assert [c.key for c in registry] == [c.key for c in COMMANDS]

    def test_duplicate_registration_is_rejected(self) -> None:
        registry = CommandRegistry()
        registry.register(BranchCreateCommand)
        with pytest.raises(ValueError, match="branch-create"):
            registry.register(BranchCreateCommand)

    def test_get_unknown_raises(self) -> None:
        with pytest.raises(UnknownCommandError) as exc_info:
            build_registry().get("rebase")
        assert exc_info.value.command == "rebase"

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("branch-create", BranchCreateCommand),
            ("create branch", BranchCreateCommand),
            ("Push Stash", StashPushCommand),
            ("create brnch", BranchCreateCommand),
            ("delete_worktrees", WorktreeDeleteCommand),
        ],
    )
    def test_find_by_key_label_or_close_match(self, text, expected) -> None:
        assert build_registry().find(text) is expected

    def test_find_nothing_close(self) -> None:
        assert build_registry().find("rebase") is None

    def test_create_falls_back_to_find(self, host) -> None:
        command = host.registry.create("create branch", host)
        assert isinstance(command, BranchCreateCommand)

    def test_create_unknown_raises(self, host) -> None:
        with pytest.raises(UnknownCommandError):
            host.registry.create("rebase", host)


class TestCommandState:
    def test_invocation_state_is_merged(self, host, repo) -> None:
        invocation = WizardInvocation("branch-create", state={"repo": repo, "name": "x"}, confirm=False)
        command = BranchCreateCommand(host, invocation)
        state = command.create_state()
        assert state.repo is repo
        assert state.name == "x"
        assert state.confirm is False
        assert state.flags == []

    def test_unknown_state_field_is_rejected(self, host) -> None:
        command = BranchCreateCommand(host, WizardInvocation("branch-create", state={"bogus": 1}))
        with pytest.raises(InvalidStateError, match="bogus"):
            command.create_state()

    def test_picked_via(self, host) -> None:
        assert BranchCreateCommand(host).picked_via == "command"
        menu = BranchCreateCommand(host, WizardInvocation("branch-create", started_from="menu"))
        assert menu.picked_via == "menu"
        assert menu.skip_confirm_key == "branch-create:menu"


class TestConfirmGating:
    def test_confirm_by_default(self, host) -> None:
        assert BranchCreateCommand(host).confirm() is True

    def test_skip_confirmations_setting(self, host) -> None:
        host.settings["wizards"]["skip_confirmations"] = ["branch-create:command"]
        command = BranchCreateCommand(host)
        assert command.confirm() is False
        assert command.confirm(True) is True

    def test_stash_push_skips_confirm_by_default(self, host) -> None:
        assert StashPushCommand(host).confirm() is False
        menu = StashPushCommand(host, WizardInvocation("stash-push", started_from="menu"))
        assert menu.confirm() is True

    def test_override_wins_when_skippable(self, host) -> None:
        assert BranchCreateCommand(host).confirm(False) is False

    def test_cannot_skip_worktree_delete_confirm(self, host) -> None:
        assert WorktreeDeleteCommand(host).confirm(False) is True
