"""Tests for StepsController navigation: entering, skipping, going back, nesting."""

from types import SimpleNamespace

from commands.context import GitContext, WorktreeContext
from wizard.context import StepChannel, StepContext
from wizard.controller import StepsController


def _context() -> StepContext:
    return StepContext(title="Test")


class TestEnterAndGoBack:
    def test_go_back_returns_previous_step(self) -> None:
        """A -> B -> C, one go_back lands on B."""
        with StepsController(_context()) as steps:
            with steps.enter_step("a"):
                pass
            with steps.enter_step("b"):
                pass
            with steps.enter_step("c") as step:
                assert step.go_back() == "b"
            assert steps.is_at_step("b")
            assert steps.navigation.history[-1] == ["a", "b"]

    def test_go_back_from_first_step_returns_none(self) -> None:
        with StepsController(_context()) as steps:
            with steps.enter_step("a") as step:
                assert step.go_back() is None
            assert steps.current_step is None
            assert steps.is_complete is False

    def test_leaving_a_step_clears_current(self) -> None:
        with StepsController(_context()) as steps:
            with steps.enter_step("a"):
                assert steps.is_at_step("a")
            assert steps.current_step is None
            assert steps.is_at_step_or_unset("b")

    def test_is_at_step_is_idempotent(self) -> None:
        with StepsController(_context()) as steps:
            with steps.enter_step("a"):
                results = {steps.is_at_step("a") for _ in range(5)}
                assert results == {True}
                assert steps.current_step == "a"

    def test_reentering_a_step_moves_it_to_the_top(self) -> None:
        with StepsController(_context()) as steps:
            for name in ("a", "b", "a"):
                with steps.enter_step(name):
                    pass
            assert steps.navigation.history[-1] == ["b", "a"]


class TestSkip:
    def test_skipped_step_is_not_a_back_target(self) -> None:
        with StepsController(_context()) as steps:
            with steps.enter_step("repo") as step:
                step.skip()
            with steps.enter_step("ref") as step:
                assert step.go_back() is None
            assert steps.navigation.history[-1] == []

    def test_controller_skip_only_affects_current_step(self) -> None:
        with StepsController(_context()) as steps:
            with steps.enter_step("a"):
                pass
            steps.skip()
            assert steps.navigation.history[-1] == ["a"]


class TestGoBackToStep:
    def test_truncates_history_after_step(self) -> None:
        with StepsController(_context()) as steps:
            for name in ("a", "b", "c"):
                with steps.enter_step(name):
                    pass
            steps.mark_steps_complete()
            steps.go_back_to_step("b")
            assert steps.is_at_step("b")
            assert steps.is_complete is False
            assert steps.navigation.history[-1] == ["a", "b"]

    def test_unknown_step_resets_history(self) -> None:
        with StepsController(_context()) as steps:
            with steps.enter_step("a"):
                pass
            steps.go_back_to_step("z")
            assert steps.navigation.history[-1] == ["z"]
            assert steps.current_step == "z"


class TestCompletion:
    def test_mark_complete_clears_current(self) -> None:
        with StepsController(_context()) as steps:
            with steps.enter_step("a"):
                steps.mark_steps_complete()
            assert steps.is_complete
            assert steps.current_step is None

    def test_entering_a_step_reopens(self) -> None:
        with StepsController(_context()) as steps:
            steps.mark_steps_complete()
            with steps.enter_step("a"):
                assert steps.is_complete is False


class TestCancelled:
    def test_go_back_after_cancel_always_returns_none(self) -> None:
        context = _context()
        with StepsController(context) as steps:
            with steps.enter_step("a"):
                pass
            with steps.enter_step("b") as step:
                steps.navigation.cancelled = True
                assert step.go_back() is None
            assert steps.current_step is None

    def test_new_navigation_keeps_cancelled_flag(self) -> None:
        context = _context()
        with StepsController(context) as steps:
            steps.navigation.cancelled = True
        controller = StepsController(context, SimpleNamespace(started_from=None))
        assert controller.navigation.cancelled is True


class TestNesting:
    def test_nested_back_from_first_step_returns_to_parent_step(self) -> None:
        context = _context()
        with StepsController(context) as outer:
            with outer.enter_step("launch"):
                with StepsController(context) as inner:
                    assert inner.current_step is None
                    assert inner.can_go_back
                    with inner.enter_step("nested") as step:
                        assert step.go_back() is None
                    assert inner.current_step == "launch"
                assert outer.is_at_step("launch")
                assert outer.navigation.history == [["launch"]]

    def test_nested_completion_is_shared(self) -> None:
        context = _context()
        with StepsController(context) as outer:
            with outer.enter_step("launch"):
                with StepsController(context) as inner:
                    with inner.enter_step("nested"):
                        inner.mark_steps_complete()
            assert outer.is_complete

    def test_nested_controller_shares_navigation(self) -> None:
        context = _context()
        outer = StepsController(context, SimpleNamespace(started_from=None))
        with outer:
            with outer.enter_step("launch"):
                inner = StepsController(context, SimpleNamespace(started_from="branch-create"))
                assert inner.navigation is outer.navigation


class TestCanGoBack:
    def test_single_step_cannot_go_back(self) -> None:
        with StepsController(_context()) as steps:
            with steps.enter_step("a"):
                assert steps.can_go_back is False

    def test_second_step_can_go_back(self) -> None:
        with StepsController(_context()) as steps:
            with steps.enter_step("a"):
                pass
            with steps.enter_step("b"):
                assert steps.can_go_back is True

    def test_started_from_menu_can_go_back(self) -> None:
        with StepsController(_context(), SimpleNamespace(started_from="menu")) as steps:
            with steps.enter_step("a"):
                assert steps.can_go_back is True


class TestDerivedContext:
    def test_nested_context_shares_channel_and_navigation(self) -> None:
        parent = GitContext(title="Create Branch", channel=StepChannel(), show_tags=False)
        with StepsController(parent):
            child = parent.derive(WorktreeContext, title="Create Worktree")

            assert child.title == "Create Worktree"
            assert child.channel is parent.channel
            assert child.steps is parent.steps
            assert child.repos is parent.repos
            assert child.show_tags is False
            assert child.worktrees is None
