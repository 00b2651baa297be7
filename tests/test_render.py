"""
Tests for upkeep/render.py rendering functions.
"""
from upkeep import render
from upkeep.domain.checkout import CheckoutState, LocalCheckoutResult
from upkeep.domain.maintenance import StepResult, StepStatus
from upkeep.domain.version import SemanticVersion


class TestRenderSteps:
    """Tests for render_steps and the summary table."""

    def test_empty_steps(self, capsys):
        assert render.render_steps([], "Nothing") == []
        assert "No steps ran" in capsys.readouterr().out

    def test_all_success(self, capsys):
        steps = [StepResult(name="brew update", status=StepStatus.SUCCESS)]
        render.render_steps(iter(steps), "Workstation")
        out = capsys.readouterr().out
        assert "Workstation" in out
        assert "brew update" in out
        assert "All checks completed" in out

    def test_warnings_counted(self, capsys):
        steps = [
            StepResult(name="disk", status=StepStatus.WARNING, message="Disk usage is at 91%"),
            StepResult(name="ssh", status=StepStatus.WARNING, message="Root login over SSH is enabled"),
            StepResult(name="load", status=StepStatus.SUCCESS),
        ]
        rendered = render.render_steps(steps, "Pi")
        assert len(rendered) == 3
        assert "2 check(s) need attention" in capsys.readouterr().out


class TestRenderCheckout:

    def test_changed(self, capsys):
        render.render_checkout(LocalCheckoutResult(
            path="/home/u/.nvm", tag="v0.40.1", previous_state=CheckoutState.PRESENT,
            previous_ref="v0.39.7", operations=["fetch", "checkout"]))
        out = capsys.readouterr().out
        assert "v0.39.7" in out
        assert "v0.40.1" in out

    def test_unchanged_dry_run(self, capsys):
        render.render_checkout(LocalCheckoutResult(
            path="/home/u/.nvm", tag="v0.40.1", previous_state=CheckoutState.PRESENT,
            previous_ref="v0.40.1", operations=["fetch", "checkout"], dry_run=True))
        out = capsys.readouterr().out
        assert "[Dry Run]" in out
        assert "already at" in out


def test_render_version(capsys):
    render.render_version(SemanticVersion.parse("v0.40.1"), "https://github.com/nvm-sh/nvm.git")
    assert "v0.40.1" in capsys.readouterr().out
