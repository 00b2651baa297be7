"""
Tests for the workstation update sequence (brew, npm, nvm, node).
"""

from unittest.mock import MagicMock

import pytest

from upkeep.domain.maintenance import StepStatus
from upkeep.exit_codes import NoMatchingVersionError, StepFailedError, SyncFailedError
from upkeep.infra.git_client import GitResult
from upkeep.services.workstation import WorkstationMaintenance


@pytest.fixture
def nvm_config(config, tmp_path):
    nvm_dir = tmp_path / "nvm"
    nvm_dir.mkdir()
    (nvm_dir / "nvm.sh").write_text("# nvm\n")
    config['nvm']['directory'] = str(nvm_dir)
    return config


@pytest.fixture
def git():
    client = MagicMock()
    client.ls_remote_tags.return_value = [
        "refs/tags/v0.39.7",
        "refs/tags/v0.40.1",
        "refs/tags/v0.40.1^{}",
    ]
    client.is_git_repo.return_value = True
    client.current_tag.return_value = "v0.39.7"
    client.fetch_tags.return_value = GitResult(ok=True, returncode=0)
    client.checkout.return_value = GitResult(ok=True, returncode=0)
    return client


def node_lookup(version="v22.11.0"):
    return {"nvm version-remote": (0, f"{version}\n", "")}


class TestWorkstationMaintenance:

    def test_full_sequence(self, nvm_config, git, fake_runner):
        runner = fake_runner(node_lookup())
        service = WorkstationMaintenance(nvm_config, runner=runner, git_client=git)

        steps = list(service.run())

        names = [s.name for s in steps]
        assert names == [
            "brew update", "brew upgrade", "brew cleanup",
            "npm install -g npm", "npm update -g",
            "nvm",
            "nvm install v22.11.0", "nvm alias default v22.11.0",
        ]
        assert all(s.status == StepStatus.SUCCESS for s in steps)
        assert service.report.ok

        nvm_step = steps[5]
        assert nvm_step.value['tag'] == "v0.40.1"
        assert nvm_step.value['operations'] == ["fetch", "checkout"]
        git.checkout.assert_called_once()
        assert git.checkout.call_args[0][1] == "v0.40.1"

    def test_order_of_commands(self, nvm_config, git, fake_runner):
        runner = fake_runner(node_lookup())
        list(WorkstationMaintenance(nvm_config, runner=runner, git_client=git).run())

        assert runner.commands[:5] == [
            "brew update", "brew upgrade", "brew cleanup",
            "npm install -g npm", "npm update -g",
        ]
        assert "nvm version-remote --lts" in runner.commands[5]
        assert runner.commands[6].endswith("nvm install v22.11.0")
        assert runner.commands[7].endswith("nvm alias default v22.11.0")

    def test_stops_at_first_failure(self, nvm_config, git, fake_runner):
        runner = fake_runner({"brew upgrade": (1, "", "Error: no bottle available")})
        service = WorkstationMaintenance(nvm_config, runner=runner, git_client=git)

        with pytest.raises(StepFailedError) as exc_info:
            list(service.run())

        assert exc_info.value.step == "brew upgrade"
        assert "no bottle" in exc_info.value.diagnostic
        assert not any(c.startswith("npm") for c in runner.commands)
        git.ls_remote_tags.assert_not_called()
        assert not service.report.ok

    def test_missing_tool_is_skipped(self, nvm_config, git, fake_runner):
        runner = fake_runner(node_lookup(), installed=("npm",))
        steps = list(WorkstationMaintenance(nvm_config, runner=runner, git_client=git).run())

        assert steps[0].name == "brew"
        assert steps[0].status == StepStatus.SKIPPED
        assert not any(c.startswith("brew") for c in runner.commands)

    def test_toggles(self, nvm_config, git, fake_runner):
        nvm_config['workstation']['npm'] = False
        runner = fake_runner(node_lookup())
        steps = list(WorkstationMaintenance(nvm_config, runner=runner, git_client=git)
                     .run(brew=False, node=False))

        assert [s.name for s in steps] == ["nvm"]
        assert runner.commands == []

    def test_nvm_errors_propagate(self, nvm_config, git, fake_runner):
        git.ls_remote_tags.return_value = ["refs/tags/nightly"]
        service = WorkstationMaintenance(nvm_config, runner=fake_runner(), git_client=git)

        with pytest.raises(NoMatchingVersionError):
            list(service.run(brew=False, npm=False))
        git.checkout.assert_not_called()
        assert not service.report.ok
        assert service.report.results[-1].name == "nvm"
        assert service.report.results[-1].status == StepStatus.FAILED

    def test_nvm_sync_failure_halts_node(self, nvm_config, git, fake_runner):
        git.checkout.return_value = GitResult(ok=False, returncode=1, output="error: pathspec")
        runner = fake_runner(node_lookup())

        service = WorkstationMaintenance(nvm_config, runner=runner, git_client=git)

        with pytest.raises(SyncFailedError):
            list(service.run(brew=False, npm=False))
        assert runner.commands == []
        assert [(r.name, r.status) for r in service.report.results] == [("nvm", StepStatus.FAILED)]
        assert "checkout" in service.report.results[0].message

    def test_node_lookup_not_available(self, nvm_config, git, fake_runner):
        runner = fake_runner(node_lookup("N/A"))

        with pytest.raises(StepFailedError) as exc_info:
            list(WorkstationMaintenance(nvm_config, runner=runner, git_client=git)
                 .run(brew=False, npm=False, nvm=False))
        assert exc_info.value.step == "node"

    def test_node_without_nvm(self, config, tmp_path, git, fake_runner):
        config['nvm']['directory'] = str(tmp_path / "missing")

        with pytest.raises(StepFailedError, match="nvm.sh not found"):
            list(WorkstationMaintenance(config, runner=fake_runner(), git_client=git)
                 .run(brew=False, npm=False, nvm=False))

    def test_node_latest_when_lts_disabled(self, nvm_config, git, fake_runner):
        nvm_config['node']['lts'] = False
        runner = fake_runner(node_lookup("v23.3.0"))
        steps = list(WorkstationMaintenance(nvm_config, runner=runner, git_client=git)
                     .run(brew=False, npm=False, nvm=False))

        assert "--lts" not in runner.commands[0]
        assert steps[0].value == "v23.3.0"

    def test_dry_run_sync(self, nvm_config, git, fake_runner):
        runner = fake_runner(node_lookup(), dry_run=True)
        service = WorkstationMaintenance(nvm_config, runner=runner, git_client=git, dry_run=True)
        steps = list(service.run(brew=False, npm=False, node=False))

        assert steps[0].value['dry_run'] is True
        git.fetch_tags.assert_not_called()
        git.checkout.assert_not_called()
