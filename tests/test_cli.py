"""
Tests for the upkeep command line (click.testing.CliRunner).
"""

import json
from unittest.mock import patch, MagicMock

import pytest
from click.testing import CliRunner

from upkeep.cli import cli
from upkeep.domain.maintenance import StepResult, StepStatus
from upkeep.exit_codes import (
    NO_MATCHING_VERSION, SYNC_FAILED, STEP_FAILED, PERMISSION_ERROR, CONFIG_ERROR,
    StepFailedError,
)
from upkeep.infra.git_client import GitResult

REFS = ["refs/tags/v0.39.7", "refs/tags/v0.40.1", "refs/tags/v0.40.1^{}", "refs/tags/v0.41.0-rc.1"]


def json_lines(output):
    return [json.loads(line) for line in output.splitlines() if line.startswith('{')]


@pytest.fixture
def runner(isolated_home):
    return CliRunner()


@pytest.fixture
def git():
    with patch('upkeep.commands.nvm.GitClient') as client_cls:
        client = client_cls.return_value
        client.ls_remote_tags.return_value = REFS
        client.is_git_repo.return_value = False
        client.current_tag.return_value = None
        client.clone.return_value = GitResult(ok=True, returncode=0)
        client.fetch_tags.return_value = GitResult(ok=True, returncode=0)
        client.checkout.return_value = GitResult(ok=True, returncode=0)
        yield client


class TestNvmLatest:

    def test_prints_latest(self, runner, git):
        result = runner.invoke(cli, ['nvm', 'latest'])

        assert result.exit_code == 0, result.output
        data = json_lines(result.output)[0]
        assert data['tag'] == 'v0.40.1'
        assert data['repository'] == 'https://github.com/nvm-sh/nvm.git'
        git.clone.assert_not_called()
        git.checkout.assert_not_called()

    def test_custom_url(self, runner, git):
        runner.invoke(cli, ['nvm', 'latest', '--url', 'https://example.com/tool.git'])
        git.ls_remote_tags.assert_called_once_with('https://example.com/tool.git')

    def test_no_matching_version(self, runner, git):
        git.ls_remote_tags.return_value = ["refs/tags/nightly", "refs/tags/v1.2.3-rc1"]

        result = runner.invoke(cli, ['nvm', 'latest'])

        assert result.exit_code == NO_MATCHING_VERSION
        error = json_lines(result.output)[0]
        assert error['type'] == 'NoMatchingVersionError'

    def test_marker_option(self, runner, git):
        git.ls_remote_tags.return_value = ["refs/tags/v1.0.0", "refs/tags/r2.0.0"]

        strict = runner.invoke(cli, ['nvm', 'latest'])
        assert json_lines(strict.output)[0]['tag'] == 'v1.0.0'

        loose = runner.invoke(cli, ['nvm', 'latest', '--marker', ''])
        assert json_lines(loose.output)[0]['tag'] == 'r2.0.0'

    def test_pretty(self, runner, git):
        result = runner.invoke(cli, ['nvm', 'latest', '--pretty'])
        assert result.exit_code == 0
        assert 'v0.40.1' in result.output
        assert not json_lines(result.output)


class TestNvmSync:

    def test_clone_when_absent(self, runner, git, tmp_path):
        target = tmp_path / 'nvm'
        result = runner.invoke(cli, ['nvm', 'sync', '--dir', str(target)])

        assert result.exit_code == 0, result.output
        data = json_lines(result.output)[0]
        assert data['tag'] == 'v0.40.1'
        assert data['previous_state'] == 'absent'
        assert data['operations'] == ['clone', 'checkout']
        git.clone.assert_called_once_with('https://github.com/nvm-sh/nvm.git', target)

    def test_fetch_when_present(self, runner, git, tmp_path):
        git.is_git_repo.return_value = True
        git.current_tag.return_value = 'v0.39.7'

        result = runner.invoke(cli, ['nvm', 'sync', '--dir', str(tmp_path)])

        data = json_lines(result.output)[0]
        assert data['operations'] == ['fetch', 'checkout']
        assert data['previous_ref'] == 'v0.39.7'
        assert data['changed'] is True

    def test_explicit_tag_skips_resolution(self, runner, git, tmp_path):
        result = runner.invoke(cli, ['nvm', 'sync', '--dir', str(tmp_path / 'nvm'), '--tag', 'v0.39.7'])

        assert result.exit_code == 0
        git.ls_remote_tags.assert_not_called()
        assert git.checkout.call_args[0][1] == 'v0.39.7'

    def test_sync_failed(self, runner, git, tmp_path):
        git.clone.return_value = GitResult(ok=False, returncode=128, output='fatal: unable to access')

        result = runner.invoke(cli, ['nvm', 'sync', '--dir', str(tmp_path / 'nvm')])

        assert result.exit_code == SYNC_FAILED
        error = json_lines(result.output)[0]
        assert error['type'] == 'SyncFailedError'
        assert error['operation'] == 'clone'
        assert 'unable to access' in error['diagnostic']

    def test_no_matching_version_distinct_from_sync_failure(self, runner, git, tmp_path):
        git.ls_remote_tags.return_value = []
        result = runner.invoke(cli, ['nvm', 'sync', '--dir', str(tmp_path / 'nvm')])

        assert result.exit_code == NO_MATCHING_VERSION
        assert NO_MATCHING_VERSION != SYNC_FAILED
        git.clone.assert_not_called()

    def test_dry_run(self, runner, git, tmp_path):
        result = runner.invoke(cli, ['nvm', 'sync', '--dir', str(tmp_path / 'nvm'), '--dry-run'])

        assert result.exit_code == 0
        assert json_lines(result.output)[0]['dry_run'] is True
        git.clone.assert_not_called()
        git.checkout.assert_not_called()

    def test_quiet(self, runner, git, tmp_path):
        result = runner.invoke(cli, ['nvm', 'sync', '--dir', str(tmp_path / 'nvm'), '-q'])
        assert result.exit_code == 0
        assert result.output == ''


class TestWorkstation:

    def test_streams_steps(self, runner):
        with patch('upkeep.commands.workstation.WorkstationMaintenance') as service_cls:
            service_cls.return_value.run.return_value = iter([
                StepResult(name='brew update', status=StepStatus.SUCCESS, command='brew update', returncode=0),
                StepResult(name='npm', status=StepStatus.SKIPPED, message='npm not found on PATH'),
            ])
            result = runner.invoke(cli, ['workstation', '--skip-node'])

        assert result.exit_code == 0
        steps = json_lines(result.output)
        assert [s['step'] for s in steps] == ['brew update', 'npm']
        assert steps[1]['status'] == 'skipped'
        service_cls.return_value.run.assert_called_once_with(brew=True, npm=True, nvm=True, node=False)

    def test_step_failure_exit_code(self, runner):
        def failing_run(**kwargs):
            yield StepResult(name='brew update', status=StepStatus.SUCCESS)
            raise StepFailedError('brew upgrade', 'Error: no bottle available')

        with patch('upkeep.commands.workstation.WorkstationMaintenance') as service_cls:
            service_cls.return_value.run.side_effect = failing_run
            result = runner.invoke(cli, ['workstation'])

        assert result.exit_code == STEP_FAILED
        lines = json_lines(result.output)
        assert lines[0]['step'] == 'brew update'
        assert lines[-1]['type'] == 'StepFailedError'

    def test_pretty(self, runner):
        with patch('upkeep.commands.workstation.WorkstationMaintenance') as service_cls:
            service_cls.return_value.run.return_value = iter([
                StepResult(name='brew update', status=StepStatus.SUCCESS),
            ])
            result = runner.invoke(cli, ['workstation', '--pretty'])

        assert result.exit_code == 0
        assert 'brew update' in result.output
        assert 'All checks completed' in result.output


class TestPi:

    def test_requires_root(self, runner, monkeypatch, tmp_path):
        monkeypatch.setenv('UPKEEP_PI_LOG_FILE', str(tmp_path / 'pi.log'))
        with patch('upkeep.services.pi_maintenance.os.geteuid', return_value=1000):
            result = runner.invoke(cli, ['pi'])

        assert result.exit_code == PERMISSION_ERROR
        assert json_lines(result.output)[0]['type'] == 'PermissionError'

    def test_logs_to_pi_log_file(self, runner, monkeypatch, tmp_path):
        log_file = tmp_path / 'pi.log'
        monkeypatch.setenv('UPKEEP_PI_LOG_FILE', str(log_file))
        with patch('upkeep.services.pi_maintenance.os.geteuid', return_value=1000):
            runner.invoke(cli, ['pi'])

        assert 'must be run as root' in log_file.read_text()

    def test_options_forwarded(self, runner, monkeypatch, tmp_path):
        monkeypatch.setenv('UPKEEP_PI_LOG_FILE', str(tmp_path / 'pi.log'))
        with patch('upkeep.commands.pi.PiMaintenance') as service_cls:
            service_cls.return_value.run.return_value = iter([
                StepResult(name='disk', status=StepStatus.WARNING, message='Disk usage is at 91%', value=91),
            ])
            result = runner.invoke(cli, ['pi', '--skip-packages'])

        assert result.exit_code == 0
        assert json_lines(result.output)[0]['value'] == 91
        service_cls.return_value.run.assert_called_once_with(packages=False, checks=True)

    def test_skip_checks(self, runner, monkeypatch, tmp_path):
        monkeypatch.setenv('UPKEEP_PI_LOG_FILE', str(tmp_path / 'pi.log'))
        with patch('upkeep.commands.pi.PiMaintenance') as service_cls:
            service_cls.return_value.run.return_value = iter([])
            result = runner.invoke(cli, ['pi', '--skip-checks'])

        assert result.exit_code == 0
        service_cls.return_value.run.assert_called_once_with(packages=True, checks=False)


class TestConfigCommands:

    def test_show_defaults(self, runner):
        result = runner.invoke(cli, ['config', 'show'])
        assert result.exit_code == 0
        assert json_lines(result.output)[0]['nvm']['directory'] == '~/.nvm'

    def test_init_and_refuse_overwrite(self, runner, isolated_home):
        first = runner.invoke(cli, ['config', 'init'])
        assert first.exit_code == 0
        assert (isolated_home / '.upkeep' / 'config.json').exists()

        second = runner.invoke(cli, ['config', 'init'])
        assert second.exit_code == CONFIG_ERROR

        forced = runner.invoke(cli, ['config', 'init', '--force'])
        assert forced.exit_code == 0

    def test_init_yaml(self, runner, isolated_home):
        result = runner.invoke(cli, ['config', 'init', '--format', 'yaml'])
        assert result.exit_code == 0
        assert json_lines(result.output)[0]['path'].endswith('config.yaml')

    def test_path(self, runner, isolated_home):
        result = runner.invoke(cli, ['config', 'path'])
        data = json_lines(result.output)[0]
        assert data['exists'] is False

    def test_broken_config_exit_code(self, runner, isolated_home, git):
        (isolated_home / '.upkeep').mkdir()
        (isolated_home / '.upkeep' / 'config.json').write_text('{broken')

        result = runner.invoke(cli, ['nvm', 'latest'])
        assert result.exit_code == CONFIG_ERROR


def test_global_log_file(runner, git, tmp_path):
    log_file = tmp_path / 'upkeep.log'
    result = runner.invoke(cli, ['--log-file', str(log_file), 'nvm', 'latest'])

    assert result.exit_code == 0
    assert 'Latest release of https://github.com/nvm-sh/nvm.git is v0.40.1' in log_file.read_text()
