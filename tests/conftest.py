"""
Shared fixtures: a scripted command runner and an isolated home directory.
"""

import os

import pytest

from upkeep.config import get_default_config
from upkeep.infra.command_runner import CommandResult


class FakeRunner:
    """
    CommandRunner stand-in.

    responses maps a command prefix (the start of the joined command line)
    to a CommandResult or a (returncode, stdout, stderr) tuple. Unmatched
    commands succeed with empty output.
    """

    def __init__(self, responses=None, installed=("brew", "npm", "pihole", "vcgencmd"), dry_run=False):
        self.responses = responses or {}
        self.installed = set(installed)
        self.dry_run = dry_run
        self.commands = []

    def which(self, name):
        return f"/usr/bin/{name}" if name in self.installed else None

    def run(self, command, cwd=None, shell=False, executable=None, log_stderr=True, read_only=False):
        cmd_str = command if isinstance(command, str) else " ".join(command)
        self.commands.append(cmd_str)
        for prefix, response in self.responses.items():
            if prefix in cmd_str:
                if isinstance(response, CommandResult):
                    return response
                returncode, stdout, stderr = response
                return CommandResult(command=cmd_str, returncode=returncode, stdout=stdout, stderr=stderr)
        return CommandResult(command=cmd_str, returncode=0)


@pytest.fixture
def fake_runner():
    return FakeRunner


@pytest.fixture
def config():
    return get_default_config()


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """HOME in tmp_path and no UPKEEP_* variables leaking in."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith("UPKEEP_"):
            monkeypatch.delenv(key)
    return home
