"""
Developer workstation updates for upkeep.

Runs, in order and stopping at the first failure:
1. Homebrew: update, upgrade, cleanup
2. npm: update npm itself, then every global package
3. nvm: sync ~/.nvm to the newest release tag
4. Node: install the latest LTS through nvm and make it the default
"""

import logging
import shlex
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

from ..domain.maintenance import MaintenanceReport, StepResult, StepStatus
from ..exit_codes import CommandError, StepFailedError
from ..infra.command_runner import CommandRunner
from ..infra.git_client import GitClient
from .repository_sync import RepositorySync
from .version_resolver import VersionResolver

logger = logging.getLogger(__name__)

BREW_COMMANDS = [
    ["brew", "update"],
    ["brew", "upgrade"],
    ["brew", "cleanup"],
]

NPM_COMMANDS = [
    ["npm", "install", "-g", "npm"],
    ["npm", "update", "-g"],
]


class WorkstationMaintenance:
    """
    Sequential package-manager updates for a development machine.

    Example:
        service = WorkstationMaintenance(config)
        for step in service.run(brew=False):
            print(step.name, step.status.value)

        print(service.report.ok)
    """

    def __init__(
        self,
        config: Dict[str, Any],
        runner: Optional[CommandRunner] = None,
        git_client: Optional[GitClient] = None,
        dry_run: bool = False,
    ):
        self.config = config
        self.dry_run = dry_run
        self.runner = runner or CommandRunner(dry_run=dry_run)
        self.git = git_client or GitClient()
        self.report = MaintenanceReport(title="workstation")

    @property
    def nvm_dir(self) -> Path:
        return Path(self.config.get('nvm', {}).get('directory', '~/.nvm')).expanduser()

    def run(self, brew: bool = True, npm: bool = True, nvm: bool = True,
            node: bool = True) -> Generator[StepResult, None, None]:
        """
        Run the enabled steps, yielding each result as it completes.

        Raises:
            StepFailedError: A package-manager command failed
            NoMatchingVersionError, SyncFailedError: The nvm update failed
        """
        self.report = MaintenanceReport(title="workstation")
        toggles = self.config.get('workstation', {})

        if brew and toggles.get('brew', True):
            logger.info("==> Updating Homebrew")
            yield from self._commands("brew", BREW_COMMANDS)

        if npm and toggles.get('npm', True):
            logger.info("==> Updating global npm and packages")
            yield from self._commands("npm", NPM_COMMANDS)

        if nvm and toggles.get('nvm', True):
            logger.info("==> Updating NVM")
            try:
                nvm_result = self.update_nvm()
            except CommandError as e:
                self.report.add(StepResult(name="nvm", status=StepStatus.FAILED, message=str(e)))
                raise
            yield self.report.add(nvm_result)

        if node and toggles.get('node', True):
            logger.info("==> Updating Node via nvm")
            yield from self.update_node()

        logger.info("==> Done")

    def _commands(self, tool: str, commands: List[List[str]]) -> Generator[StepResult, None, None]:
        if self.runner.which(tool) is None:
            logger.warning(f"{tool} not installed, skipping")
            yield self.report.add(StepResult(
                name=tool,
                status=StepStatus.SKIPPED,
                message=f"{tool} not found on PATH",
            ))
            return

        for command in commands:
            yield self.report.add(self._run_required(" ".join(command), command))

    def _run_required(self, name: str, command, **kwargs) -> StepResult:
        result = self.runner.run(command, **kwargs)
        if not result.ok:
            self.report.add(StepResult(
                name=name,
                status=StepStatus.FAILED,
                message=result.output,
                command=result.command,
                returncode=result.returncode,
            ))
            raise StepFailedError(name, result.output)
        return StepResult(
            name=name,
            status=StepStatus.SUCCESS,
            command=result.command,
            returncode=result.returncode,
        )

    def update_nvm(self) -> StepResult:
        """Resolve the newest nvm release and sync the nvm directory to it."""
        nvm_config = self.config.get('nvm', {})
        url = nvm_config.get('repository', 'https://github.com/nvm-sh/nvm.git')
        markers = nvm_config.get('markers') or None

        resolver = VersionResolver(self.git.ls_remote_tags, markers=markers)
        latest = resolver.resolve(url)

        syncer = RepositorySync(self.git, remote=nvm_config.get('remote', 'origin'), dry_run=self.dry_run)
        checkout = syncer.sync(self.nvm_dir, latest, url)

        return StepResult(
            name="nvm",
            status=StepStatus.SUCCESS,
            message=f"nvm at {latest}",
            value=checkout.to_dict(),
        )

    def _nvm_script(self, nvm_command: str) -> str:
        nvm_dir = shlex.quote(str(self.nvm_dir))
        return f'export NVM_DIR={nvm_dir} && . "$NVM_DIR/nvm.sh" && {nvm_command}'

    def update_node(self) -> Generator[StepResult, None, None]:
        """Install the newest Node.js (LTS by default) and alias it as default."""
        if not (self.nvm_dir / "nvm.sh").exists() and not self.dry_run:
            self.report.add(StepResult(
                name="node",
                status=StepStatus.FAILED,
                message=f"nvm.sh not found in {self.nvm_dir}",
            ))
            raise StepFailedError("node", f"nvm.sh not found in {self.nvm_dir}")

        query = "nvm version-remote --lts" if self.config.get('node', {}).get('lts', True) else "nvm version-remote"
        lookup = self.runner.run(self._nvm_script(query), shell=True, executable="/bin/bash", read_only=True)
        version = lookup.stdout.strip().splitlines()[-1].strip() if lookup.ok and lookup.stdout.strip() else ""

        if not version or version == "N/A":
            if self.dry_run:
                logger.info("[Dry Run] Would install the latest Node.js through nvm")
                yield self.report.add(StepResult(name="node", status=StepStatus.SKIPPED,
                                                 message="version lookup unavailable in dry run"))
                return
            self.report.add(StepResult(
                name="node",
                status=StepStatus.FAILED,
                message=lookup.output or "nvm returned no version",
                command=lookup.command,
                returncode=lookup.returncode,
            ))
            raise StepFailedError("node", lookup.output or "nvm returned no version")

        logger.info(f"Latest Node.js is {version}")
        quoted = shlex.quote(version)
        for name, nvm_command in (
            (f"nvm install {version}", f"nvm install {quoted}"),
            (f"nvm alias default {version}", f"nvm alias default {quoted}"),
        ):
            step = self._run_required(name, self._nvm_script(nvm_command), shell=True, executable="/bin/bash")
            step.value = version
            yield self.report.add(step)
