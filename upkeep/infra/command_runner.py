"""
External command execution for upkeep.

Package managers and system utilities (brew, npm, nvm, apt-get, systemctl,
vcgencmd, pihole) are all driven through CommandRunner so that:
- output is captured and written to the log (the old ``| tee -a $LOG``)
- a missing executable is a result, not a crash
- tests can substitute a fake runner
"""

import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Union
import logging

logger = logging.getLogger(__name__)

Command = Union[str, List[str]]


@dataclass
class CommandResult:
    """Exit status and captured output of one command."""
    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout and stderr joined, for diagnostics."""
        return "\n".join(part.strip() for part in (self.stdout, self.stderr) if part and part.strip())


class CommandRunner:
    """
    Runs external commands and logs their output.

    Example:
        runner = CommandRunner()
        result = runner.run(["apt-get", "update"])
        if not result.ok:
            print(result.output)
    """

    def __init__(self, dry_run: bool = False, timeout: Optional[int] = None):
        self.dry_run = dry_run
        self.timeout = timeout

    @staticmethod
    def which(name: str) -> Optional[str]:
        """Path of an executable on PATH, or None."""
        return shutil.which(name)

    def run(self, command: Command, cwd: Optional[str] = None, shell: bool = False,
            executable: Optional[str] = None, log_stderr: bool = True,
            read_only: bool = False) -> CommandResult:
        """
        Runs a command and logs the output.

        Args:
            command: Argument list, or a string when shell=True
            cwd: Working directory for the child process
            shell: Run through a shell (needed to source nvm.sh)
            executable: Shell binary when shell=True (e.g. /bin/bash)
            log_stderr: If False, do not log stderr of a failing command as an error
            read_only: Command only queries state; run it even in dry-run mode

        Returns:
            CommandResult
        """
        cmd_str = command if isinstance(command, str) else shlex.join(command)

        if self.dry_run and not read_only:
            logger.info(f"[Dry Run] Would run: {cmd_str}")
            return CommandResult(command=cmd_str, returncode=0)

        logger.debug(f"Running: {cmd_str}")
        try:
            result = subprocess.run(
                command,
                shell=shell,
                executable=executable,
                cwd=cwd,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=self.timeout
            )
        except FileNotFoundError as e:
            logger.error(f"Command not found: {cmd_str}")
            return CommandResult(command=cmd_str, returncode=127, stderr=str(e))
        except subprocess.TimeoutExpired:
            logger.error(f"Command timed out after {self.timeout}s: {cmd_str}")
            return CommandResult(command=cmd_str, returncode=124, stderr="timed out")

        if result.stdout and result.stdout.strip():
            logger.debug(result.stdout.strip())

        if result.returncode != 0:
            if log_stderr and result.stderr and result.stderr.strip():
                logger.error(result.stderr.strip())
        elif result.stderr and result.stderr.strip():
            logger.debug(result.stderr.strip())

        return CommandResult(
            command=cmd_str,
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
