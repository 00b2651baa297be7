"""
Raspberry Pi monthly maintenance for upkeep.

Package updates through apt-get (and Pi-hole when installed), followed by
health checks: disk usage, SoC temperature, load, SSH root login,
unattended-upgrades and pending reboot.

Only ``apt-get update`` is fatal. Everything after it reports a warning
and carries on.
"""

import logging
import math
import os
import re
import shutil
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List, Optional

from ..domain.maintenance import MaintenanceReport, StepResult, StepStatus
from ..exit_codes import StepFailedError
from ..infra.command_runner import CommandRunner

logger = logging.getLogger(__name__)

TEMPERATURE_PATTERN = re.compile(r'([0-9]+(?:\.[0-9]+)?)')


class PiMaintenance:
    """
    Monthly update and health check for a Raspberry Pi.

    Example:
        service = PiMaintenance(config)
        for step in service.run():
            print(step.name, step.status.value, step.message)

        if service.report.warnings:
            print("attention needed")
    """

    def __init__(
        self,
        config: Dict[str, Any],
        runner: Optional[CommandRunner] = None,
        dry_run: bool = False,
        euid: Optional[Callable[[], int]] = None,
    ):
        self.settings = config.get('pi', {})
        self.dry_run = dry_run
        self.runner = runner or CommandRunner(dry_run=dry_run)
        self._euid = euid or os.geteuid
        self.report = MaintenanceReport(title="pi")

    def _setting(self, key: str, default: Any) -> Any:
        return self.settings.get(key, default)

    def ensure_root(self) -> None:
        if self._setting('require_root', True) and self._euid() != 0:
            raise PermissionError("This command must be run as root. Use: sudo upkeep pi")

    def run(self, packages: bool = True, checks: bool = True) -> Generator[StepResult, None, None]:
        """
        Run package updates and health checks, yielding each result.

        Raises:
            PermissionError: Not running as root
            StepFailedError: apt-get update failed
        """
        self.ensure_root()
        self.report = MaintenanceReport(title="pi")
        logger.info("==> Starting Raspberry Pi maintenance")

        if checks:
            yield self.report.add(self.check_unattended_upgrades())

        if packages:
            for result in self.update_packages():
                yield self.report.add(result)

        if checks:
            for check in (
                self.check_disk_usage,
                self.check_temperature,
                self.check_load,
                self.check_ssh_root_login,
                self.log_system_info,
                self.check_reboot_required,
            ):
                yield self.report.add(check())

        if self.report.warnings:
            logger.warning(f"Maintenance finished with {len(self.report.warnings)} warning(s)")
        else:
            logger.info("Maintenance completed successfully")

    # Package updates

    def _apt(self, name: str, command: List[str], success: str, failure: str) -> StepResult:
        logger.info(f"==> {name}")
        result = self.runner.run(command)
        if result.ok:
            logger.info(success)
            status, message = StepStatus.SUCCESS, success
        else:
            logger.warning(failure)
            status, message = StepStatus.WARNING, failure
        return StepResult(name=name, status=status, message=message,
                          command=result.command, returncode=result.returncode)

    def update_packages(self) -> Generator[StepResult, None, None]:
        logger.info("==> Updating package lists")
        result = self.runner.run(["apt-get", "update"])
        if not result.ok:
            self.report.add(StepResult(name="apt-get update", status=StepStatus.FAILED,
                                       message="Failed to update package lists",
                                       command=result.command, returncode=result.returncode))
            raise StepFailedError("apt-get update", result.output)
        yield StepResult(name="apt-get update", status=StepStatus.SUCCESS,
                         message="Package lists updated",
                         command=result.command, returncode=result.returncode)

        yield self._apt("apt-get upgrade", ["apt-get", "upgrade", "-y"],
                        "System upgraded", "Some packages may not have been upgraded")

        if self._setting('full_upgrade', True):
            yield self._apt("apt-get full-upgrade", ["apt-get", "full-upgrade", "-y"],
                            "Full distribution upgrade completed",
                            "Some distribution upgrades may have failed")

        yield self._apt("apt-get autoremove", ["apt-get", "autoremove", "-y"],
                        "Obsolete packages removed", "Autoremove encountered issues")
        yield self._apt("apt-get autoclean", ["apt-get", "autoclean", "-y"],
                        "Package cache cleaned", "Autoclean encountered issues")

        if self._setting('pihole', True):
            yield self.update_pihole()

    def update_pihole(self) -> StepResult:
        if self.runner.which("pihole") is None:
            logger.warning("Pi-hole not installed")
            return StepResult(name="pihole", status=StepStatus.SKIPPED, message="Pi-hole not installed")
        return self._apt("pihole", ["pihole", "-up"],
                         "Pi-hole updated successfully", "Pi-hole update encountered issues")

    # Health checks

    def check_unattended_upgrades(self) -> StepResult:
        name = "unattended-upgrades"
        status = self.runner.run(["systemctl", "status", "unattended-upgrades"],
                                 log_stderr=False, read_only=True)
        if not status.ok:
            message = ("Unattended-upgrades service is not installed or not configured. "
                       "To install, run: sudo apt-get install unattended-upgrades")
            logger.warning(message)
            return StepResult(name=name, status=StepStatus.WARNING, message=message)

        active = self.runner.run(["systemctl", "is-active", "--quiet", "unattended-upgrades"],
                                 log_stderr=False, read_only=True)
        if active.ok:
            message = "Automatic security updates are enabled and running"
            logger.info(message)
            return StepResult(name=name, status=StepStatus.SUCCESS, message=message)

        message = ("Unattended-upgrades service is installed but not active. "
                   "To enable it, run: sudo systemctl enable --now unattended-upgrades")
        logger.warning(message)
        return StepResult(name=name, status=StepStatus.WARNING, message=message)

    def check_disk_usage(self) -> StepResult:
        path = self._setting('disk_path', '/')
        threshold = int(self._setting('disk_threshold_percent', 80))
        usage = shutil.disk_usage(path)
        # Same figure as df: used / (used + available), rounded up
        denominator = usage.used + usage.free
        percent = math.ceil(usage.used * 100 / denominator) if denominator else 0

        if percent > threshold:
            message = f"Disk usage is at {percent}%"
            logger.warning(message)
            status = StepStatus.WARNING
        else:
            message = f"Disk usage is healthy ({percent}%)"
            logger.info(message)
            status = StepStatus.SUCCESS
        return StepResult(name="disk", status=status, message=message, value=percent)

    def check_temperature(self) -> StepResult:
        if self.runner.which("vcgencmd") is None:
            message = "vcgencmd not available (not a Raspberry Pi or GPU drivers not installed)"
            logger.warning(message)
            return StepResult(name="temperature", status=StepStatus.SKIPPED, message=message)

        result = self.runner.run(["vcgencmd", "measure_temp"], read_only=True)
        match = TEMPERATURE_PATTERN.search(result.stdout) if result.ok else None
        if not match:
            message = f"Could not read temperature: {result.output or 'no output'}"
            logger.warning(message)
            return StepResult(name="temperature", status=StepStatus.WARNING, message=message)

        temperature = float(match.group(1))
        threshold = float(self._setting('temperature_threshold_c', 80))
        if temperature > threshold:
            message = f"Temperature is high: {temperature}°C"
            logger.warning(message)
            status = StepStatus.WARNING
        else:
            message = f"Temperature is normal: {temperature}°C"
            logger.info(message)
            status = StepStatus.SUCCESS
        return StepResult(name="temperature", status=status, message=message, value=temperature)

    def check_load(self) -> StepResult:
        loadavg = Path(self._setting('loadavg_file', '/proc/loadavg'))
        try:
            load = float(loadavg.read_text().split()[0])
        except (OSError, IndexError, ValueError) as e:
            message = f"Could not read system load: {e}"
            logger.warning(message)
            return StepResult(name="load", status=StepStatus.WARNING, message=message)

        message = f"System load: {load}"
        logger.info(message)
        return StepResult(name="load", status=StepStatus.SUCCESS, message=message, value=load)

    def check_ssh_root_login(self) -> StepResult:
        sshd_config = Path(self._setting('sshd_config', '/etc/ssh/sshd_config'))
        if not sshd_config.exists():
            message = "SSH configuration not found"
            logger.warning(message)
            return StepResult(name="ssh", status=StepStatus.WARNING, message=message)

        text = sshd_config.read_text(errors='replace')
        if re.search(r'^PermitRootLogin no', text, re.MULTILINE):
            message = "SSH root login is disabled"
            logger.info(message)
            return StepResult(name="ssh", status=StepStatus.SUCCESS, message=message)

        message = f"Consider disabling SSH root login: set 'PermitRootLogin no' in {sshd_config}"
        logger.warning(message)
        return StepResult(name="ssh", status=StepStatus.WARNING, message=message)

    def log_system_info(self) -> StepResult:
        """Record uname and os-release in the log file only."""
        lines = ["System Information:"]
        uname = self.runner.run(["uname", "-a"], read_only=True)
        if uname.ok:
            lines.append(uname.stdout.strip())

        os_release = Path(self._setting('os_release_file', '/etc/os-release'))
        if os_release.exists():
            lines.append(os_release.read_text(errors='replace').strip())

        logger.debug("\n".join(lines))
        return StepResult(name="system-info", status=StepStatus.SUCCESS,
                          message="System information written to log")

    def check_reboot_required(self) -> StepResult:
        marker = Path(self._setting('reboot_required_file', '/var/run/reboot-required'))
        if marker.exists():
            message = ("System reboot is required for updates to take effect. "
                       "To reboot now, run: sudo reboot. "
                       "To reboot later, run: sudo shutdown -r +60")
            logger.warning(message)
            return StepResult(name="reboot", status=StepStatus.WARNING, message=message, value=True)

        logger.info("No reboot required")
        return StepResult(name="reboot", status=StepStatus.SUCCESS, message="No reboot required", value=False)
