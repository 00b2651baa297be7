"""
Maintenance step results.

Every package-manager invocation and health check produces a StepResult;
a run collects them into a MaintenanceReport.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any


class StepStatus(Enum):
    SUCCESS = "success"
    WARNING = "warning"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class StepResult:
    """Result of one maintenance step or health check."""
    name: str
    status: StepStatus
    message: str = ""
    command: Optional[str] = None
    returncode: Optional[int] = None
    value: Any = None

    @property
    def ok(self) -> bool:
        return self.status != StepStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'step': self.name,
            'status': self.status.value,
            'message': self.message,
        }
        if self.command is not None:
            result['command'] = self.command
            result['returncode'] = self.returncode
        if self.value is not None:
            result['value'] = self.value
        return result


@dataclass
class MaintenanceReport:
    """Ordered results of a maintenance run."""
    title: str
    results: List[StepResult] = field(default_factory=list)

    def add(self, result: StepResult) -> StepResult:
        self.results.append(result)
        return result

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    @property
    def warnings(self) -> List[StepResult]:
        return [r for r in self.results if r.status == StepStatus.WARNING]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'ok': self.ok,
            'warnings': len(self.warnings),
            'steps': [r.to_dict() for r in self.results],
        }
