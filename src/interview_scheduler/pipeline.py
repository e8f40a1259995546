"""Step runner with two failure policies.

``required`` steps stop the run on the first failure and re-raise it.
``best_effort`` steps are logged and recorded as warnings; the run goes on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable

from interview_scheduler.errors import IntegrationWarning
from interview_scheduler.schemas import SchedulerState

log = logging.getLogger(__name__)


class StepPolicy(str, Enum):
    REQUIRED = "required"
    BEST_EFFORT = "best_effort"


@dataclass
class Step:
    name: str
    state: SchedulerState
    policy: StepPolicy
    action: Callable[[], Awaitable[None]]


@dataclass
class StepRunner:
    state: SchedulerState = SchedulerState.IDLE
    warnings: list[IntegrationWarning] = field(default_factory=list)
    completed: list[str] = field(default_factory=list)

    async def run(self, steps: list[Step]) -> None:
        for step in steps:
            self.state = step.state
            try:
                await step.action()
            except Exception as exc:
                if step.policy is StepPolicy.REQUIRED:
                    self.state = SchedulerState.ERROR
                    log.error("Step '%s' failed: %s", step.name, exc)
                    raise
                warning = exc if isinstance(exc, IntegrationWarning) else IntegrationWarning(step.name, str(exc))
                log.warning("Step '%s' failed, continuing: %s", step.name, warning)
                self.warnings.append(warning)
                continue
            self.completed.append(step.name)
        self.state = SchedulerState.DONE
