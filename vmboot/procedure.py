"""Ordered step execution that stops at the first failure."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Sequence

from loguru import logger

from .errors import VMBootError
from .results import RunReport, StepResult
from .util import CmdError

log = logger


@dataclass(frozen=True)
class Step:
    name: str
    func: Callable[[], object]
    # Describes work done outside the runner (file writes, repo rewrites).
    note: str = ''


def run_procedure(name: str, steps: Sequence[Step]) -> RunReport:
    """Run ``steps`` in order and return the aggregated report.

    Execution stops at the first step raising :class:`CmdError`,
    :class:`VMBootError` or :class:`OSError`; later steps are not attempted
    and do not appear in the report.
    """
    report = RunReport(procedure=name)
    for step in steps:
        log.debug('Step start: {} / {}', name, step.name)
        start = time.monotonic()
        try:
            step.func()
        except (CmdError, VMBootError, OSError) as ex:
            elapsed = time.monotonic() - start
            report.steps.append(
                StepResult(step.name, False, str(ex), elapsed)
            )
            log.debug('Step failed: {} / {}: {}', name, step.name, ex)
            break
        report.steps.append(
            StepResult(step.name, True, '', time.monotonic() - start)
        )
    return report
