"""Result dataclasses produced by the step runner."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class StepResult:
    name: str
    ok: bool
    detail: str = ''
    elapsed_s: float = 0.0

    def as_dict(self) -> dict[str, object]:
        return {
            'name': self.name,
            'ok': self.ok,
            'detail': self.detail,
            'elapsed_s': round(self.elapsed_s, 3),
        }


@dataclass
class RunReport:
    procedure: str
    steps: list[StepResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(s.ok for s in self.steps)

    @property
    def failed_step(self) -> Optional[StepResult]:
        for step in self.steps:
            if not step.ok:
                return step
        return None

    def summary(self) -> str:
        failed = self.failed_step
        if failed is None:
            return f'{self.procedure}: {len(self.steps)} step(s) completed'
        detail = failed.detail.splitlines()[0] if failed.detail else 'failed'
        return f"{self.procedure}: step '{failed.name}' failed: {detail}"

    def as_dict(self) -> dict[str, object]:
        return {
            'procedure': self.procedure,
            'ok': self.ok,
            'steps': [s.as_dict() for s in self.steps],
        }
