"""Command-sequence preview for both procedures."""

from __future__ import annotations

import ubelt as ub

from ..config import VMBootConfig
from ..jumpbox import JumpboxProvisioner
from ..logs import setup_logging
from ..procedure import Step
from ..runner import RecordingRunner
from ..upgrade import DistributionUpgrader
from ..util import shell_join
from ._common import _BaseCommand, _load_cfg


def _render_steps(
    procedure: str, steps: list[Step], runner: RecordingRunner
) -> list[str]:
    lines = []
    for step in steps:
        header = f'# {procedure}: {step.name}'
        if step.note:
            header += f': {step.note}'
        lines.append(header)
        before = len(runner.calls)
        step.func()
        lines.extend(shell_join(cmd) for cmd in runner.calls[before:])
    return lines


def plan_lines(cfg: VMBootConfig) -> list[str]:
    """Walk both procedures against a recording runner.

    Lines starting with ``#`` name each step; every other line is a command
    exactly as the procedure would hand it to the runner.
    """
    runner = RecordingRunner()
    jumpbox = JumpboxProvisioner(cfg, '<username>', '<ssh_key>', runner=runner)
    lines = _render_steps('jumpbox', jumpbox.steps(), runner)
    lines.append('')
    runner = RecordingRunner()
    upgrader = DistributionUpgrader(cfg, runner=runner)
    lines.extend(_render_steps('upgrade', upgrader.steps(), runner))
    return lines


class PlanCLI(_BaseCommand):
    """Print the commands each procedure runs, in order."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        cfg = _load_cfg(args.config)
        # Step progress messages would interleave with the plan.
        setup_logging(None, args.verbose)
        lines = plan_lines(cfg)
        print(ub.highlight_code('\n'.join(lines), lexer_name='bash'))
        return 0
