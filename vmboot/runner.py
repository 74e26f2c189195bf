"""Command capability used by the procedures; swapped for fakes in tests."""

from __future__ import annotations

from typing import Optional, Sequence

from loguru import logger

from .util import CmdResult, run_cmd, shell_join

log = logger


class CommandRunner:
    """Runs external commands, streaming their output into the log."""

    # Whether procedures may read host files (e.g. zypper repo definitions).
    reads_host = True

    def __init__(
        self,
        *,
        dry_run: bool = False,
        env: Optional[dict[str, str]] = None,
    ) -> None:
        self.dry_run = dry_run
        self.env = env

    def run(self, cmd: Sequence[str], *, check: bool = True) -> CmdResult:
        cmd = list(cmd)
        if self.dry_run:
            log.opt(depth=1).info('DRYRUN: {}', shell_join(cmd))
            return CmdResult(0, '', '')
        return run_cmd(cmd, check=check, stream=True, env=self.env)


class RecordingRunner(CommandRunner):
    """Dry-run runner that keeps every command instead of executing it."""

    reads_host = False

    def __init__(self) -> None:
        super().__init__(dry_run=True)
        self.calls: list[list[str]] = []

    def run(self, cmd: Sequence[str], *, check: bool = True) -> CmdResult:
        cmd = list(cmd)
        self.calls.append(cmd)
        log.opt(depth=1).debug('PLAN: {}', shell_join(cmd))
        return CmdResult(0, '', '')
