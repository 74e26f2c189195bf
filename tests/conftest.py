from __future__ import annotations

import sys
from typing import Sequence

import pytest
from loguru import logger

from vmboot.runner import CommandRunner
from vmboot.util import CmdError, CmdResult


class FakeRunner(CommandRunner):
    """Records commands; any command containing ``fail_on`` exits with ``code``."""

    def __init__(self, fail_on: str | None = None, code: int = 1) -> None:
        super().__init__(dry_run=False)
        self.calls: list[list[str]] = []
        self.fail_on = fail_on
        self.code = code

    def run(self, cmd: Sequence[str], *, check: bool = True) -> CmdResult:
        cmd = list(cmd)
        self.calls.append(cmd)
        if self.fail_on is not None and self.fail_on in cmd:
            res = CmdResult(self.code, '', 'boom')
            if check:
                raise CmdError(cmd, res)
            return res
        return CmdResult(0, '', '')


@pytest.fixture
def fake_runner():
    return FakeRunner


@pytest.fixture(autouse=True)
def _reset_loguru():
    yield
    # Closes any file sinks a test attached.
    logger.remove()
    logger.add(sys.stderr)
