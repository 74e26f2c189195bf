"""Shared helpers for subprocess execution, paths, and command formatting."""

from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence

from loguru import logger

log = logger


@dataclass(frozen=True)
class CmdResult:
    code: int
    stdout: str
    stderr: str


class CmdError(RuntimeError):
    def __init__(self, cmd: Sequence[str] | str, result: CmdResult):
        self.cmd = cmd
        self.result = result
        shown = cmd if isinstance(cmd, str) else shell_join(cmd)
        super().__init__(
            f'Command failed (code={result.code}): {shown}\n{result.stderr}'.strip()
        )


def shell_join(cmd: Sequence[str]) -> str:
    return ' '.join(shlex.quote(c) for c in cmd)


def _stream(cmd: Sequence[str], env: Optional[dict[str, str]]) -> CmdResult:
    # Merged stdout/stderr is relayed line by line so it lands in every sink.
    proc = subprocess.Popen(
        list(cmd),
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        env=env,
    )
    lines: list[str] = []
    assert proc.stdout is not None
    with proc.stdout:
        for line in proc.stdout:
            line = line.rstrip('\n')
            lines.append(line)
            log.opt(depth=2).info('| {}', line)
    code = proc.wait()
    return CmdResult(code, '\n'.join(lines), '')


def run_cmd(
    cmd: Sequence[str],
    *,
    check: bool = True,
    capture: bool = True,
    stream: bool = False,
    text: bool = True,
    input_text: Optional[str] = None,
    env: Optional[dict[str, str]] = None,
) -> CmdResult:
    log.opt(depth=1).debug('RUN: {}', shell_join(cmd))
    if stream:
        res = _stream(cmd, env)
    else:
        p = subprocess.run(
            cmd,
            input=input_text if input_text is not None else None,
            capture_output=capture,
            text=text,
            env=env,
        )
        res = CmdResult(p.returncode, p.stdout or '', p.stderr or '')
    if check and res.code != 0:
        log.opt(depth=1).error(
            'Command failed code={} cmd={} stderr={} stdout={}',
            res.code,
            shell_join(cmd),
            res.stderr.strip(),
            res.stdout.strip()[-2000:],
        )
        raise CmdError(cmd, res)
    if res.code == 0:
        log.opt(depth=1).debug('Command ok code=0 cmd={}', shell_join(cmd))
    return res


def which(cmd: str) -> Optional[str]:
    from shutil import which as _which

    return _which(cmd)


def expand(path: str) -> str:
    return os.path.expandvars(os.path.expanduser(path))
