"""Top-level modal CLI wiring, argv normalization, and exit handling."""

from __future__ import annotations

import sys

import scriptconfig as scfg

from ..errors import VMBootError
from ..logs import setup_logging
from ..util import CmdError
from ._common import _cfg_path, _load_cfg, log
from .config import ConfigModalCLI
from .help import PlanCLI
from .host import DoctorCLI
from .jumpbox import JumpboxCLI, RenderCLI
from .upgrade import UpgradeCLI


class VMBootModalCLI(scfg.ModalCLI):
    """Bootstrap a jumpbox host or upgrade an openSUSE host to Uyuni server."""

    jumpbox = JumpboxCLI
    upgrade = UpgradeCLI
    render = RenderCLI
    doctor = DoctorCLI
    config = ConfigModalCLI
    plan = PlanCLI


def main(argv: list[str] | None = None) -> None:
    if argv is None:
        argv = sys.argv[1:]
    argv = _normalize_argv(argv)
    verbosity = 1
    try:
        if _cfg_path(None).exists():
            verbosity = _load_cfg(None).verbosity
    except Exception:
        verbosity = 1
    # Console-only until a procedure attaches its log file.
    setup_logging(None, verbosity + _count_verbose(argv))

    try:
        rc = VMBootModalCLI.main(argv=argv, _noexit=True)
    except (VMBootError, CmdError) as ex:
        log.error('{}', ex)
        sys.exit(1)
    except Exception as ex:
        print(f'ERROR: {ex}', file=sys.stderr)
        log.error('Unhandled vmboot error: {}', ex)
        sys.exit(2)

    if any(flag in argv for flag in ('-h', '--help')):
        sys.exit(0)
    if isinstance(rc, int):
        sys.exit(rc)
    sys.exit(0)


def _normalize_argv(argv: list[str]) -> list[str]:
    """Accept hyphenated and short spellings of command names."""
    aliases = {'jump': 'jumpbox', 'dup': 'upgrade', 'check': 'doctor'}
    if argv and argv[0] in aliases:
        return [aliases[argv[0]], *argv[1:]]
    return argv


def _count_verbose(argv: list[str]) -> int:
    count = 0
    for item in argv:
        if item == '--verbose':
            count += 1
        elif item.startswith('-') and not item.startswith('--'):
            short = item[1:]
            if short and set(short) <= {'v'}:
                count += len(short)
    return count
