"""CLI commands for the jumpbox procedure."""

from __future__ import annotations

from pathlib import Path

import scriptconfig as scfg

from ..errors import VMBootError
from ..host import require_root
from ..jumpbox import provision_jumpbox, validate_inputs
from ..playbook import build_jumpbox_project
from ..runner import CommandRunner
from ..util import CmdError
from ._common import _BaseCommand, _fail, _load_cfg, _start_logging, log


class JumpboxCLI(_BaseCommand):
    """Install Ansible and configure this host as a jumpbox."""

    username = scfg.Value(
        '', type=str, position=1, help='Account to create on the jumpbox.'
    )
    ssh_key = scfg.Value(
        '',
        type=str,
        position=2,
        help='SSH public key text for the account (empty skips key install).',
    )
    dry_run = scfg.Value(
        False, isflag=True, help='Print actions without running.'
    )
    log_file = scfg.Value(
        None, help='Override the log file (default: logging.jumpbox_log).'
    )

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        cfg = _load_cfg(args.config)
        _start_logging(args, cfg, cfg.logging.jumpbox_log)
        try:
            validate_inputs(args.username, args.ssh_key)
            if not args.dry_run:
                require_root()
            provision_jumpbox(
                cfg,
                args.username,
                args.ssh_key or '',
                runner=CommandRunner(dry_run=bool(args.dry_run)),
            )
        except (VMBootError, CmdError) as ex:
            return _fail(ex)
        return 0


class RenderCLI(_BaseCommand):
    """Write the jumpbox Ansible project without running anything."""

    out = scfg.Value(
        None, help='Output directory (default: jumpbox.project_dir).'
    )

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        cfg = _load_cfg(args.config)
        out = Path(args.out or cfg.jumpbox.project_dir)
        written = build_jumpbox_project(cfg.jumpbox).write(out)
        for rel in written:
            print(out / rel)
        log.debug('Rendered {} file(s) into {}', len(written), out)
        return 0
