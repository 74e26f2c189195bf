"""CLI command for the openSUSE distribution upgrade."""

from __future__ import annotations

import scriptconfig as scfg

from ..errors import VMBootError
from ..host import host_is_opensuse, require_root
from ..runner import CommandRunner
from ..upgrade import upgrade_distribution
from ..util import CmdError
from ._common import _BaseCommand, _fail, _load_cfg, _start_logging, log


class UpgradeCLI(_BaseCommand):
    """Upgrade openSUSE Leap release by release and install Uyuni server."""

    dry_run = scfg.Value(
        False, isflag=True, help='Print actions without running.'
    )
    log_file = scfg.Value(
        None, help='Override the log file (default: logging.upgrade_log).'
    )

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        cfg = _load_cfg(args.config)
        _start_logging(args, cfg, cfg.logging.upgrade_log)
        try:
            if not args.dry_run:
                require_root()
                if not host_is_opensuse():
                    log.warning(
                        'Host is not detected as openSUSE; zypper steps may fail.'
                    )
            upgrade_distribution(
                cfg, runner=CommandRunner(dry_run=bool(args.dry_run))
            )
        except (VMBootError, CmdError) as ex:
            return _fail(ex)
        return 0
