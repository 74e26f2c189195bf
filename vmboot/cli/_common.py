from __future__ import annotations

from pathlib import Path

import scriptconfig as scfg
from loguru import logger

from .. import config as config_mod
from ..config import VMBootConfig
from ..errors import FatalError
from ..logs import setup_logging

log = logger


class _BaseCommand(scfg.DataConfig):
    """Base options shared by all commands."""

    config = scfg.Value(
        None, help='Path to config TOML (default: ./.vmboot.toml if present).'
    )
    verbose = scfg.Value(
        0,
        short_alias=['v'],
        isflag='counter',
        help='Increase verbosity (-v, -vv).',
    )


def _cfg_path(p: str | None) -> Path:
    return Path(p or config_mod.DEFAULT_CONFIG_NAME).resolve()


def _load_cfg(config_path: str | None) -> VMBootConfig:
    return config_mod.resolve(config_path)


def _effective_verbosity(args_verbose: int, cfg: VMBootConfig) -> int:
    """Each ``-v`` raises the configured level by one."""
    return int(cfg.verbosity) + int(args_verbose or 0)


def _start_logging(
    args, cfg: VMBootConfig, default_log: str
) -> str | None:
    """Route logs to the console plus the procedure's log file.

    Dry runs only write a file when ``--log_file`` is given explicitly.
    """
    log_file = args.log_file or (None if args.dry_run else default_log)
    setup_logging(log_file, _effective_verbosity(args.verbose, cfg))
    return log_file


def _fail(ex: Exception) -> int:
    """Emit the fatal line for ``ex`` and return the process exit status."""
    if not isinstance(ex, FatalError):
        log.error('{}', ex)
    return getattr(ex, 'exit_code', 1)
