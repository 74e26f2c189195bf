from __future__ import annotations

import sys

import scriptconfig as scfg

from ..config import VMBootConfig, dump_toml, save
from ._common import _BaseCommand, _cfg_path, _load_cfg


class InitCLI(_BaseCommand):
    """Write a config file populated with the defaults."""

    force = scfg.Value(
        False, isflag=True, help='Overwrite an existing config file.'
    )

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        path = _cfg_path(args.config)
        if path.exists() and not args.force:
            print(f'Config already exists: {path}', file=sys.stderr)
            print('Use --force to overwrite it.', file=sys.stderr)
            return 2
        path.parent.mkdir(parents=True, exist_ok=True)
        save(path, VMBootConfig())
        print(f'Wrote config: {path}')
        return 0


class ConfigShowCLI(_BaseCommand):
    """Show the resolved config."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        print(dump_toml(_load_cfg(args.config)), end='')
        return 0


class ConfigModalCLI(scfg.ModalCLI):
    """Config file management."""

    init = InitCLI
    show = ConfigShowCLI
