"""apt and zypper invocations behind small wrappers."""

from __future__ import annotations

from typing import Iterable

from .errors import ConfigError
from .runner import CommandRunner
from .util import CmdResult

ZYPPER = ['zypper', '--non-interactive']


class Apt:
    def __init__(self, runner: CommandRunner) -> None:
        self.runner = runner

    def update(self) -> CmdResult:
        return self.runner.run(['apt-get', 'update', '-y'])

    def install(self, pkgs: Iterable[str]) -> CmdResult:
        pkgs = list(pkgs)
        if not pkgs:
            raise ConfigError('apt install needs at least one package')
        return self.runner.run(
            [
                'env',
                'DEBIAN_FRONTEND=noninteractive',
                'apt-get',
                'install',
                '-y',
                *pkgs,
            ]
        )


class Zypper:
    def __init__(self, runner: CommandRunner) -> None:
        self.runner = runner

    def refresh(self, *, auto_import_keys: bool = False) -> CmdResult:
        if auto_import_keys:
            return self.runner.run([*ZYPPER, '--gpg-auto-import-keys', 'refresh'])
        return self.runner.run([*ZYPPER, 'refresh'])

    def update(self) -> CmdResult:
        return self.runner.run([*ZYPPER, 'update', '-y'])

    def dup(self) -> CmdResult:
        return self.runner.run([*ZYPPER, 'dup', '-y'])

    def addrepo(self, url: str, *, gpgcheck: bool = True) -> CmdResult:
        flags = ['--gpgcheck'] if gpgcheck else ['--no-gpgcheck']
        return self.runner.run([*ZYPPER, 'addrepo', *flags, url])

    def install(self, pkgs: Iterable[str]) -> CmdResult:
        pkgs = list(pkgs)
        if not pkgs:
            raise ConfigError('zypper install needs at least one package')
        return self.runner.run([*ZYPPER, 'install', '-y', *pkgs])


def rpm_import(runner: CommandRunner, key_url: str) -> CmdResult:
    return runner.run(['rpm', '--import', key_url])
