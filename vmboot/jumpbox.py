"""Jumpbox provisioning: install Ansible, generate the project, and run it."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Optional

from loguru import logger

from . import logs
from .config import VMBootConfig
from .errors import MissingInputError, StepFailedError
from .pkg import Apt
from .playbook import AnsibleProject, build_jumpbox_project
from .procedure import Step, run_procedure
from .results import RunReport
from .runner import CommandRunner
from .util import CmdResult

log = logger

# Debian's default NAME_REGEX, widened to allow upper case.
USERNAME_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_.-]{0,31}\$?$')


def validate_inputs(username: str, ssh_key: str) -> str:
    if username is not None and not isinstance(username, str):
        raise MissingInputError(f'Username must be text, got {username!r}')
    if ssh_key is not None and not isinstance(ssh_key, str):
        raise MissingInputError(f'SSH public key must be text, got {ssh_key!r}')
    name = (username or '').strip()
    if not name:
        raise MissingInputError(
            'Username is required. Usage: vmboot jumpbox <username> [<ssh_public_key>]'
        )
    if not USERNAME_RE.match(name):
        raise MissingInputError(f'Invalid username: {username!r}')
    return name


def extra_vars(username: str, ssh_key: str) -> str:
    return json.dumps({'username': username, 'ssh_key': ssh_key})


def playbook_cmd(
    project_dir: Path, project: AnsibleProject, username: str, ssh_key: str
) -> list[str]:
    return [
        'ansible-playbook',
        '-i',
        str(project_dir / project.inventory_name),
        str(project_dir / project.playbook_name),
        '--extra-vars',
        extra_vars(username, ssh_key),
    ]


class JumpboxProvisioner:
    """Runs the jumpbox steps in order against an injected runner."""

    def __init__(
        self,
        cfg: VMBootConfig,
        username: str,
        ssh_key: str = '',
        *,
        runner: Optional[CommandRunner] = None,
    ) -> None:
        self.cfg = cfg
        self.username = username
        self.ssh_key = ssh_key or ''
        self.runner = runner or CommandRunner()
        self.apt = Apt(self.runner)
        self.project = build_jumpbox_project(cfg.jumpbox)
        self.project_dir = Path(cfg.jumpbox.project_dir)
        self.engine_result: Optional[CmdResult] = None

    def install_prerequisites(self) -> None:
        logs.info('Installing prerequisites (Ansible and friends)...')
        self.apt.update()
        self.apt.install(self.cfg.jumpbox.prereq_packages)
        logs.success('Prerequisites installed.')

    def configure_locale(self) -> None:
        locale = self.cfg.jumpbox.locale
        logs.info(f'Configuring system locale {locale}...')
        self.runner.run(['locale-gen', locale])
        self.runner.run(['update-locale', f'LANG={locale}'])
        logs.success(f'Locale set to {locale}.')

    def generate_project(self) -> None:
        logs.info(f'Generating Ansible project in {self.project_dir}...')
        if self.runner.dry_run:
            for rel in self.project.files():
                log.info('DRYRUN: write {}', self.project_dir / rel)
            return
        written = self.project.write(self.project_dir)
        log.debug('Wrote {} project file(s)', len(written))
        logs.success('Ansible project generated.')

    def run_playbook(self) -> None:
        logs.info('Running Ansible playbook...')
        cmd = playbook_cmd(
            self.project_dir, self.project, self.username, self.ssh_key
        )
        self.engine_result = self.runner.run(cmd, check=False)

    def verify(self) -> None:
        res = self.engine_result
        if res is None or res.code != 0:
            code = 'n/a' if res is None else res.code
            logs.fatal(f'Ansible playbook execution failed (exit code {code}).')
        logs.success(f'Jumpbox setup for user {self.username} completed.')

    def steps(self) -> list[Step]:
        return [
            Step('install_prerequisites', self.install_prerequisites),
            Step('configure_locale', self.configure_locale),
            Step(
                'generate_project',
                self.generate_project,
                note=f'write Ansible project to {self.project_dir}',
            ),
            Step('run_playbook', self.run_playbook),
            Step('verify', self.verify),
        ]

    def run(self) -> RunReport:
        logs.info(f'Starting jumpbox setup for user {self.username}.')
        return run_procedure('jumpbox', self.steps())


def provision_jumpbox(
    cfg: VMBootConfig,
    username: str,
    ssh_key: str = '',
    *,
    runner: Optional[CommandRunner] = None,
) -> RunReport:
    """Validate inputs, then run every jumpbox step.

    Raises :class:`MissingInputError` before any package operation when the
    username is unusable, and :class:`StepFailedError` when a step fails.
    """
    name = validate_inputs(username, ssh_key)
    if not ssh_key:
        logs.info('No SSH public key given; key installation will be skipped.')
    report = JumpboxProvisioner(cfg, name, ssh_key, runner=runner).run()
    if not report.ok:
        raise StepFailedError(report)
    return report
