"""Typed builder for the jumpbox Ansible project and its YAML rendering.

The project is assembled in memory (inventory, one play, ordered roles) and
only then serialized, so its shape can be checked without touching disk::

    project = build_jumpbox_project(JumpboxConfig())
    project.write(Path('/root/jumpbox_setup'))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import ubelt as ub
import yaml

from .config import JumpboxConfig

# Ansible-side guard for the authorized_keys tasks.
HAS_SSH_KEY = 'ssh_key | length > 0'
GCLOUD_KEYRING = '/usr/share/keyrings/cloud.google.asc'

ROLE_ORDER = ('update_system', 'create_user', 'install_tools', 'install_docker')


@dataclass
class Task:
    name: str
    module: str
    args: dict[str, Any] = field(default_factory=dict)
    when: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {'name': self.name, self.module: dict(self.args)}
        if self.when:
            d['when'] = self.when
        return d


@dataclass
class Role:
    name: str
    tasks: list[Task] = field(default_factory=list)

    @property
    def tasks_path(self) -> str:
        return f'roles/{self.name}/tasks/main.yml'


@dataclass
class Inventory:
    group: str
    hosts: list[str] = field(default_factory=list)

    def render(self) -> str:
        return '\n'.join([f'[{self.group}]', *self.hosts]) + '\n'


@dataclass
class Play:
    name: str
    hosts: str
    roles: list[Role] = field(default_factory=list)
    become: bool = True
    gather_facts: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            'name': self.name,
            'hosts': self.hosts,
            'become': self.become,
            'gather_facts': self.gather_facts,
            'roles': [r.name for r in self.roles],
        }


@dataclass
class AnsibleProject:
    inventory: Inventory
    play: Play
    inventory_name: str = 'inventory.ini'
    playbook_name: str = 'site.yml'

    @property
    def roles(self) -> list[Role]:
        return self.play.roles

    def files(self) -> dict[str, str]:
        """Map of relative path to file text for the whole project."""
        out = {
            self.inventory_name: self.inventory.render(),
            self.playbook_name: dump_yaml([self.play.to_dict()]),
        }
        for role in self.roles:
            out[role.tasks_path] = dump_yaml([t.to_dict() for t in role.tasks])
        return out

    def write(self, root: Path) -> dict[str, Path]:
        root = ub.Path(root).ensuredir()
        written: dict[str, Path] = {}
        for rel, text in self.files().items():
            path = root / rel
            path.parent.ensuredir()
            path.write_text(text, encoding='utf-8')
            written[rel] = Path(path)
        return written


def dump_yaml(data: Any) -> str:
    return yaml.safe_dump(
        data,
        sort_keys=False,
        default_flow_style=False,
        explicit_start=True,
        width=1000,
    )


def _update_system_role() -> Role:
    return Role(
        'update_system',
        [
            Task(
                'Update apt cache and upgrade all packages',
                'ansible.builtin.apt',
                {
                    'update_cache': True,
                    'upgrade': 'dist',
                    'cache_valid_time': 3600,
                },
            ),
        ],
    )


def _create_user_role() -> Role:
    home = '/home/{{ username }}'
    return Role(
        'create_user',
        [
            Task(
                'Create user {{ username }}',
                'ansible.builtin.user',
                {
                    'name': '{{ username }}',
                    'shell': '/bin/bash',
                    'create_home': True,
                    'groups': 'sudo',
                    'append': True,
                },
            ),
            Task(
                'Create .ssh directory for {{ username }}',
                'ansible.builtin.file',
                {
                    'path': f'{home}/.ssh',
                    'state': 'directory',
                    'owner': '{{ username }}',
                    'group': '{{ username }}',
                    'mode': '0700',
                },
                when=HAS_SSH_KEY,
            ),
            Task(
                'Install authorized SSH key for {{ username }}',
                'ansible.builtin.copy',
                {
                    'content': '{{ ssh_key }}',
                    'dest': f'{home}/.ssh/authorized_keys',
                    'owner': '{{ username }}',
                    'group': '{{ username }}',
                    'mode': '0600',
                },
                when=HAS_SSH_KEY,
            ),
        ],
    )


def _install_tools_role(cfg: JumpboxConfig) -> Role:
    return Role(
        'install_tools',
        [
            Task(
                'Install auxiliary tools',
                'ansible.builtin.apt',
                {'name': list(cfg.tool_packages), 'state': 'present'},
            ),
            Task(
                'Download Google Cloud signing key',
                'ansible.builtin.get_url',
                {
                    'url': cfg.gcloud_key_url,
                    'dest': GCLOUD_KEYRING,
                    'mode': '0644',
                },
            ),
            Task(
                'Add Google Cloud CLI repository',
                'ansible.builtin.apt_repository',
                {
                    'repo': f'deb [signed-by={GCLOUD_KEYRING}] {cfg.gcloud_repo}',
                    'filename': 'google-cloud-sdk',
                    'state': 'present',
                },
            ),
            Task(
                'Install Google Cloud CLI',
                'ansible.builtin.apt',
                {
                    'name': 'google-cloud-cli',
                    'state': 'present',
                    'update_cache': True,
                },
            ),
        ],
    )


def _install_docker_role(cfg: JumpboxConfig) -> Role:
    return Role(
        'install_docker',
        [
            Task(
                'Install Docker',
                'ansible.builtin.apt',
                {'name': list(cfg.docker_packages), 'state': 'present'},
            ),
            Task(
                'Start and enable Docker',
                'ansible.builtin.service',
                {'name': 'docker', 'state': 'started', 'enabled': True},
            ),
            Task(
                'Add {{ username }} to the docker group',
                'ansible.builtin.user',
                {'name': '{{ username }}', 'groups': 'docker', 'append': True},
            ),
        ],
    )


def build_jumpbox_project(cfg: JumpboxConfig) -> AnsibleProject:
    roles = [
        _update_system_role(),
        _create_user_role(),
        _install_tools_role(cfg),
        _install_docker_role(cfg),
    ]
    play = Play('Configure jumpbox', 'jumpbox', roles=roles)
    inventory = Inventory('jumpbox', ['localhost ansible_connection=local'])
    return AnsibleProject(inventory=inventory, play=play)
