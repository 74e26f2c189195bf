"""Host checks: required commands, OS family detection, and root access."""

from __future__ import annotations

import os
from pathlib import Path

from .errors import PrivilegeError
from .util import which

JUMPBOX_CMDS = ['apt-get', 'locale-gen', 'update-locale']
# ansible-playbook is installed by the jumpbox procedure itself.
JUMPBOX_OPTIONAL_CMDS = ['ansible-playbook']
UPGRADE_CMDS = ['zypper', 'rpm']


def check_commands(required: list[str]) -> list[str]:
    return [c for c in required if which(c) is None]


def _os_release() -> str:
    try:
        return Path('/etc/os-release').read_text(encoding='utf-8')
    except OSError:
        return ''


def host_is_debian_like() -> bool:
    data = _os_release()
    return any(k in data for k in ('ID=debian', 'ID=ubuntu', 'ID_LIKE=debian'))


def host_is_opensuse() -> bool:
    data = _os_release()
    return any(
        k in data
        for k in ('ID="opensuse-leap"', 'ID=opensuse-leap', 'ID_LIKE="suse')
    )


def require_root() -> None:
    if os.geteuid() != 0:
        raise PrivilegeError(
            'This procedure must run as root (try: sudo vmboot ...).'
        )
