from __future__ import annotations

from ..host import (
    JUMPBOX_CMDS,
    JUMPBOX_OPTIONAL_CMDS,
    UPGRADE_CMDS,
    check_commands,
    host_is_debian_like,
    host_is_opensuse,
)
from ._common import _BaseCommand


class DoctorCLI(_BaseCommand):
    """Check host prerequisites for the jumpbox and upgrade procedures."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        cls.cli(argv=argv, data=kwargs)
        rc = 2
        if host_is_debian_like():
            print('🐧 Debian/Ubuntu host: jumpbox procedure applies.')
        elif host_is_opensuse():
            print('🦎 openSUSE host: upgrade procedure applies.')
        else:
            print('➖ Host OS not recognized by either procedure.')
        for label, required in (
            ('jumpbox', JUMPBOX_CMDS),
            ('upgrade', UPGRADE_CMDS),
        ):
            missing = check_commands(required)
            if missing:
                print(f'❌ {label}: missing required commands:', ', '.join(missing))
            else:
                print(f'✅ {label}: required host commands are present.')
                rc = 0
        missing_opt = check_commands(JUMPBOX_OPTIONAL_CMDS)
        if missing_opt:
            print(
                '➖ jumpbox: not yet installed (installed by the procedure):',
                ', '.join(missing_opt),
            )
        return rc
