"""Typed TOML configuration for the jumpbox and upgrade procedures."""

from __future__ import annotations

import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path

from .errors import ConfigError
from .util import expand

DEFAULT_CONFIG_NAME = '.vmboot.toml'

UYUNI_GPG_KEY_URL = 'https://www.uyuni-project.org/keys/RPM-GPG-KEY-uyuni'
UYUNI_REPO_URL_TEMPLATE = (
    'https://download.opensuse.org/repositories/systemsmanagement:/Uyuni:/Stable/'
    'openSUSE_Leap_{release}/systemsmanagement:Uyuni:Stable.repo'
)


@dataclass
class LoggingConfig:
    jumpbox_log: str = '/root/jumpbox_setup.log'
    upgrade_log: str = '/root/uyuni_setup.log'


@dataclass
class JumpboxConfig:
    project_dir: str = '/root/jumpbox_setup'
    locale: str = 'en_US.UTF-8'
    prereq_packages: list[str] = field(
        default_factory=lambda: [
            'software-properties-common',
            'ansible',
            'python3',
            'python3-apt',
            'curl',
            'gnupg',
            'ca-certificates',
            'apt-transport-https',
            'locales',
        ]
    )
    tool_packages: list[str] = field(
        default_factory=lambda: [
            'git',
            'vim',
            'htop',
            'tmux',
            'jq',
            'unzip',
            'wget',
            'dnsutils',
            'net-tools',
        ]
    )
    docker_packages: list[str] = field(
        default_factory=lambda: ['docker.io', 'docker-compose-v2']
    )
    gcloud_key_url: str = 'https://packages.cloud.google.com/apt/doc/apt-key.gpg'
    gcloud_repo: str = 'https://packages.cloud.google.com/apt cloud-sdk main'


@dataclass
class UpgradeConfig:
    repos_dir: str = '/etc/zypp/repos.d'
    releases: list[str] = field(
        default_factory=lambda: ['15.4', '15.5', '15.6']
    )
    gpg_key_url: str = UYUNI_GPG_KEY_URL
    # Uyuni Stable publishes for 15.5; the 15.6 host reuses that repo.
    repo_release: str = '15.5'
    repo_url: str = ''
    pattern: str = 'patterns-uyuni_server'

    def resolved_repo_url(self) -> str:
        return self.repo_url or UYUNI_REPO_URL_TEMPLATE.format(
            release=self.repo_release
        )


@dataclass
class VMBootConfig:
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    jumpbox: JumpboxConfig = field(default_factory=JumpboxConfig)
    upgrade: UpgradeConfig = field(default_factory=UpgradeConfig)
    verbosity: int = 1

    def expanded_paths(self) -> 'VMBootConfig':
        self.logging.jumpbox_log = expand(self.logging.jumpbox_log)
        self.logging.upgrade_log = expand(self.logging.upgrade_log)
        self.jumpbox.project_dir = expand(self.jumpbox.project_dir)
        self.upgrade.repos_dir = expand(self.upgrade.repos_dir)
        return self


def _toml_escape(s: str) -> str:
    return s.replace('\\', '\\\\').replace('"', '\\"')


def dump_toml(cfg: VMBootConfig) -> str:
    d = asdict(cfg)
    lines: list[str] = []
    for section, body in d.items():
        if isinstance(body, dict):
            lines.append(f'[{section}]')
            for k, v in body.items():
                if isinstance(v, bool):
                    lines.append(f"{k} = {'true' if v else 'false'}")
                elif isinstance(v, int):
                    lines.append(f'{k} = {v}')
                elif isinstance(v, list):
                    parts = [f'"{_toml_escape(str(item))}"' for item in v]
                    lines.append(f"{k} = [{', '.join(parts)}]")
                else:
                    lines.append(f'{k} = "{_toml_escape(str(v))}"')
            lines.append('')
        elif section == 'verbosity' and body != 1:
            lines.insert(0, '')
            lines.insert(0, f'{section} = {body}')
    return '\n'.join(lines).rstrip() + '\n'


# Lists that must name at least one entry.
NON_EMPTY = {('upgrade', 'releases')}


def _check_value(section: str, key: str, value, default):
    where = f'{section}.{key}'
    if isinstance(default, list):
        if not isinstance(value, list) or not all(
            isinstance(item, str) for item in value
        ):
            raise ConfigError(f'{where} must be a list of strings, got {value!r}')
        if not value and (section, key) in NON_EMPTY:
            raise ConfigError(f'{where} must name at least one entry')
    elif isinstance(default, str) and not isinstance(value, str):
        raise ConfigError(f'{where} must be a string, got {value!r}')
    return value


def loads(text: str) -> VMBootConfig:
    try:
        raw = tomllib.loads(text)
    except tomllib.TOMLDecodeError as ex:
        raise ConfigError(f'Invalid config TOML: {ex}') from ex
    cfg = VMBootConfig()
    for section in ('logging', 'jumpbox', 'upgrade'):
        if section in raw and isinstance(raw[section], dict):
            obj = getattr(cfg, section)
            for k, v in raw[section].items():
                if hasattr(obj, k):
                    setattr(obj, k, _check_value(section, k, v, getattr(obj, k)))
    if 'verbosity' in raw:
        verbosity = raw['verbosity']
        if isinstance(verbosity, bool) or not isinstance(verbosity, int):
            raise ConfigError(f'verbosity must be an integer, got {verbosity!r}')
        cfg.verbosity = verbosity
    return cfg


def load(path: Path) -> VMBootConfig:
    return loads(path.read_text(encoding='utf-8'))


def save(path: Path, cfg: VMBootConfig) -> None:
    path.write_text(dump_toml(cfg), encoding='utf-8')


def resolve(path: str | Path | None) -> VMBootConfig:
    """Load an explicit config, else ``./.vmboot.toml``, else defaults."""
    if path is not None:
        p = Path(path)
        if not p.exists():
            raise ConfigError(f'Config not found: {p}')
        return load(p).expanded_paths()
    local = Path(DEFAULT_CONFIG_NAME)
    if local.exists():
        return load(local).expanded_paths()
    return VMBootConfig().expanded_paths()
