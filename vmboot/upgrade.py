"""openSUSE Leap release-by-release upgrade followed by the Uyuni server install."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from loguru import logger

from . import logs
from .config import VMBootConfig
from .errors import ConfigError, RepoRewriteError, StepFailedError
from .pkg import Zypper, rpm_import
from .procedure import Step, run_procedure
from .results import RunReport
from .runner import CommandRunner

log = logger


def _release_pattern(release: str) -> re.Pattern[str]:
    # Literal match that cannot start or end inside a longer version number.
    return re.compile(r'(?<![\d.])' + re.escape(release) + r'(?![\d])')


def rewrite_text(text: str, old: str, new: str) -> str:
    return _release_pattern(old).sub(new, text)


def rewrite_repo_urls(
    repos_dir: str | Path, old: str, new: str, *, dry_run: bool = False
) -> list[Path]:
    """Replace release ``old`` with ``new`` in every ``*.repo`` file.

    Returns the files whose content changed. Running the same rewrite twice
    is a no-op the second time.
    """
    root = Path(repos_dir)
    if not root.is_dir():
        raise RepoRewriteError(f'Repository directory not found: {root}')
    repo_files = sorted(root.glob('*.repo'))
    if not repo_files:
        raise RepoRewriteError(f'No *.repo files found in {root}')
    changed: list[Path] = []
    for path in repo_files:
        text = path.read_text(encoding='utf-8')
        new_text = rewrite_text(text, old, new)
        if new_text == text:
            continue
        changed.append(path)
        if dry_run:
            log.info('DRYRUN: rewrite {} ({} -> {})', path, old, new)
        else:
            path.write_text(new_text, encoding='utf-8')
    log.debug(
        'Rewrote {}/{} repo file(s) {} -> {}',
        len(changed),
        len(repo_files),
        old,
        new,
    )
    return changed


class DistributionUpgrader:
    """Steps one Leap release at a time, then installs the Uyuni pattern."""

    def __init__(
        self,
        cfg: VMBootConfig,
        *,
        runner: Optional[CommandRunner] = None,
    ) -> None:
        self.cfg = cfg
        self.ucfg = cfg.upgrade
        self.runner = runner or CommandRunner()
        self.zypper = Zypper(self.runner)
        releases = list(self.ucfg.releases)
        if len(releases) < 1:
            raise ConfigError('upgrade.releases must name at least one release')
        self.releases = releases

    @property
    def final_release(self) -> str:
        return self.releases[-1]

    def update_current(self) -> None:
        current = self.releases[0]
        logs.info(f'Running system update on {current}...')
        self.zypper.refresh()
        self.zypper.update()
        logs.success(f'System is fully patched on {current}.')

    def upgrade_to(self, old: str, new: str) -> None:
        logs.info(f'Beginning automated upgrade to openSUSE Leap {new}...')
        logs.info(f'Updating all repository URLs from {old} to {new}...')
        if self.runner.reads_host:
            rewrite_repo_urls(
                self.ucfg.repos_dir, old, new, dry_run=self.runner.dry_run
            )
        logs.info(f'Refreshing repositories with {new} metadata...')
        self.zypper.refresh(auto_import_keys=True)
        logs.info(
            f'Running distribution upgrade to {new}... This will take a long time.'
        )
        self.zypper.dup()
        logs.success(f'Successfully upgraded to openSUSE Leap {new}.')

    def add_uyuni_repo(self) -> None:
        if self.ucfg.repo_release != self.final_release:
            log.warning(
                'Uyuni repository targets Leap {} but the host is on {}; '
                'continuing on the assumption that it is compatible.',
                self.ucfg.repo_release,
                self.final_release,
            )
        logs.info('Adding Uyuni GPG key...')
        rpm_import(self.runner, self.ucfg.gpg_key_url)
        logs.info(
            f'Adding Uyuni repository (using {self.ucfg.repo_release} URL)...'
        )
        self.zypper.addrepo(self.ucfg.resolved_repo_url(), gpgcheck=True)
        logs.info('Refreshing repositories with Uyuni...')
        self.zypper.refresh()
        logs.success('Uyuni repository added.')

    def install_pattern(self) -> None:
        logs.info('Installing Uyuni server pattern...')
        self.zypper.install([self.ucfg.pattern])
        logs.success('Uyuni server packages installed.')

    def final_instructions(self) -> None:
        logs.info('--- Script Finished ---')
        logs.info(
            f'VM is ready (on Leap {self.final_release}) and Uyuni packages are installed.'
        )
        logs.info('To complete setup, SSH in as root and run:')
        logs.info('  uyuni-server-setup')

    def steps(self) -> list[Step]:
        steps = [Step(f'update_{self.releases[0]}', self.update_current)]
        for old, new in zip(self.releases, self.releases[1:]):
            steps.append(
                Step(
                    f'upgrade_to_{new}',
                    lambda o=old, n=new: self.upgrade_to(o, n),
                    note=f'rewrite {old} -> {new} in {self.ucfg.repos_dir}/*.repo',
                )
            )
        steps.extend(
            [
                Step('add_uyuni_repo', self.add_uyuni_repo),
                Step('install_pattern', self.install_pattern),
                Step('final_instructions', self.final_instructions),
            ]
        )
        return steps

    def run(self) -> RunReport:
        logs.info('Starting Uyuni server setup for openSUSE.')
        return run_procedure('upgrade', self.steps())


def upgrade_distribution(
    cfg: VMBootConfig, *, runner: Optional[CommandRunner] = None
) -> RunReport:
    report = DistributionUpgrader(cfg, runner=runner).run()
    if not report.ok:
        raise StepFailedError(report)
    return report
