from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from loguru import logger

from vmboot.cli import VMBootModalCLI, main
from vmboot.cli._common import _effective_verbosity
from vmboot.cli.config import ConfigShowCLI, InitCLI
from vmboot.cli.help import plan_lines
from vmboot.cli.host import DoctorCLI
from vmboot.cli.jumpbox import JumpboxCLI, RenderCLI
from vmboot.cli.upgrade import UpgradeCLI
from vmboot.config import VMBootConfig, load
from vmboot.jumpbox import JumpboxProvisioner
from vmboot.runner import RecordingRunner
from vmboot.upgrade import DistributionUpgrader
from vmboot.util import shell_join


def test_jumpbox_empty_username_exits_one(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        'vmboot.cli.jumpbox.provision_jumpbox',
        lambda *a, **k: pytest.fail('must not provision'),
    )
    log_file = tmp_path / 'jb.log'
    rc = JumpboxCLI.main(
        argv=False, username='', dry_run=True, log_file=str(log_file)
    )
    assert rc == 1
    logger.remove()
    assert '- ERROR: Username is required.' in log_file.read_text(encoding='utf-8')


def test_jumpbox_requires_root_for_real_runs(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr('vmboot.host.os.geteuid', lambda: 1000)
    rc = JumpboxCLI.main(
        argv=False, username='carl', log_file=str(tmp_path / 'jb.log')
    )
    assert rc == 1


def test_jumpbox_dry_run_succeeds(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    rc = JumpboxCLI.main(
        argv=False, username='carl', ssh_key='ssh-ed25519 AAAA carl@host', dry_run=True
    )
    assert rc == 0


def test_upgrade_dry_run_missing_repos_exits_one(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / '.vmboot.toml').write_text(
        f'[upgrade]\nrepos_dir = "{tmp_path / "nope"}"\n', encoding='utf-8'
    )
    log_file = tmp_path / 'up.log'
    rc = UpgradeCLI.main(argv=False, dry_run=True, log_file=str(log_file))
    assert rc == 1
    logger.remove()
    text = log_file.read_text(encoding='utf-8')
    assert "- ERROR: upgrade: step 'upgrade_to_15.5' failed" in text


def test_render_and_config_commands(tmp_path: Path, capsys) -> None:
    out = tmp_path / 'rendered'
    assert RenderCLI.main(argv=False, out=str(out)) == 0
    assert (out / 'site.yml').is_file()
    assert (out / 'roles' / 'install_docker' / 'tasks' / 'main.yml').is_file()

    cfg_path = tmp_path / 'vmboot.toml'
    assert InitCLI.main(argv=False, config=str(cfg_path)) == 0
    assert load(cfg_path).upgrade.pattern == 'patterns-uyuni_server'
    assert InitCLI.main(argv=False, config=str(cfg_path)) == 2
    assert InitCLI.main(argv=False, config=str(cfg_path), force=True) == 0
    capsys.readouterr()
    assert ConfigShowCLI.main(argv=False, config=str(cfg_path)) == 0
    assert '[upgrade]' in capsys.readouterr().out


def test_doctor_reports_missing(monkeypatch, capsys) -> None:
    monkeypatch.setattr('vmboot.host.which', lambda cmd: None)
    assert DoctorCLI.main(argv=False) == 2
    out = capsys.readouterr().out
    assert 'zypper' in out
    monkeypatch.setattr('vmboot.host.which', lambda cmd: f'/usr/bin/{cmd}')
    assert DoctorCLI.main(argv=False) == 0


def test_main_exit_codes(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as exc:
        main(['render', '--out', str(tmp_path / 'out')])
    assert exc.value.code == 0
    (tmp_path / '.vmboot.toml').write_text(
        f'[upgrade]\nrepos_dir = "{tmp_path / "nope"}"\n', encoding='utf-8'
    )
    with pytest.raises(SystemExit) as exc:
        main(['upgrade', '--dry_run'])
    assert exc.value.code == 1


def test_plan_prints_both_procedures(capsys) -> None:
    rc = VMBootModalCLI.main(argv=['plan'], _noexit=True)
    assert rc == 0
    out = capsys.readouterr().out
    assert 'ansible' in out
    assert 'zypper' in out


def _record_jumpbox_runs(monkeypatch) -> list[RecordingRunner]:
    runners: list[RecordingRunner] = []

    def factory(**kwargs):
        runners.append(RecordingRunner())
        return runners[-1]

    monkeypatch.setattr('vmboot.cli.jumpbox.CommandRunner', factory)
    return runners


def test_jumpbox_positionals_stay_text(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    runners = _record_jumpbox_runs(monkeypatch)
    key = 'no-port-forwarding,no-agent-forwarding ssh-ed25519 AAAAC3Nza carl@host'
    with pytest.raises(SystemExit) as exc:
        main(['jumpbox', 'carl', key, '--dry_run'])
    assert exc.value.code == 0
    engine = runners[-1].calls[-1]
    assert engine[0] == 'ansible-playbook'
    assert json.loads(engine[5]) == {'username': 'carl', 'ssh_key': key}

    with pytest.raises(SystemExit) as exc:
        main(['jumpbox', 'True', '1', '--dry_run'])
    assert exc.value.code == 0
    assert json.loads(runners[-1].calls[-1][5]) == {'username': 'True', 'ssh_key': '1'}


@pytest.mark.parametrize(
    'toml_text', ['[upgrade]\nreleases = "15.6"\n', '[upgrade]\nreleases = []\n']
)
def test_bad_config_exits_one(tmp_path: Path, monkeypatch, toml_text) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / '.vmboot.toml').write_text(toml_text, encoding='utf-8')
    with pytest.raises(SystemExit) as exc:
        main(['upgrade', '--dry_run'])
    assert exc.value.code == 1


def test_missing_explicit_config_exits_one(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as exc:
        main(['plan', '--config', str(tmp_path / 'missing.toml')])
    assert exc.value.code == 1


def test_plan_matches_executed_commands(tmp_path: Path, fake_runner) -> None:
    cfg = VMBootConfig()
    cfg.jumpbox.project_dir = str(tmp_path / 'jumpbox_setup')
    repos = tmp_path / 'repos.d'
    repos.mkdir()
    (repos / 'repo-oss.repo').write_text(
        'baseurl=http://download.opensuse.org/distribution/leap/15.4/repo/oss/\n',
        encoding='utf-8',
    )
    cfg.upgrade.repos_dir = str(repos)

    lines = plan_lines(cfg)
    commands = [line for line in lines if line and not line.startswith('#')]

    jumpbox_runner = fake_runner()
    JumpboxProvisioner(
        cfg, '<username>', '<ssh_key>', runner=jumpbox_runner
    ).run()
    upgrade_runner = fake_runner()
    assert DistributionUpgrader(cfg, runner=upgrade_runner).run().ok
    executed = jumpbox_runner.calls + upgrade_runner.calls
    assert commands == [shell_join(cmd) for cmd in executed]

    assert any(
        line.startswith('env DEBIAN_FRONTEND=noninteractive apt-get install -y')
        for line in commands
    )
    assert f'# upgrade: upgrade_to_15.5: rewrite 15.4 -> 15.5 in {repos}/*.repo' in lines
    assert '# jumpbox: generate_project: write Ansible project to ' + str(
        tmp_path / 'jumpbox_setup'
    ) in lines


def test_plan_does_not_touch_repo_files(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / '.vmboot.toml').write_text(
        f'[upgrade]\nrepos_dir = "{tmp_path / "nope"}"\n', encoding='utf-8'
    )
    rc = VMBootModalCLI.main(argv=['plan'], _noexit=True)
    assert rc == 0
    out = capsys.readouterr().out
    assert 'dup' in out
    assert not (tmp_path / 'nope').exists()


def test_verbose_flag_raises_configured_level(tmp_path: Path, monkeypatch) -> None:
    cfg = VMBootConfig()
    assert _effective_verbosity(0, cfg) == 1
    assert _effective_verbosity(1, cfg) == 2
    cfg.verbosity = 0
    assert _effective_verbosity(1, cfg) == 1

    monkeypatch.chdir(tmp_path)
    levels = []
    monkeypatch.setattr(
        sys.modules['vmboot.cli.main'],
        'setup_logging',
        lambda log_file, verbosity: levels.append(verbosity),
    )
    with pytest.raises(SystemExit):
        main(['render', '--out', str(tmp_path / 'out'), '-v'])
    assert levels == [2]
