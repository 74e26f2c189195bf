from __future__ import annotations

import re
from pathlib import Path

import pytest
from loguru import logger

from vmboot import logs
from vmboot.errors import FatalError

LINE_RE = re.compile(r'^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] - (\w+): (.*)$')


def test_lines_are_timestamped_and_appended(tmp_path: Path) -> None:
    log_file = tmp_path / 'sub' / 'setup.log'
    log_file.parent.mkdir()
    log_file.write_text('previous run\n', encoding='utf-8')
    logs.setup_logging(log_file, 1, colorize=False)
    logs.info('hello')
    logs.success('done')
    logger.remove()
    lines = log_file.read_text(encoding='utf-8').splitlines()
    assert lines[0] == 'previous run'
    parsed = [LINE_RE.match(line).groups() for line in lines[1:]]
    assert parsed == [('INFO', 'hello'), ('SUCCESS', 'done')]


def test_fatal_logs_error_and_raises(tmp_path: Path) -> None:
    log_file = tmp_path / 'setup.log'
    logs.setup_logging(log_file, 0, colorize=False)
    with pytest.raises(FatalError) as exc:
        logs.fatal('it broke')
    assert exc.value.exit_code == 1
    logger.remove()
    text = log_file.read_text(encoding='utf-8')
    assert '- ERROR: it broke' in text


def test_file_keeps_info_when_console_is_quiet(tmp_path: Path, capsys) -> None:
    log_file = tmp_path / 'setup.log'
    logs.setup_logging(log_file, 0, colorize=False)
    logs.info('progress')
    logger.remove()
    assert 'progress' in log_file.read_text(encoding='utf-8')
    assert 'progress' not in capsys.readouterr().err
