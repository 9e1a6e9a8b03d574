"""Execute tests for the CLI."""

from __future__ import annotations

import json
import logging
import os
import re
import subprocess
import sys
from pathlib import Path
from typing import Any, Callable, Sequence
from unittest import mock

import pytest
import tomlkit
import yaml
from pytest_mock import MockerFixture
from typer.testing import CliRunner

import envseed
from envseed.cli import app

# pylint: disable=redefined-outer-name


runner = CliRunner()

EXPECTED = {'KEY_0': 'value 0', 'KEY_1': 'value 1', 'KEY_2': 'multi\nline'}


def clean(text: str) -> str:
    """Remove hex/ANSI codes and leading/trailing newlines from the given string."""
    return re.sub(r'\x1b\[[0-9;]+m', '', text).strip()


@pytest.fixture
def mock_subprocess_run(mocker: MockerFixture) -> mock.MagicMock:
    """Patch `subprocess.run` to report an exit status of `3`."""
    return mocker.patch('subprocess.run', return_value=subprocess.CompletedProcess(args=[], returncode=3))


@pytest.mark.parametrize('args', [['-h'], ['--help']])
def test_help(args: Sequence[str]) -> None:
    """Verify the `-h` argument matches `--help`."""
    results = runner.invoke(app, args)
    stdout = clean(results.stdout)
    assert 0 == results.exit_code
    assert stdout.startswith('Usage')


def test_no_args() -> None:
    """Print the help message when no command is given."""
    results = runner.invoke(app, [])
    assert 'Usage' in clean(results.stdout)


def test_version() -> None:
    """Verify the `version` command returns the correct version."""
    result = runner.invoke(app, ['version'])
    assert 0 == result.exit_code
    assert envseed.__version__ == result.stdout.strip()


def test_get(example_dotenv: Path) -> None:
    """Print every variable as JSON (the default format)."""
    result = runner.invoke(app, ['get', '-f', str(example_dotenv)])
    assert 0 == result.exit_code, result.stdout
    assert EXPECTED == json.loads(result.stdout)


def test_get_keys(example_dotenv: Path) -> None:
    """Print only the named variables."""
    result = runner.invoke(app, ['get', 'KEY_1', 'KEY_2', '--file', str(example_dotenv)])
    assert 0 == result.exit_code, result.stdout
    assert {'KEY_1': 'value 1', 'KEY_2': 'multi\nline'} == json.loads(result.stdout)


def test_get_missing_key(example_dotenv: Path) -> None:
    """A key that was not parsed is an error."""
    result = runner.invoke(app, ['get', 'NOPE', '-f', str(example_dotenv)])
    assert 1 == result.exit_code
    assert 'Missing key: NOPE' in clean(result.stdout)


@pytest.mark.parametrize(('fmt', 'loads'), [('yaml', yaml.safe_load), ('yml', yaml.safe_load), ('toml', tomlkit.loads)])
def test_get_format(example_dotenv: Path, fmt: str, loads: Callable[[str], Any]) -> None:
    """Print the variables as YAML or TOML."""
    result = runner.invoke(app, ['get', '-f', str(example_dotenv), '--format', fmt])
    assert 0 == result.exit_code, result.stdout
    assert EXPECTED == loads(result.stdout)


def test_get_invalid_format(example_dotenv: Path) -> None:
    """Unsupported formats are rejected as usage errors."""
    result = runner.invoke(app, ['get', '-f', str(example_dotenv), '-F', 'xml'])
    assert 2 == result.exit_code  # noqa: PLR2004


def test_get_does_not_modify_environ(example_dotenv: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """The `get` command loads variables into a throwaway mapping."""
    monkeypatch.setenv('KEY_0', 'placeholder')
    monkeypatch.delenv('KEY_0')

    result = runner.invoke(app, ['get', '-f', str(example_dotenv)])

    assert 0 == result.exit_code, result.stdout
    assert 'KEY_0' not in os.environ


def test_get_override(example_dotenv: Path, second_dotenv: Path) -> None:
    """With `--override`, later files replace earlier ones."""
    result = runner.invoke(app, ['get', 'KEY_1', '-f', str(example_dotenv), '-f', str(second_dotenv), '-o'])
    assert 0 == result.exit_code, result.stdout
    assert {'KEY_1': 'overridden'} == json.loads(result.stdout)


def test_get_unreadable(tmp_path: Path) -> None:
    """Unreadable files are reported, and the exit status is `1`."""
    missing = tmp_path / 'missing.env'
    result = runner.invoke(app, ['get', '-f', str(missing)])
    assert 1 == result.exit_code
    assert 'could not read file' in clean(result.stdout)


def test_get_settings_file(example_dotenv: Path, second_dotenv: Path, tmp_path: Path) -> None:
    """Files and options are read from the settings file passed with `--config`."""
    # Arrange
    settings_file = tmp_path / 'custom-settings.yaml'
    settings_file.write_text(
        yaml.safe_dump({'ENVSEED_PATH': [str(example_dotenv), str(second_dotenv)], 'ENVSEED_OVERRIDE': True}),
        encoding='utf-8',
    )

    # Act
    result = runner.invoke(app, ['get', 'KEY_0', '--config', str(settings_file)])

    # Assert
    assert 0 == result.exit_code, result.stdout
    assert {'KEY_0': 'second'} == json.loads(result.stdout)


def test_get_environ_options(example_dotenv: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Files are read from `ENVSEED_CONFIG_PATH` when `--file` is not given."""
    monkeypatch.setenv('ENVSEED_CONFIG_PATH', str(example_dotenv))

    result = runner.invoke(app, ['get'])

    assert 0 == result.exit_code, result.stdout
    assert EXPECTED == json.loads(result.stdout)


def test_get_verbose(example_dotenv: Path, mock_logging_dict_config: mock.MagicMock) -> None:
    """The `--verbose` option configures logging at the `DEBUG` level."""
    result = runner.invoke(app, ['get', '-v', '-f', str(example_dotenv)])

    assert 0 == result.exit_code, result.stdout
    logging_config = mock_logging_dict_config.call_args[0][0]
    assert logging.DEBUG == logging_config['root']['level']


def test_run(example_dotenv: Path, mock_subprocess_run: mock.MagicMock) -> None:
    """Run the command with the loaded variables, and exit with its status."""
    # Act
    result = runner.invoke(app, ['run', '-f', str(example_dotenv), '--', 'printenv', 'KEY_0'])

    # Assert
    assert 3 == result.exit_code  # noqa: PLR2004
    mock_subprocess_run.assert_called_once()
    args, kwargs = mock_subprocess_run.call_args
    assert ['printenv', 'KEY_0'] == args[0]
    assert EXPECTED.items() <= kwargs['env'].items()
    assert os.environ['TERM'] == kwargs['env']['TERM']
    assert 'KEY_0' not in os.environ


def test_run_keeps_environ(
    example_dotenv: Path, mock_subprocess_run: mock.MagicMock, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Variables that are already defined win unless `--override` is given."""
    monkeypatch.setenv('KEY_0', 'from the shell')

    runner.invoke(app, ['run', '-f', str(example_dotenv), '--', 'true'])
    runner.invoke(app, ['run', '-f', str(example_dotenv), '--override', '--', 'true'])

    first, second = mock_subprocess_run.call_args_list
    assert 'from the shell' == first.kwargs['env']['KEY_0']
    assert 'value 0' == second.kwargs['env']['KEY_0']


def test_run_without_command(example_dotenv: Path, mock_subprocess_run: mock.MagicMock) -> None:
    """The help text is printed when no command is given."""
    result = runner.invoke(app, ['run', '-f', str(example_dotenv)])
    assert 1 == result.exit_code
    assert 'Usage' in clean(result.stdout)
    mock_subprocess_run.assert_not_called()


def test_run_command_not_found(example_dotenv: Path, mocker: MockerFixture) -> None:
    """A missing executable exits with status `127`."""
    mocker.patch('subprocess.run', side_effect=FileNotFoundError)

    result = runner.invoke(app, ['run', '-f', str(example_dotenv), '--', 'does-not-exist'])

    assert 127 == result.exit_code  # noqa: PLR2004
    assert 'command not found' in clean(result.stdout)


def test_run_unreadable(tmp_path: Path, mock_subprocess_run: mock.MagicMock) -> None:
    """The command is not run when a file cannot be read."""
    result = runner.invoke(app, ['run', '-f', str(tmp_path / 'missing.env'), '--', 'true'])
    assert 1 == result.exit_code
    mock_subprocess_run.assert_not_called()


def test_get_verbose_logs_to_stderr(example_dotenv: Path, tmp_path: Path) -> None:
    """Log records go to stderr, so the output of `get` can still be parsed."""
    # Arrange
    env = {**os.environ, 'COLUMNS': '200', 'HOME': str(tmp_path)}

    # Act
    result = subprocess.run(
        [sys.executable, '-m', 'envseed', 'get', '-v', '-f', str(example_dotenv)],
        capture_output=True,
        check=False,
        cwd=tmp_path,
        env=env,
        text=True,
    )

    # Assert
    assert 0 == result.returncode, result.stderr
    assert EXPECTED == json.loads(result.stdout)
    assert 'Read file' in result.stderr
    assert 'injecting 3 variable(s)' in result.stderr


def test_get_logs_info_to_stderr(example_dotenv: Path, tmp_path: Path) -> None:
    """Without `--verbose`, only `INFO` records are printed."""
    env = {**os.environ, 'COLUMNS': '200', 'HOME': str(tmp_path)}

    result = subprocess.run(
        [sys.executable, '-m', 'envseed', 'get', '-f', str(example_dotenv)],
        capture_output=True,
        check=False,
        cwd=tmp_path,
        env=env,
        text=True,
    )

    assert 0 == result.returncode, result.stderr
    assert EXPECTED == json.loads(result.stdout)
    assert 'injecting 3 variable(s)' in result.stderr
    assert 'Read file' not in result.stderr
