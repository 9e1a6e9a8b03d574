"""Define fixtures for the test suite."""

from __future__ import annotations

from pathlib import Path
from unittest import mock

import pytest
import pytest_mock

from envseed import settings

# pylint: disable=redefined-outer-name

MOCK_DOTENV = r"""
# an example .env file
KEY_0=value 0
KEY_1="value 1"
KEY_2="multi\nline"
""".lstrip()

MOCK_SECOND_DOTENV = """
KEY_0=second
KEY_1=overridden
KEY_3='only in the second file'
""".lstrip()

MOCK_SETTINGS = """
ENVSEED_PATH:
  - .env
  - .env.local
ENVSEED_OVERRIDE: false
ENVSEED_ENCODING: utf-8
""".lstrip()


@pytest.fixture(autouse=True)
def monkeypatch_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    """Monkeypatch environment variables for all tests."""
    monkeypatch.setenv('TERM', 'dumb')
    for name in ('PATH', 'OVERRIDE', 'ENCODING'):
        monkeypatch.delenv(f'{settings.ENVIRON_PREFIX}{name}', raising=False)


@pytest.fixture(autouse=True)
def monkeypatch_settings_paths(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> list[Path]:
    """Keep settings files on the host from leaking into tests."""
    paths = [tmp_path / 'does-not-exist.yaml']
    monkeypatch.setattr(settings, 'DEFAULT_PATHS', paths)
    return paths


@pytest.fixture
def example_dotenv(tmp_path: Path) -> Path:
    """Write an example `.env` file to the temporary directory."""
    path = tmp_path / '.env'
    path.write_text(MOCK_DOTENV, encoding='utf-8')
    return path


example_dotenv.__doc__ = f"""Write an example `.env` file to the temporary directory.

```sh
{MOCK_DOTENV}
```
"""


@pytest.fixture
def second_dotenv(tmp_path: Path) -> Path:
    """Write a second `.env` file that redefines some of the keys in `example_dotenv`."""
    path = tmp_path / '.env.local'
    path.write_text(MOCK_SECOND_DOTENV, encoding='utf-8')
    return path


@pytest.fixture
def example_settings(tmp_path: Path) -> Path:
    """Write an example settings file to the temporary directory."""
    path = tmp_path / 'envseed-settings.yaml'
    path.write_text(MOCK_SETTINGS, encoding='utf-8')
    return path


@pytest.fixture(autouse=True)
def mock_logging_dict_config(mocker: pytest_mock.MockerFixture) -> mock.MagicMock:
    """Mock the `logging.config.dictConfig()` function."""
    return mocker.patch('logging.config.dictConfig')
