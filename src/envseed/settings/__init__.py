"""Read configuration for `envseed` itself.

Options for `envseed.loader.load()` are resolved from these sources (ordered by priority):

1. arguments passed on the command line
2. `ENVSEED_CONFIG_*` environment variables (see `options_from_environ()`)
3. the settings file (see `envseed.settings.schema` for its structure)
4. the defaults of `envseed.loader.LoadOptions`
"""

from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path
from typing import Any, Mapping

import pyspry
import rich.console

from envseed.loader import LoadOptions
from envseed.settings.schema import DictConfigDefault

__all__ = [
    'DEFAULT_LOGGING_CONFIG',
    'DEFAULT_PATHS',
    'ENVIRON_PREFIX',
    'PREFIX',
    'STDERR_CONSOLE',
    'Config',
    'load',
    'options_from_environ',
    'resolve_options',
    'resolve_path',
]

logger = logging.getLogger(__name__)

DEFAULT_PATHS = [
    Path.cwd() / 'envseed-settings.yaml',
    Path.home() / 'envseed-settings.yaml',
    Path('/etc/envseed/settings.yaml'),
]
"""Check each of these locations for `envseed`'s settings file.

The following locations are checked (ordered by priority):

1. `./envseed-settings.yaml`
2. `~/envseed-settings.yaml`
3. `/etc/envseed/settings.yaml`
"""

STDERR_CONSOLE = rich.console.Console(stderr=True)
"""Log records are printed here, so that `envseed get` keeps stdout for its output."""

DEFAULT_LOGGING_CONFIG: DictConfigDefault = {
    'version': 1,
    'formatters': {
        'simple': {
            'datefmt': logging.Formatter.default_time_format,
            'format': '%(message)s',
            'style': '%',
            'validate': False,
        },
    },
    'filters': {},
    'handlers': {
        'rich': {
            'class': 'rich.logging.RichHandler',
            'console': 'ext://envseed.settings.STDERR_CONSOLE',
            'formatter': 'simple',
            'rich_tracebacks': True,
        },
    },
    'loggers': {},
    'root': {
        'handlers': ['rich'],
        'level': logging.INFO,
        'propagate': False,
    },
    'disable_existing_loggers': False,
    'incremental': False,
}
"""Default logging configuration passed to `logging.config.dictConfig()`.

The `envseed.*` loggers are created on import, before this is applied; `disable_existing_loggers` must stay `False`
or they are silenced.
"""

PREFIX = 'ENVSEED'
"""Each key in the settings file must be prefixed with this string."""

ENVIRON_PREFIX = 'ENVSEED_CONFIG_'
"""Environment variables with this prefix override the settings file."""

TRUTHY = frozenset({'1', 'on', 'true', 'yes'})


@dataclasses.dataclass
class Config:
    """Wrap the `pyspry.Settings` object loaded from the settings file."""

    settings: pyspry.Settings
    """The contents of the settings file (without `PREFIX`)."""

    path: Path
    """The settings were loaded from this file."""

    def options(self) -> dict[str, Any]:
        """Collect the `envseed.loader.LoadOptions` arguments defined in the settings file.

        Unset keys are omitted:

        >>> load(example_settings).options()
        {'path': ['.env', '.env.local'], 'encoding': 'utf-8'}
        """
        out: dict[str, Any] = {}
        if path := self.settings.PATH:
            out['path'] = path if isinstance(path, str) else list(path)
        if self.settings.OVERRIDE:
            out['override'] = True
        if encoding := self.settings.ENCODING:
            out['encoding'] = str(encoding)
        return out


def load(path: Path) -> Config:
    """Load the settings from the given path.

    >>> conf = load(example_settings)
    >>> conf.settings.__class__
    <class 'pyspry.base.Settings'>
    """
    logger.debug("Load settings: '%s'", path)
    return Config(settings=pyspry.Settings.load(path, PREFIX), path=Path(path))


def resolve_path() -> Path:
    """Return the first path in `DEFAULT_PATHS` that exists."""
    for path in DEFAULT_PATHS:
        if path.is_file():
            return path

    raise FileNotFoundError('Could not find envseed settings', DEFAULT_PATHS)


def options_from_environ(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Collect the `envseed.loader.LoadOptions` arguments defined by `ENVSEED_CONFIG_*` variables.

    `ENVSEED_CONFIG_PATH` accepts a comma-separated list:

    >>> options_from_environ({'ENVSEED_CONFIG_PATH': '.env, .env.local', 'ENVSEED_CONFIG_OVERRIDE': 'True'})
    {'path': ['.env', '.env.local'], 'override': True}
    >>> options_from_environ({})
    {}
    """
    environ = os.environ if environ is None else environ
    out: dict[str, Any] = {}

    if path := environ.get(f'{ENVIRON_PREFIX}PATH'):
        out['path'] = [p.strip() for p in path.split(',') if p.strip()]

    if (override := environ.get(f'{ENVIRON_PREFIX}OVERRIDE')) is not None:
        out['override'] = override.strip().lower() in TRUTHY

    if encoding := environ.get(f'{ENVIRON_PREFIX}ENCODING'):
        out['encoding'] = encoding

    return out


def resolve_options(conf: Config | None, environ: Mapping[str, str] | None = None, **overrides: Any) -> LoadOptions:
    """Merge each source of options into a single `envseed.loader.LoadOptions` object.

    Overrides set to `None` are ignored:

    >>> options = resolve_options(load(example_settings), {}, path=None, override=True)
    >>> options.path, options.override
    (['.env', '.env.local'], True)
    """
    kwargs: dict[str, Any] = conf.options() if conf else {}
    kwargs.update(options_from_environ(environ))
    kwargs.update({key: value for key, value in overrides.items() if value is not None})

    logger.debug('resolved load options: %s', kwargs)
    return LoadOptions(**kwargs)


logger.debug('successfully imported %s', __name__)
