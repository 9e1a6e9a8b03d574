"""Create `envseed`'s CLI with `typer`_.

## Usage

Print the variables defined by `.env` files (the environment is not modified):

```sh
❯ envseed get -f .env -f .env.local --format yaml
```

Run a command with the variables merged into its environment:

```sh
❯ envseed run -f .env -- python manage.py runserver
```

.. note:: `typer`_ does not support `from __future__ import annotations` as of 2023-12-31

.. _typer: https://typer.tiangolo.com/
"""

import contextlib
import copy
import logging
import logging.config
import os
import subprocess
import typing
from pathlib import Path

import rich
import typer

from envseed import __version__, settings
from envseed.formats import DUMPERS, dumps
from envseed.loader import LoadResult, SourceUnreadableError, load
from envseed.settings import schema

try:
    from typing import Annotated, TypeAlias  # type: ignore[attr-defined,unused-ignore]
except ImportError:  # pragma: no cover
    from typing_extensions import Annotated, TypeAlias  # type: ignore[assignment,attr-defined,unused-ignore]


# ruff: noqa: PLR0913
# pylint: disable=redefined-outer-name,unused-argument,too-many-arguments

__all__ = ['app', 'get', 'main', 'run', 'version']

LOG_MISSING_SETTINGS_MESSAGE = "No settings file for [bold blue]envseed[/]; using defaults"
LOG_VERBOSITY_MESSAGE = 'logging verbosity set to [green]%s[/green]'

logger = logging.getLogger(__name__)

app_kwargs: typing.Dict[str, typing.Any] = {
    'context_settings': {'help_option_names': ['-h', '--help']},
    'no_args_is_help': True,
    'rich_markup_mode': 'rich',
}

app = typer.Typer(**app_kwargs)
"""The root `typer`_ application.

.. _typer: https://typer.tiangolo.com/
"""


def help_callback(ctx: typer.Context, value: typing.Optional[bool] = None) -> None:
    """Print the usage of the current command, then exit."""
    if value and not ctx.resilient_parsing:
        rich.print(ctx.get_help())
        raise typer.Exit()


def version_callback(ctx: typer.Context, value: typing.Optional[bool] = None) -> None:
    """Print `envseed.__version__`, then exit."""
    if value and not ctx.resilient_parsing:
        rich.print(__version__)
        raise typer.Exit()


def check_format(ctx: typer.Context, value: str) -> str:
    """Reject output formats that `envseed.formats.dumps()` does not support."""
    if ctx.resilient_parsing:  # pragma: no cover
        return value

    if value not in DUMPERS:
        raise typer.BadParameter(f"expected one of: {', '.join(DUMPERS)}")

    return value


def _logging_config(conf: typing.Optional[settings.Config]) -> schema.DictConfigDefault:
    """Overlay the `LOGGING` section of the settings file on `envseed.settings.DEFAULT_LOGGING_CONFIG`.

    Sections holding a mapping (`handlers`, `root`, ...) are updated one key at a time; other values are replaced:

    >>> _ = example_settings.write_text('ENVSEED_LOGGING:\\n  root:\\n    level: WARNING\\n', encoding='utf-8')
    >>> _logging_config(settings.load(example_settings))['root']
    {'handlers': ['rich'], 'level': 'WARNING', 'propagate': False}
    >>> _logging_config(None)['disable_existing_loggers']
    False
    """
    logging_config = copy.deepcopy(settings.DEFAULT_LOGGING_CONFIG)
    overlay: schema.DictConfig = (conf.settings.LOGGING or {}) if conf else {}  # type: ignore[assignment]

    for section, value in overlay.items():
        current = logging_config.get(section)
        if isinstance(current, dict) and isinstance(value, dict):
            current.update(value)
        else:
            logging_config[section] = value  # type: ignore[literal-required]

    return logging_config


def configure_logging(ctx: typer.Context, verbose: typing.Optional[bool] = None) -> None:
    """Apply the logging configuration with `logging.config.dictConfig()`.

    Records are printed (to stderr) from the `logging.INFO` level:

    >>> configure_logging(ctx)
    >>> caplog.messages
    ['logging verbosity set to [green]INFO[/green]']

    Once `--verbose` is given, later calls (e.g. after the settings file is read) keep the `logging.DEBUG` level:

    >>> configure_logging(ctx, True)
    >>> configure_logging(ctx)
    >>> caplog.messages[-1]
    'logging verbosity set to [green]DEBUG[/green]'
    """
    if ctx.resilient_parsing:  # pragma: no cover
        return

    ctx.ensure_object(dict)
    ctx.obj['verbose'] = bool(verbose or ctx.obj.get('verbose'))

    logging_config = _logging_config(ctx.obj.get('settings'))
    verbosity = logging.DEBUG if ctx.obj['verbose'] else logging.INFO
    if ctx.obj['verbose']:
        logging_config['root']['level'] = verbosity

    logging.config.dictConfig(logging_config)  # type: ignore[arg-type]
    ctx.obj['logging_config'] = logging_config

    logger.debug(LOG_VERBOSITY_MESSAGE, logging.getLevelName(verbosity), extra={'markup': True})


def load_config(ctx: typer.Context, value: typing.Optional[Path]) -> None:
    """Store `envseed`'s own settings as `ctx.obj['settings']` (`None` if there is no settings file).

    >>> load_config(ctx, None)
    >>> ctx.obj['settings'] is None
    True

    A path given with `--config` replaces the settings found earlier:

    >>> load_config(ctx, example_settings)
    >>> ctx.obj['settings'].options()['path']
    ['.env', '.env.local']
    """
    if ctx.resilient_parsing:  # pragma: no cover
        return

    ctx.ensure_object(dict)
    if value is None:
        if 'settings' in ctx.obj:
            return
        try:
            value = settings.resolve_path()
        except FileNotFoundError:
            logger.debug(LOG_MISSING_SETTINGS_MESSAGE, extra={'markup': True})
            ctx.obj['settings'] = None
            return

    conf = settings.load(value)
    ctx.obj['settings'] = conf

    # `--verbose` is eager, so logging was configured before this file was read
    if conf.settings.LOGGING and 'logging_config' in ctx.obj:
        configure_logging(ctx)


CommandAnnotation: TypeAlias = Annotated[
    typing.Optional[typing.List[str]],
    typer.Argument(
        help='Run this command (and its arguments) with the loaded variables. Separate it from the options with '
        '[bold]--[/].',
        show_default=False,
        metavar='COMMAND [ARGS...]',
    ),
]
EncodingAnnotation: TypeAlias = Annotated[
    typing.Optional[str],
    typer.Option('-e', '--encoding', help='Decode the files with this encoding.', show_default=False),
]
FileAnnotation: TypeAlias = Annotated[
    typing.Optional[typing.List[Path]],
    typer.Option(
        '-f',
        '--file',
        help='Read variables from this file (can be used multiple times; defaults to [purple].env[/]).',
        show_default=False,
    ),
]
FormatAnnotation: TypeAlias = Annotated[
    str,
    typer.Option('-F', '--format', callback=check_format, help='Print the variables in this format.'),
]
OptionalKeyAnnotation: TypeAlias = Annotated[
    typing.Optional[typing.List[str]],
    typer.Argument(
        help='Print only the variable(s) with these key(s). If unspecified, every variable is printed.',
        show_default=False,
        metavar='[KEY...]',
    ),
]
OverrideAnnotation: TypeAlias = Annotated[
    typing.Optional[bool],
    typer.Option(
        '-o',
        '--override',
        help='Replace variables that are already defined (and let later files replace earlier ones).',
        show_default=False,
    ),
]

# global options, accepted by every command
ConfigAnnotation: TypeAlias = Annotated[
    typing.Optional[Path],
    typer.Option(
        '-c',
        '--config',
        callback=load_config,
        help="Read [bold blue]envseed[/]'s settings (default files and options) from this YAML file.",
        rich_help_panel='Global',
        show_default=False,
    ),
]
HelpAnnotation: TypeAlias = Annotated[
    typing.Optional[bool],
    typer.Option(
        '-h',
        '--help',
        callback=help_callback,
        help='Show this message and exit.',
        is_eager=True,
        rich_help_panel='Global',
        show_default=False,
    ),
]
VerbosityAnnotation: TypeAlias = Annotated[
    typing.Optional[bool],
    typer.Option(
        '-v',
        '--verbose',
        callback=configure_logging,
        help='Print [black]DEBUG[/] log records to stderr.',
        is_eager=True,
        rich_help_panel='Global',
        show_default=False,
    ),
]
VersionAnnotation: TypeAlias = Annotated[
    typing.Optional[bool],
    typer.Option(
        '-V',
        '--version',
        callback=version_callback,
        help='Print the version of [bold blue]envseed[/] and exit.',
        is_eager=True,
        rich_help_panel='Global',
        show_default=False,
    ),
]


@contextlib.contextmanager
def handle_unreadable_sources() -> typing.Iterator[None]:
    """Handle `envseed.loader.SourceUnreadableError` exceptions within the managed context."""
    try:
        yield
    except SourceUnreadableError as exc:
        rich.print(f'[red]ERROR[/]: could not read file: [purple]{exc.path}[/]')
        logger.debug('%s', exc, exc_info=True)
        raise typer.Exit(1) from exc


def _load(
    ctx: typer.Context,
    files: typing.Optional[typing.List[Path]],
    override: typing.Optional[bool],
    encoding: typing.Optional[str],
    process_env: typing.MutableMapping[str, str],
) -> LoadResult:
    ctx.ensure_object(dict)
    options = settings.resolve_options(
        ctx.obj.get('settings'), path=files or None, override=override, encoding=encoding, process_env=process_env
    )
    with handle_unreadable_sources():
        return load(options)


# ⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯⎯
#                                             command definitions


@app.command()
def get(
    ctx: typer.Context,
    keys: OptionalKeyAnnotation = None,
    files: FileAnnotation = None,
    override: OverrideAnnotation = None,
    encoding: EncodingAnnotation = None,
    fmt: FormatAnnotation = 'json',
    get_help: HelpAnnotation = None,
    config: ConfigAnnotation = None,
    verbose: VerbosityAnnotation = None,
    version: VersionAnnotation = None,
) -> None:
    """Print the variables parsed from the [purple].env[/] file(s)."""
    result = _load(ctx, files, override, encoding, process_env={})

    try:
        data = {key: result.parsed[key] for key in keys} if keys else result.parsed
    except KeyError as exc:
        rich.print(f'[red]ERROR[/]: Missing key: [green]{exc.args[0]}[/]')
        raise typer.Exit(1) from exc

    logger.debug('Print %d variable(s) as [yellow]%s[/yellow]', len(data), fmt, extra={'markup': True})
    typer.echo(dumps(fmt, data))  # type: ignore[arg-type]


@app.command()
def run(
    ctx: typer.Context,
    command: CommandAnnotation = None,
    files: FileAnnotation = None,
    override: OverrideAnnotation = None,
    encoding: EncodingAnnotation = None,
    get_help: HelpAnnotation = None,
    config: ConfigAnnotation = None,
    verbose: VerbosityAnnotation = None,
    version: VersionAnnotation = None,
) -> None:
    """Run a command with the variables from the [purple].env[/] file(s) in its environment."""
    if not command:
        rich.print(ctx.get_help())
        raise typer.Exit(1)

    environ = dict(os.environ)
    _load(ctx, files, override, encoding, process_env=environ)

    logger.debug('Run: [yellow]%s[/yellow]', ' '.join(command), extra={'markup': True})
    try:
        completed = subprocess.run(command, env=environ, check=False)  # noqa: S603
    except FileNotFoundError as exc:
        rich.print(f'[red]ERROR[/]: command not found: [purple]{command[0]}[/]')
        raise typer.Exit(127) from exc

    raise typer.Exit(completed.returncode)


@app.command()
def version(
    ctx: typer.Context,
    get_help: HelpAnnotation = None,
    config: ConfigAnnotation = None,
    verbose: VerbosityAnnotation = None,
    version: VersionAnnotation = None,
) -> None:
    """Print the version and exit."""
    version_callback(ctx, True)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    get_help: HelpAnnotation = None,
    config: ConfigAnnotation = None,
    verbose: VerbosityAnnotation = None,
    version: VersionAnnotation = None,
) -> None:
    """Load variables from [purple].env[/] files into the environment."""
    ctx.ensure_object(dict)

    if not ctx.invoked_subcommand:  # pragma: no cover
        rich.print(ctx.get_help())


logger.debug('successfully imported %s', __name__)
