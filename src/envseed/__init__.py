""".. include:: ../../README.md

# Navigation

## `envseed.parser`

Parse the text of a `.env` file.

## `envseed.merge`

Merge parsed variables into a destination mapping.

## `envseed.loader`

Read `.env` files from disk and load them into the environment.

## `envseed.settings`

For settings and configuration.

## `envseed.cli`

Commands and CLI documentation.
"""  # noqa: D415

from __future__ import annotations

import sys
from typing import Any

__version__ = '0.0.0'

from envseed.loader import LoadOptions, LoadResult, SourceUnreadableError, config, load
from envseed.merge import MergeOptions, merge
from envseed.parser import parse

__all__ = [
    'LoadOptions',
    'LoadResult',
    'MergeOptions',
    'SourceUnreadableError',
    'config',
    'load',
    'merge',
    'parse',
]


def main(*args: Any) -> None:  # pylint: disable=missing-function-docstring
    """Entrypoint for the `envseed` CLI.

    When arguments are provided, they are used to replace `sys.argv[1:]`.
    """
    if args:
        sys.argv[1:] = list(args)

    from envseed.cli import app

    app(prog_name='envseed')
