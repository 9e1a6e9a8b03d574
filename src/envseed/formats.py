"""Render a parsed mapping for display.

These formats are for printing only; `envseed` never writes variables back to a `.env` file.
"""

from __future__ import annotations

import json
import logging
import typing
from typing import Any, Callable

import tomlkit as toml
import yaml

__all__ = ['DUMPERS', 'FormatT', 'dumps']

logger = logging.getLogger(__name__)

FormatT = typing.Literal['json', 'toml', 'yaml', 'yml']
"""The supported output formats."""

DumpT = Callable[[dict[str, Any]], str]
"""Serialize a mapping of variables for display."""


def dump_json(data: dict[str, str]) -> str:
    """Serialize the given `dict` as indented JSON."""
    return json.dumps(data, indent=2)


DUMPERS: dict[FormatT, DumpT] = {
    'json': dump_json,
    'toml': toml.dumps,  # pyright: ignore[reportUnknownMemberType]
    'yaml': yaml.safe_dump,
    'yml': yaml.safe_dump,
}


def dumps(fmt: FormatT, data: dict[str, Any]) -> str:
    """Serialize the given `data` object to the given `FormatT`.

    >>> print(dumps('toml', {'KEY': 'value'}))
    KEY = "value"
    <BLANKLINE>
    >>> dumps('xml', {})
    Traceback (most recent call last):
    ...
    ValueError: unsupported format: 'xml'
    """
    try:
        dump = DUMPERS[fmt]
    except KeyError as exc:
        raise ValueError(f"unsupported format: '{fmt}'") from exc

    return dump(data)


logger.debug('successfully imported %s', __name__)
