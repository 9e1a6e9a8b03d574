"""Define the schema of `envseed`'s settings file.

The `typing.TypedDict` classes in this module describe the structure of the settings file:

```yaml
ENVSEED_PATH:
  - .env
  - .env.local
ENVSEED_OVERRIDE: false
ENVSEED_ENCODING: utf-8
ENVSEED_LOGGING:
  root:
    level: DEBUG
```

Each key is prefixed with `envseed.settings.PREFIX`; `pyspry` strips the prefix, so the file above is read as
`SettingsFile`.
"""

from __future__ import annotations

import logging
import typing
from typing import Any, Literal, TypedDict

try:
    from typing import NotRequired, TypeAlias
except ImportError:  # pragma: no cover
    from typing_extensions import NotRequired, TypeAlias


__all__ = ['DictConfig', 'DictConfigDefault', 'Logger', 'PathStr', 'SettingsFile']

logger = logging.getLogger(__name__)


HandlerId: TypeAlias = str
LoggerName: TypeAlias = str

PathStr: TypeAlias = str
"""A string representing a file path."""


class Logger(TypedDict):
    """Structure of the `logging.Logger` parameters in `DictConfig`."""

    handlers: list[HandlerId]
    level: NotRequired[typing.Union[str, int]]
    propagate: NotRequired[bool]


class DictConfig(TypedDict):
    """Type annotations for the `logging configuration dictionary schema`_.

    .. _logging configuration dictionary schema: https://docs.python.org/3/library/logging.config.html#logging-config-dictschema
    """

    disable_existing_loggers: NotRequired[bool]
    filters: NotRequired[dict[str, Any]]
    formatters: NotRequired[dict[str, Any]]
    handlers: NotRequired[dict[HandlerId, Any]]
    incremental: NotRequired[bool]
    loggers: NotRequired[dict[LoggerName, Logger]]
    root: NotRequired[Logger]
    version: NotRequired[Literal[1]]


class DictConfigDefault(TypedDict):
    """`DictConfig`, with every key present (as in `envseed.settings.DEFAULT_LOGGING_CONFIG`)."""

    disable_existing_loggers: bool
    filters: dict[str, Any]
    formatters: dict[str, Any]
    handlers: dict[HandlerId, Any]
    incremental: bool
    loggers: dict[LoggerName, Logger]
    root: Logger
    version: Literal[1]


class SettingsFile(TypedDict):
    """The settings file, after the prefix has been stripped from each key."""

    PATH: NotRequired[typing.Union[PathStr, list[PathStr]]]
    """Read these `.env` files (in order)."""

    OVERRIDE: NotRequired[bool]
    """Replace variables that are already defined in the environment."""

    ENCODING: NotRequired[str]
    """Decode the `.env` files with this encoding."""

    LOGGING: NotRequired[DictConfig]
    """Merged over `envseed.settings.DEFAULT_LOGGING_CONFIG` by the CLI."""


logger.debug('successfully imported %s', __name__)
