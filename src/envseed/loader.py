"""Read `.env` files from disk and merge them into the process environment.

## Example

Given a `.env` file in the current directory:

```sh
.. include:: ../../examples/.env
```

Load it into `os.environ` (existing variables are kept):

```py
import envseed

envseed.config()
```

Or load several files into a separate mapping:

>>> env = {}
>>> result = load(LoadOptions(path=[example_dotenv], process_env=env))
>>> result.parsed == env
True
"""

from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path
from typing import MutableMapping, Sequence, Union

from envseed.merge import MergeOptions, merge
from envseed.parser import parse

try:
    from typing import TypeAlias  # type: ignore[attr-defined,unused-ignore]
except ImportError:  # pragma: no cover
    from typing_extensions import TypeAlias  # type: ignore[assignment,attr-defined,unused-ignore]

__all__ = ['DEFAULT_FILENAME', 'LoadOptions', 'LoadResult', 'SourceUnreadableError', 'config', 'load']

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = '.env'
"""When no path is configured, read this file from the current working directory."""

PathT: TypeAlias = Union[str, 'os.PathLike[str]']


class SourceUnreadableError(OSError):
    """A configured `.env` file could not be read.

    >>> try:
    ...     load(LoadOptions(path='does-not-exist', process_env={}))
    ... except SourceUnreadableError as exc:
    ...     print(exc.path)
    does-not-exist
    """

    path: Path
    """The file that could not be read."""

    def __init__(self, path: Path, reason: str) -> None:
        """Record the `path` and the `reason` it could not be read."""
        super().__init__(f'could not read file: {path} ({reason})')
        self.path = path


@dataclasses.dataclass
class LoadOptions:
    """Options for `load()`."""

    path: PathT | Sequence[PathT] | None = None
    """Read one or more files (defaults to `.env` in the current working directory)."""

    override: bool = False
    """Replace variables that are already defined in `LoadOptions.process_env`."""

    process_env: MutableMapping[str, str] | None = None
    """Merge into this mapping instead of `os.environ`."""

    encoding: str = 'utf-8'
    """Decode each file with this encoding."""

    @property
    def paths(self) -> list[Path]:
        """Normalize `LoadOptions.path` to a list.

        >>> LoadOptions(path='a.env').paths
        [PosixPath('a.env')]
        >>> LoadOptions(path=['a.env', 'b.env']).paths
        [PosixPath('a.env'), PosixPath('b.env')]
        >>> LoadOptions().paths == [Path.cwd() / '.env']
        True
        """
        if self.path is None:
            return [Path.cwd() / DEFAULT_FILENAME]
        if isinstance(self.path, (str, os.PathLike)):
            return [Path(self.path)]
        return [Path(p) for p in self.path]

    @property
    def merge_options(self) -> MergeOptions:
        """The `MergeOptions` matching these options."""
        return MergeOptions(override=self.override)

    @property
    def destination(self) -> MutableMapping[str, str]:
        """The mapping to merge into (`os.environ` unless `LoadOptions.process_env` is set)."""
        return os.environ if self.process_env is None else self.process_env


@dataclasses.dataclass
class LoadResult:
    """The outcome of `load()`."""

    parsed: dict[str, str]
    """Every variable accumulated from the loaded files."""


def _read(path: Path, encoding: str) -> str:
    logger.debug("Read file: '%s'", path)
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceUnreadableError(path, str(exc)) from exc


def load(options: LoadOptions | None = None) -> LoadResult:
    """Parse the configured files and merge the variables into `LoadOptions.destination`.

    All files are read before anything is merged, so the destination is left untouched when any one of
        them is unreadable.

    Without `LoadOptions.override`, the first file to define a variable wins (and so does the destination):

    >>> env = {'KEY_0': 'from the environment'}
    >>> load(LoadOptions(path=[example_dotenv, second_dotenv], process_env=env)).parsed['KEY_1']
    'value 1'
    >>> env['KEY_0']
    'from the environment'

    With `LoadOptions.override`, the last one wins:

    >>> result = load(LoadOptions(path=[example_dotenv, second_dotenv], override=True, process_env=env))
    >>> result.parsed['KEY_1']
    'overridden'
    >>> env['KEY_0'] == result.parsed['KEY_0']
    True
    """
    options = options or LoadOptions()
    paths = options.paths
    texts = [_read(path, options.encoding) for path in paths]

    parsed: dict[str, str] = {}
    for path, text in zip(paths, texts):
        variables = parse(text)
        logger.debug("Parsed %d variable(s) from '%s'", len(variables), path)
        merge(parsed, variables, options.merge_options)

    destination = options.destination
    written = [key for key in parsed if options.override or key not in destination]
    merge(destination, parsed, options.merge_options)
    logger.info('injecting %d variable(s) from %s', len(written), ', '.join(f"'{p}'" for p in paths))

    return LoadResult(parsed=parsed)


def config(
    path: PathT | Sequence[PathT] | None = None,
    override: bool = False,
    process_env: MutableMapping[str, str] | None = None,
    encoding: str = 'utf-8',
) -> LoadResult:
    """Call `load()` with the given keyword arguments as `LoadOptions`.

    >>> config(path=example_dotenv, process_env={}).parsed['KEY_2']
    'multi\\nline'
    """
    return load(LoadOptions(path=path, override=override, process_env=process_env, encoding=encoding))


logger.debug('successfully imported %s', __name__)
