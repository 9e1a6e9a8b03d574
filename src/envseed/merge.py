"""Apply a parsed mapping onto a destination mapping (such as `os.environ`)."""

from __future__ import annotations

import dataclasses
import logging
from typing import Mapping, MutableMapping

__all__ = ['MergeOptions', 'merge']

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class MergeOptions:
    """Rules for `merge()`."""

    override: bool = False
    """Whether a key already present in the destination may be overwritten."""


def merge(
    destination: MutableMapping[str, str], source: Mapping[str, str], options: MergeOptions | None = None
) -> None:
    """Copy each key in `source` to `destination`.

    Keys missing from `destination` are always written. Existing keys are left alone unless
        `MergeOptions.override` is set:

    >>> dest = {'A': '1'}
    >>> merge(dest, {'A': '2', 'B': '3'})
    >>> dest
    {'A': '1', 'B': '3'}
    >>> merge(dest, {'A': '2'}, MergeOptions(override=True))
    >>> dest
    {'A': '2', 'B': '3'}
    """
    override = (options or MergeOptions()).override

    for key, value in source.items():
        if key not in destination:
            destination[key] = value
        elif override:
            logger.debug('"%s" is already defined and WAS overwritten', key)
            destination[key] = value
        else:
            logger.debug('"%s" is already defined and was NOT overwritten', key)


logger.debug('successfully imported %s', __name__)
