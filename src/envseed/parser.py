"""Parse the text of a `.env` file into a `dict` of strings.

The parser is a line-oriented scanner with two modes: _normal_ (one assignment per line) and _multiline_ (a
quoted value that has not been closed yet). The grammar has no nesting, so a single pass is enough.

## Syntax

```sh
# comments and blank lines are skipped
PLAIN=value            # trailing comments are stripped from unquoted values
export EXPORTED=value  # the `export` keyword is accepted and discarded
COLON: value           # `:` works as a separator, too
DOUBLE="line 1\\nline 2"
SINGLE='kept verbatim: \\n'
MULTI="first
second"
```

>>> parse('KEY=value')
{'KEY': 'value'}
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import re

__all__ = ['ParseState', 'Quote', 'parse']

logger = logging.getLogger(__name__)

EXPORT_PATTERN = re.compile(r'^\s*export\s+([A-Za-z0-9._-]+)\s*[=:]\s*(.*)$')
"""Match an assignment prefixed by the `export` keyword."""

ASSIGNMENT_PATTERN = re.compile(r'^\s*([A-Za-z0-9._-]+)\s*[=:]\s*(.*)$')
"""Match a plain `KEY=value` (or `KEY: value`) assignment."""


class Quote(enum.Enum):
    """Classify a raw value by the character it opens with.

    >>> Quote.of('"quoted"')
    <Quote.DOUBLE: '"'>
    >>> Quote.of('plain')
    <Quote.UNQUOTED: ''>
    """

    UNQUOTED = ''
    SINGLE = "'"
    DOUBLE = '"'
    BACKTICK = '`'

    @classmethod
    def of(cls, raw: str) -> Quote:
        """Return the variant for the first character of `raw`."""
        if raw and raw[0] in QUOTE_CHARS:
            return cls(raw[0])
        return cls.UNQUOTED

    def closes(self, raw: str) -> bool:
        """Whether `raw` both opens and closes with this quote character.

        >>> Quote.DOUBLE.closes('"a"'), Quote.DOUBLE.closes('"a'), Quote.DOUBLE.closes('"')
        (True, False, False)
        """
        return len(raw) >= 2 and raw[-1] == self.value  # noqa: PLR2004

    def decode(self, content: str) -> str:
        r"""Apply this variant's escape policy to the text between the quotes.

        Only double quotes decode `\n` and `\r`:

        >>> Quote.DOUBLE.decode(r'a\nb')
        'a\nb'
        >>> Quote.SINGLE.decode(r'a\nb')
        'a\\nb'
        """
        if self is Quote.DOUBLE:
            return content.replace('\\n', '\n').replace('\\r', '\r')
        return content

    def unwrap(self, raw: str) -> str:
        """Strip the outermost quote pair from `raw` and decode the content.

        The content runs from the first opening quote to the final closing quote, so identical quote
        characters in between are preserved:

        >>> Quote.SINGLE.unwrap("'it's'")
        "it's"
        """
        start = raw.index(self.value) + 1
        end = raw.rindex(self.value)
        return self.decode(raw[start:end])


QUOTE_CHARS = frozenset(q.value for q in Quote if q is not Quote.UNQUOTED)


@dataclasses.dataclass
class ParseState:
    """Transient context for a single call to `parse()`."""

    pending_key: str | None = None
    """The key of the multiline value being assembled."""

    buffer: str | None = None
    """The raw text of the multiline value so far (including the opening quote)."""

    quote: Quote | None = None
    """The quote character that will close the multiline value."""

    multiline: bool = False
    """Whether the parser is inside an unterminated quoted value."""

    def begin(self, key: str, raw: str, quote: Quote) -> None:
        """Enter multiline mode for `key`, starting with the `raw` text of the first line."""
        self.pending_key = key
        self.buffer = raw
        self.quote = quote
        self.multiline = True

    def reset(self) -> None:
        """Leave multiline mode and forget the pending value."""
        self.pending_key = self.buffer = self.quote = None
        self.multiline = False


def _normalize(text: str) -> list[str]:
    text = text.replace('\r\n', '\n').replace('\r', '\n') + '\n'
    return [line.rstrip() for line in text.split('\n')]


def _match(line: str) -> tuple[str, str] | None:
    match = EXPORT_PATTERN.match(line) or ASSIGNMENT_PATTERN.match(line)
    if not match:
        return None
    return match.group(1), match.group(2)


def _continue_multiline(state: ParseState, line: str, out: dict[str, str]) -> None:
    assert state.pending_key is not None and state.buffer is not None and state.quote is not None  # noqa: S101
    state.buffer = f'{state.buffer}\n{line}'
    if line.endswith(state.quote.value):
        out[state.pending_key] = state.quote.unwrap(state.buffer)
        state.reset()


def parse(text: str) -> dict[str, str]:
    r"""Parse the contents of a `.env` file.

    Malformed lines are skipped; this function never raises for bad input.

    Unquoted values lose trailing comments and surrounding whitespace, but quoted values are kept intact:

    >>> parse('A=a#b\nB="a#b"\nC=  spaced out  ')
    {'A': 'a', 'B': 'a#b', 'C': 'spaced out'}

    A quoted value may span several lines:

    >>> parse('KEY="first\nsecond"')
    {'KEY': 'first\nsecond'}

    If the closing quote never arrives, the key is dropped:

    >>> parse('KEY="never closed\nOTHER=1')
    {}

    The last occurrence of a key wins:

    >>> parse('A=1\nA=2')
    {'A': '2'}
    """
    out: dict[str, str] = {}
    state = ParseState()

    for line in _normalize(text):
        if state.multiline:
            _continue_multiline(state, line, out)
            continue

        matched = _match(line)
        if matched is None:
            continue

        key, raw = matched
        quote = Quote.of(raw)
        if quote is Quote.UNQUOTED:
            out[key] = raw.split('#', 1)[0].strip()
        elif quote.closes(raw):
            out[key] = quote.unwrap(raw)
        else:
            state.begin(key, raw, quote)

    if state.multiline:
        logger.debug('discarding unterminated value for %r', state.pending_key)

    return out


logger.debug('successfully imported %s', __name__)
