"""
vCard Line Parser - Splits one logical content line into its parts.

Grammar (left to right):
    [group "."] key [";" name "=" values]* ":" value["," value]*

The value section is split on unescaped commas; every piece becomes its
own VCardField sharing the line's group and parameters. This applies to
every key: keeping a comma-separated value whole for particular
properties is left to code working on the decoded record.
"""

from __future__ import annotations

import re

from vcard.card import Params, VCardField
from vcard.errors import InvalidLineError, MalformedParameterError
from vcard.spec import find_unescaped, split_unescaped, unescape_value

KEY_RE = re.compile(r"^[A-Za-z0-9-]+$")


def _index_any(text: str, chars: str) -> int:
    for i, c in enumerate(text):
        if c in chars:
            return i
    return -1


def parse_group(line: str) -> tuple[str, str]:
    """Split off a "group." prefix. Returns (group, rest)."""
    i = _index_any(line, ".;:")
    if i < 0 or line[i] != ".":
        return "", line
    return line[:i], line[i + 1:]


def parse_key(text: str) -> tuple[str, bool, str]:
    """Returns (upper-cased key, has_params, rest after the terminator)."""
    i = _index_any(text, ";:")
    if i < 0:
        raise InvalidLineError(f"no ':' separator in line {text!r}")
    key = text[:i]
    if not KEY_RE.match(key):
        raise InvalidLineError(f"invalid property key {key!r}")
    return key.upper(), text[i] == ";", text[i + 1:]


def parse_params(text: str) -> tuple[Params, str]:
    """Parse the parameter section that follows "KEY;".

    Returns the parameters and the raw value section after the ':'.
    """
    params = Params()
    rest = text
    while True:
        i = _index_any(rest, "=;:")
        if i < 0:
            raise InvalidLineError("parameter section is not terminated by ':'")
        if rest[i] == ";":
            # Segment without "=": skipped
            rest = rest[i + 1:]
            continue
        if rest[i] == ":":
            return params, rest[i + 1:]

        name = rest[:i]
        if not name:
            raise MalformedParameterError("empty parameter name")
        values, more, rest = parse_param_values(rest[i + 1:])
        params.add(name.upper(), *values)
        if not more:
            return params, rest


def parse_param_values(text: str) -> tuple[list[str], bool, str]:
    """Parse the values of one NAME= segment.

    Returns (values, more, rest): ``more`` is True when another parameter
    segment follows, False when ``rest`` is the value section.
    """
    if text.startswith('"'):
        end = find_unescaped(text, '"', 1)
        if end < 0:
            raise MalformedParameterError("unterminated quoted parameter value")
        after = text[end + 1:end + 2]
        if after not in (";", ":"):
            raise MalformedParameterError(
                f"unexpected {after!r} after quoted parameter value"
            )
        return [unescape_value(text[1:end], quote=True)], after == ";", text[end + 2:]

    i = find_unescaped(text, ";:")
    if i < 0:
        raise InvalidLineError("parameter section is not terminated by ':'")
    values = [unescape_value(v) for v in split_unescaped(text[:i], ",")]
    return values, text[i] == ";", text[i + 1:]


def parse_line(line: str) -> tuple[str, list[VCardField]]:
    """Parse one logical line into (key, fields).

    Raises InvalidLineError or MalformedParameterError (both GrammarError).
    """
    group, rest = parse_group(line)
    key, has_params, rest = parse_key(rest)

    params = Params()
    if has_params:
        params, rest = parse_params(rest)

    fields = [
        VCardField(value=unescape_value(value), params=params.copy(), group=group)
        for value in split_unescaped(rest, ",")
    ]
    return key, fields
