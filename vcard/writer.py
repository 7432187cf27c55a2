"""
vCard Writer - Serializes VCard records to RFC 6350 text.

Output is deterministic:
  1. BEGIN line
  2. The first VERSION field
  3. Every other key in sorted order, fields in stored order,
     parameter names sorted, parameter values in stored order
  4. END line

Every line is folded to FOLD_WIDTH octets and terminated with CRLF.
"""

from __future__ import annotations

import io
import logging
from typing import IO

from vcard.card import VCard, VCardField
from vcard.errors import MissingVersionError
from vcard.spec import (
    CRLF, FIELD_BEGIN, FIELD_END, FIELD_VERSION, FOLD_PREFIX, FOLD_WIDTH, FORMAT_NAME,
    char_boundary, escape_value,
)

logger = logging.getLogger(__name__)

# Parameter values holding any of these must be quoted
_QUOTE_TRIGGERS = frozenset(';:"')


def _needs_quoting(value: str) -> bool:
    return any(c in _QUOTE_TRIGGERS for c in value)


def format_param(name: str, values: list[str]) -> str:
    """Format one parameter as ";NAME=..." segment(s).

    Plain values share one segment, comma-separated. If any value needs
    quoting, each value gets its own segment so the reader's accumulation
    rebuilds the same list.
    """
    if not values:
        return ""
    if not any(_needs_quoting(v) for v in values):
        return f";{name}=" + ",".join(escape_value(v) for v in values)

    segments = []
    for v in values:
        if _needs_quoting(v):
            segments.append(f';{name}="{escape_value(v, quote=True)}"')
        else:
            segments.append(f";{name}={escape_value(v)}")
    return "".join(segments)


def format_line(key: str, field: VCardField) -> str:
    """Build the unfolded content line for one field."""
    s = ""
    if field.group:
        s += field.group + "."
    s += key
    for name in sorted(field.params):
        s += format_param(name, field.params[name])
    s += ":" + escape_value(field.value)
    return s


def fold_line(line: str, width: int = FOLD_WIDTH) -> str:
    """Fold a content line so no physical line exceeds ``width`` octets.

    Continuation lines carry FOLD_PREFIX, leaving ``width - 1`` octets of
    content each. Cuts are moved back to a UTF-8 character start. Surrogate
    escapes from undecodable input are written back as their original bytes.
    """
    data = line.encode("utf-8", errors="surrogateescape")
    if len(data) <= width:
        return line
    # A continuation must fit the prefix plus one 4-octet character
    if width < len(FOLD_PREFIX) + 4:
        raise ValueError(f"Fold width too small: {width}")

    segments = []
    start = 0
    limit = width
    while start < len(data):
        end = char_boundary(data, start + limit)
        if end <= start:
            # Run of stray continuation octets: cut at the width
            end = min(start + limit, len(data))
        segments.append(data[start:end])
        start = end
        limit = width - len(FOLD_PREFIX)
    return (CRLF + FOLD_PREFIX).join(
        seg.decode("utf-8", errors="surrogateescape") for seg in segments
    )


class VCardEncoder:
    """
    vCard encoder bound to a caller-owned stream.

    Text streams receive str, anything else receives UTF-8 bytes. A writer
    outside the io hierarchy counts as text when its ``mode`` lacks "b"; with
    no ``mode`` it gets bytes. The stream is never closed.

    Version policy: with ``strict=True`` (default) a card without a VERSION
    field is rejected before anything is written; with ``strict=False`` the
    version line is simply omitted.
    """

    def __init__(self, stream: IO, strict: bool = True, width: int = FOLD_WIDTH) -> None:
        self._stream = stream
        self.strict = strict
        self.width = width

    @classmethod
    def serialize(cls, card: VCard, strict: bool = True, width: int = FOLD_WIDTH) -> bytes:
        """Serialize a card to bytes. Pure, does not mutate the card."""
        buf = io.BytesIO()
        cls(buf, strict=strict, width=width).encode(card)
        return buf.getvalue()

    def encode(self, card: VCard) -> None:
        """Write one complete, folded record."""
        versions = card.get_fields(FIELD_VERSION)
        if not versions and self.strict:
            raise MissingVersionError("VERSION field missing")
        if len(versions) > 1:
            logger.debug("Writing first of %d VERSION fields", len(versions))

        lines = [f"{FIELD_BEGIN}:{FORMAT_NAME}"]
        if versions:
            lines.append(format_line(FIELD_VERSION, versions[0]))
        for key in sorted(card.keys()):
            if key == FIELD_VERSION:
                continue
            for field in card.get_fields(key):
                lines.append(format_line(key, field))
        lines.append(f"{FIELD_END}:{FORMAT_NAME}")

        text = "".join(fold_line(line, self.width) + CRLF for line in lines)
        if self._wants_text():
            self._stream.write(text)
        else:
            self._stream.write(text.encode("utf-8", errors="surrogateescape"))

    def _wants_text(self) -> bool:
        if isinstance(self._stream, io.TextIOBase):
            return True
        if isinstance(self._stream, io.IOBase):
            return False
        return "b" not in getattr(self._stream, "mode", "b")
