"""
vCard Reader - Streaming decoder for RFC 6350 text.

Reading features:
  - Works on any caller-owned stream with readline(): text or binary
  - Unfolds continuation lines (leading space or tab) with one line of lookahead
  - Accepts CRLF and bare LF terminators; exactly one is stripped per line
  - Undecodable octets in binary input survive as surrogate escapes
  - One record per decode() call, so multi-record streams are read incrementally
  - Never closes the stream

Tolerance:
  - Blank lines are skipped
  - Malformed body lines are logged at debug level and skipped
  - Marker values (BEGIN:vcard) are compared case-insensitively
"""

from __future__ import annotations

import io
import logging
from enum import Enum
from typing import IO, Iterator, Union

from vcard.card import VCard
from vcard.errors import (
    DecodeError,
    GrammarError,
    InvalidFooterValueError,
    InvalidHeaderValueError,
    NoFooterError,
    NoHeaderError,
)
from vcard.parser import parse_line
from vcard.spec import CONTINUATION_CHARS, FIELD_BEGIN, FIELD_END, FORMAT_NAME

logger = logging.getLogger(__name__)

_CONTINUATION_PREFIXES = CONTINUATION_CHARS + tuple(c.encode("ascii") for c in CONTINUATION_CHARS)

PhysicalLine = Union[str, bytes]


class LineReader:
    """Presents a stream as a sequence of unfolded logical lines.

    Lines from a binary stream are joined as bytes and decoded as UTF-8 only
    once the logical line is complete. Bytes that are not valid UTF-8 are
    kept as surrogate escapes so the line still parses and re-encodes to the
    same bytes.
    """

    def __init__(self, stream: IO) -> None:
        self._stream = stream
        self._pending: PhysicalLine | None = None

    def _read_physical(self) -> PhysicalLine | None:
        if self._pending is not None:
            line, self._pending = self._pending, None
            return line
        raw = self._stream.readline()
        if not raw:
            return None
        # Strip exactly one terminator; a bare CR before it belongs to the content
        if isinstance(raw, bytes):
            if raw.endswith(b"\r\n"):
                return raw[:-2]
            return raw[:-1] if raw.endswith(b"\n") else raw
        if raw.endswith("\r\n"):
            return raw[:-2]
        return raw[:-1] if raw.endswith("\n") else raw

    def next_line(self) -> str | None:
        """Next logical line, or None at end of stream."""
        first = self._read_physical()
        if first is None:
            return None

        pieces = [first]
        while True:
            following = self._read_physical()
            if following is None:
                break
            if following[:1] not in _CONTINUATION_PREFIXES:
                self._pending = following
                break
            # Drop exactly the one continuation character
            pieces.append(following[1:])

        if isinstance(first, bytes):
            return b"".join(pieces).decode("utf-8", errors="surrogateescape")
        return "".join(pieces)

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line


class DecoderState(Enum):
    AWAITING_HEADER = "awaiting_header"
    IN_BODY = "in_body"
    DONE = "done"
    FAILED = "failed"


class VCardDecoder:
    """
    Streaming vCard decoder.

    Usage:
        # One record at a time (stream stays owned by the caller)
        with open("contacts.vcf", "rb") as f:
            dec = VCardDecoder(f)
            for card in dec:
                print(card.get_field("FN"))

        # Everything in a buffer
        cards = VCardDecoder.parse(data)
    """

    def __init__(self, stream: IO) -> None:
        self._lines = LineReader(stream)
        self.state = DecoderState.AWAITING_HEADER

    @classmethod
    def parse(cls, data: bytes | str) -> list[VCard]:
        """Decode every record in an in-memory buffer."""
        if isinstance(data, bytes):
            stream: IO = io.BytesIO(data)
        else:
            stream = io.StringIO(data)
        return list(cls(stream))

    def decode(self) -> VCard | None:
        """Decode the next record.

        Returns None when the stream ends before any header line. Raises a
        DecodeError subclass, carrying the partial record, on fatal errors.
        """
        self.state = DecoderState.AWAITING_HEADER
        card = VCard()
        try:
            return self._decode_into(card)
        except DecodeError:
            self.state = DecoderState.FAILED
            raise

    def _decode_into(self, card: VCard) -> VCard | None:
        while True:
            line = self._lines.next_line()
            if line is None:
                break
            if not line:
                continue

            if self.state is DecoderState.AWAITING_HEADER:
                self._read_header(line, card)
                self.state = DecoderState.IN_BODY
                continue

            try:
                key, fields = parse_line(line)
            except GrammarError as exc:
                logger.debug("Skipping malformed line %r: %s", line, exc)
                continue

            if key == FIELD_END:
                if fields[0].value.upper() != FORMAT_NAME:
                    raise InvalidFooterValueError("invalid END value", card=card, line=line)
                self.state = DecoderState.DONE
                return card

            card.extend(key, fields)

        if self.state is DecoderState.AWAITING_HEADER:
            return None
        raise NoFooterError("no END line before end of stream", card=card)

    @staticmethod
    def _read_header(line: str, card: VCard) -> None:
        try:
            key, fields = parse_line(line)
        except GrammarError as exc:
            raise NoHeaderError("no BEGIN line found", card=card, line=line) from exc
        if key != FIELD_BEGIN:
            raise NoHeaderError("no BEGIN line found", card=card, line=line)
        if fields[0].value.upper() != FORMAT_NAME:
            raise InvalidHeaderValueError("invalid BEGIN value", card=card, line=line)

    def __iter__(self) -> Iterator[VCard]:
        while True:
            card = self.decode()
            if card is None:
                return
            yield card
