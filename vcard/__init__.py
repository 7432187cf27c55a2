"""
vcard - RFC 6350 vCard codec.

Decodes framed, folded, escaped content lines into VCard records and
encodes them back into deterministic, folded, CRLF-terminated text.
"""

__version__ = "0.1.0"

from vcard.spec import FORMAT_NAME, FOLD_WIDTH, CRLF, escape_value, unescape_value
from vcard.errors import (
    VCardError,
    DecodeError,
    NoHeaderError,
    InvalidHeaderValueError,
    InvalidFooterValueError,
    NoFooterError,
    GrammarError,
    InvalidLineError,
    MalformedParameterError,
    EncodeError,
    MissingVersionError,
)
from vcard.card import Params, VCardField, VCard
from vcard.parser import parse_line
from vcard.reader import LineReader, VCardDecoder
from vcard.writer import VCardEncoder, format_line, fold_line
