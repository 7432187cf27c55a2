"""
vCard Format Specification (RFC 6350)
=====================================

Layout:
    BEGIN:VCARD                          <- Header marker line
    VERSION:4.0                          <- Version line (always written first)
    [group.]KEY[;NAME=value[,value]]*:value
    ...
    END:VCARD                            <- Footer marker line

Content lines:
    - group is an optional prefix ending in "." that links related lines
      (e.g. "item1.URL" and "item1.X-ABLABEL")
    - KEY and parameter NAMEs are case-insensitive, stored upper-cased
    - parameter values may be quoted ("a,b" is one value) or unquoted
      (a,b is two values)
    - unescaped commas in the value section separate sibling values

Value Escaping:
    - "\\\\" <-> "\\",  "\\n" <-> newline,  "\\," <-> ","
    - Quoted parameter values also use '\\"' <-> '"'
    - Unknown escapes such as "\\:" are kept literally
    - Decoding is a single left-to-right scan over two-character units, so
      an escaped backslash followed by "n" is never read as a newline

Folding:
    - Output lines are at most 75 octets, excluding the CRLF
    - Continuation lines start with exactly one space
    - A fold never splits a multi-byte UTF-8 sequence
    - Readers accept CRLF or bare LF, and space or tab continuations
"""

# Marker lines
FIELD_BEGIN = "BEGIN"
FIELD_END = "END"
FORMAT_NAME = "VCARD"

# Line structure
CRLF = "\r\n"
FOLD_WIDTH = 75             # Max octets per physical line, excluding CRLF
FOLD_PREFIX = " "           # Written in front of every continuation line
CONTINUATION_CHARS = (" ", "\t")

# Format versions seen in the wild
SUPPORTED_VERSIONS = frozenset({"2.1", "3.0", "4.0"})

# Property names (RFC 6350 section 6)
FIELD_SOURCE = "SOURCE"
FIELD_KIND = "KIND"
FIELD_XML = "XML"
FIELD_FORMATTED_NAME = "FN"
FIELD_NAME = "N"
FIELD_NICKNAME = "NICKNAME"
FIELD_PHOTO = "PHOTO"
FIELD_BIRTHDAY = "BDAY"
FIELD_ANNIVERSARY = "ANNIVERSARY"
FIELD_GENDER = "GENDER"
FIELD_ADDRESS = "ADR"
FIELD_TELEPHONE = "TEL"
FIELD_EMAIL = "EMAIL"
FIELD_IMPP = "IMPP"
FIELD_LANGUAGE = "LANG"
FIELD_TIMEZONE = "TZ"
FIELD_GEOLOCATION = "GEO"
FIELD_TITLE = "TITLE"
FIELD_ROLE = "ROLE"
FIELD_LOGO = "LOGO"
FIELD_ORGANIZATION = "ORG"
FIELD_MEMBER = "MEMBER"
FIELD_RELATED = "RELATED"
FIELD_CATEGORIES = "CATEGORIES"
FIELD_NOTE = "NOTE"
FIELD_PRODUCT_ID = "PRODID"
FIELD_REVISION = "REV"
FIELD_SOUND = "SOUND"
FIELD_UID = "UID"
FIELD_CLIENT_PID_MAP = "CLIENTPIDMAP"
FIELD_URL = "URL"
FIELD_VERSION = "VERSION"
FIELD_KEY = "KEY"
FIELD_FREE_OR_BUSY_URL = "FBURL"
FIELD_CALENDAR_ADDRESS_URI = "CALADRURI"
FIELD_CALENDAR_URI = "CALURI"

# Parameter names (RFC 6350 section 5)
PARAM_LANGUAGE = "LANGUAGE"
PARAM_VALUE = "VALUE"
PARAM_PREFERRED = "PREF"
PARAM_ALT_ID = "ALTID"
PARAM_PROPERTY_ID = "PID"
PARAM_TYPE = "TYPE"
PARAM_MEDIA_TYPE = "MEDIATYPE"
PARAM_CALENDAR_SCALE = "CALSCALE"
PARAM_SORT_AS = "SORT-AS"
PARAM_GEOLOCATION = "GEO"
PARAM_TIMEZONE = "TZ"

# Escape tables
_ESCAPES = {"\\": "\\\\", "\n": "\\n", ",": "\\,"}
_QUOTED_ESCAPES = {**_ESCAPES, '"': '\\"'}
_UNESCAPES = {"\\": "\\", "n": "\n", ",": ","}
_QUOTED_UNESCAPES = {**_UNESCAPES, '"': '"'}

_ESCAPE_TABLE = str.maketrans(_ESCAPES)
_QUOTED_ESCAPE_TABLE = str.maketrans(_QUOTED_ESCAPES)


def escape_value(value: str, quote: bool = False) -> str:
    """Escape a property or parameter value for the wire.

    Single pass: every backslash, newline and comma (and double quote when
    ``quote`` is set) is replaced independently, so nothing is escaped twice.
    """
    return value.translate(_QUOTED_ESCAPE_TABLE if quote else _ESCAPE_TABLE)


def unescape_value(value: str, quote: bool = False) -> str:
    """Reverse escape_value.

    Scans left to right, consuming either a recognized two-character escape
    or one literal character. Unrecognized escapes and a trailing lone
    backslash are kept as-is.
    """
    if "\\" not in value:
        return value
    table = _QUOTED_UNESCAPES if quote else _UNESCAPES
    out: list[str] = []
    i = 0
    n = len(value)
    while i < n:
        c = value[i]
        if c == "\\" and i + 1 < n and value[i + 1] in table:
            out.append(table[value[i + 1]])
            i += 2
        else:
            out.append(c)
            i += 1
    return "".join(out)


def find_unescaped(text: str, chars: str, start: int = 0) -> int:
    """Index of the first character of ``chars`` not escaped by a backslash, or -1."""
    escaping = False
    for i in range(start, len(text)):
        c = text[i]
        if escaping:
            escaping = False
        elif c == "\\":
            escaping = True
        elif c in chars:
            return i
    return -1


def split_unescaped(text: str, sep: str) -> list[str]:
    """Split on ``sep`` wherever it is not backslash-escaped.

    The pieces are returned still escaped.
    """
    if sep not in text:
        return [text]
    parts = []
    start = 0
    while True:
        i = find_unescaped(text, sep, start)
        if i < 0:
            break
        parts.append(text[start:i])
        start = i + 1
    parts.append(text[start:])
    return parts


def char_boundary(data: bytes, limit: int) -> int:
    """Round ``limit`` down to the nearest UTF-8 character start in ``data``.

    Returns len(data) when the limit reaches past the end. The result never
    falls inside a multi-byte sequence, so data[:result] always decodes.
    """
    if limit >= len(data):
        return len(data)
    while limit > 0 and data[limit] & 0xC0 == 0x80:
        limit -= 1
    return limit
