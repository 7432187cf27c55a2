"""Errors raised while decoding and encoding vCards."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vcard.card import VCard


class VCardError(ValueError):
    """Base error for this package."""


# =============================================================================
# Record-level (fatal) decode errors
# =============================================================================

class DecodeError(VCardError):
    """A record could not be decoded.

    ``card`` holds whatever was decoded before the failure, ``line`` the
    logical line that triggered it (empty when the stream simply ran out).
    """

    def __init__(self, message: str, card: VCard | None = None, line: str = "") -> None:
        self.card = card
        self.line = line
        super().__init__(f"{message}: {line!r}" if line else message)


class NoHeaderError(DecodeError):
    """The first non-empty line was not a BEGIN line."""


class InvalidHeaderValueError(DecodeError):
    """BEGIN line present but its value is not VCARD."""


class InvalidFooterValueError(DecodeError):
    """END line present but its value is not VCARD."""


class NoFooterError(DecodeError):
    """The stream ran out while a record was open."""


# =============================================================================
# Line-level grammar errors (recovered by the decoder)
# =============================================================================

class GrammarError(VCardError):
    """A single content line does not follow the line grammar."""


class InvalidLineError(GrammarError):
    """No key terminator or no ':' separator on the line."""


class MalformedParameterError(GrammarError):
    """Unterminated quote, bad character after a closing quote, or empty name."""


# =============================================================================
# Encode errors
# =============================================================================

class EncodeError(VCardError):
    """A record cannot be written."""


class MissingVersionError(EncodeError):
    """Strict encoding requires a VERSION field."""
