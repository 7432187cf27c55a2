"""
vCard Conformance Tests

Shared test vectors for escaping, folding and decoding, plus the
properties every implementation must keep: escape round-trips, fold
round-trips, decode/encode round-trips and deterministic output.
"""

import io
import json
from pathlib import Path

import pytest

from vcard.card import Params, VCard, VCardField
from vcard.reader import LineReader, VCardDecoder
from vcard.spec import FOLD_WIDTH, escape_value, unescape_value
from vcard.writer import VCardEncoder, fold_line


VECTORS_PATH = Path(__file__).parent / "conformance" / "vectors.json"


@pytest.fixture(scope="module")
def vectors():
    with open(VECTORS_PATH, encoding="utf-8") as f:
        return json.load(f)


def card_from_vector(expected: dict) -> VCard:
    card = VCard()
    for key, fields in expected.items():
        for f in fields:
            card.add_field(key, VCardField(
                value=f["value"],
                params=Params(f.get("params", {})),
                group=f.get("group", ""),
            ))
    return card


def unfold(text: str) -> str:
    return LineReader(io.StringIO(text)).next_line()


# ================================================================
# Escaping
# ================================================================

class TestEscapeRoundTrip:
    """Every escape case must perfectly round-trip: unescape(escape(x)) == x."""

    def test_conformance_vectors(self, vectors):
        for case in vectors["escape_roundtrip"]["cases"]:
            inp = case["input"]
            desc = case["desc"]

            escaped = escape_value(inp)
            assert escaped == case["escaped"], (
                f"[{desc}] escape({inp!r}) = {escaped!r}, expected {case['escaped']!r}"
            )
            assert unescape_value(escaped) == inp, f"[{desc}] round trip failed"

    def test_escaped_backslash_never_becomes_newline(self):
        assert "\n" not in unescape_value(escape_value("\\n\\n"))


# ================================================================
# Folding
# ================================================================

class TestFolding:

    def test_conformance_vectors(self, vectors):
        for case in vectors["fold"]["cases"]:
            folded = fold_line(case["line"])
            assert folded == case["folded"], f"[{case['desc']}] got {folded!r}"

    @pytest.mark.parametrize("value", [
        "x" * 500,
        "é" * 200,
        "東京" * 90,
        "😀" * 80,
        ("a€" * 60) + ("bé" * 60),
    ])
    def test_unfold_restores_line(self, value):
        line = "NOTE:" + value
        folded = fold_line(line)
        physical = folded.split("\r\n")
        for p in physical:
            assert len(p.encode("utf-8")) <= FOLD_WIDTH
        for p in physical[1:]:
            assert p.startswith(" ")
        assert unfold(folded + "\r\n") == line

    def test_every_offset_of_multibyte_character(self):
        # Shift a 4-octet character across the first fold boundary
        for pad in range(68, 78):
            line = "N:" + "a" * pad + "😀" + "b" * 10
            folded = fold_line(line)
            for p in folded.split("\r\n"):
                assert len(p.encode("utf-8")) <= FOLD_WIDTH
            assert unfold(folded) == line


# ================================================================
# Decoding
# ================================================================

class TestDecodeVectors:

    def test_conformance_vectors(self, vectors):
        for case in vectors["decode"]["cases"]:
            cards = VCardDecoder.parse(case["input"])
            assert len(cards) == 1, case["desc"]
            assert cards[0] == card_from_vector(case["card"]), case["desc"]

    def test_bytes_and_text_agree(self, vectors):
        for case in vectors["decode"]["cases"]:
            text = case["input"]
            assert VCardDecoder.parse(text.encode("utf-8")) == VCardDecoder.parse(text)


# ================================================================
# Round trips and determinism
# ================================================================

class TestRoundTrip:

    def test_decode_encode_decode(self, vectors):
        for case in vectors["decode"]["cases"]:
            card = VCardDecoder.parse(case["input"])[0]
            again = VCardDecoder.parse(VCardEncoder.serialize(card))
            assert again == [card], case["desc"]

    def test_encode_is_deterministic(self, vectors):
        for case in vectors["decode"]["cases"]:
            card = VCardDecoder.parse(case["input"])[0]
            assert VCardEncoder.serialize(card) == VCardEncoder.serialize(card)

    def test_insertion_order_does_not_change_output(self):
        a = VCard()
        a.add_field("VERSION", VCardField("4.0"))
        a.add_field("TEL", VCardField("1", Params(TYPE=["cell"], PREF=["1"])))
        a.add_field("EMAIL", VCardField("a@example.com"))

        b = VCard()
        b.add_field("EMAIL", VCardField("a@example.com"))
        b.add_field("TEL", VCardField("1", Params(PREF=["1"], TYPE=["cell"])))
        b.add_field("VERSION", VCardField("4.0"))

        assert VCardEncoder.serialize(a) == VCardEncoder.serialize(b)

    def test_awkward_values_survive(self):
        card = VCard()
        card.add_field("VERSION", VCardField("4.0"))
        card.add_field("NOTE", VCardField("a\\nb, c\nd\\"))
        card.add_field("ADR", VCardField(
            ";;1 Main St;Springfield",
            Params(LABEL=['1 Main St; "Suite": 5', "plain"], TYPE=["home", "a,b"]),
            group="home",
        ))
        card.add_field("X-LONG", VCardField("Grüße aus 東京 " * 20))

        data = VCardEncoder.serialize(card)
        assert VCardDecoder.parse(data) == [card]

    def test_multi_value_split_round_trip(self):
        # A comma-separated value becomes sibling fields, which encode as
        # separate lines and decode back to the same fields
        card = VCardDecoder.parse("BEGIN:VCARD\r\nVERSION:4.0\r\nCATEGORIES:a,b\r\nEND:VCARD\r\n")[0]
        assert [f.value for f in card.get_fields("CATEGORIES")] == ["a", "b"]
        data = VCardEncoder.serialize(card)
        assert b"CATEGORIES:a\r\nCATEGORIES:b\r\n" in data
        assert VCardDecoder.parse(data) == [card]
