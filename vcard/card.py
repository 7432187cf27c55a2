"""
vCard - In-memory representation of one decoded contact record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from vcard.spec import FIELD_VERSION


class Params(dict):
    """Ordered multi-valued parameter map: name -> [value, ...].

    Names are stored exactly as given; the parser upper-cases them once.
    """

    def add(self, name: str, *values: str) -> None:
        """Append values under name, keeping earlier ones."""
        self.setdefault(name, []).extend(values)

    def set(self, name: str, *values: str) -> None:
        self[name] = list(values)

    def get_first(self, name: str, default: str = "") -> str:
        values = self.get(name)
        if values:
            return values[0]
        return default

    def get_all(self, name: str) -> list[str]:
        return list(self.get(name, []))

    def copy(self) -> Params:
        return Params((name, list(values)) for name, values in self.items())


@dataclass
class VCardField:
    """One property occurrence: unescaped value, parameters and optional group."""
    value: str = ""
    params: Params = field(default_factory=Params)
    group: str = ""  # empty string means "no group"

    def __post_init__(self) -> None:
        if not isinstance(self.params, Params):
            self.params = Params((k, list(v)) for k, v in self.params.items())


@dataclass
class VCard:
    """
    In-memory representation of a vCard.

    Maps each property key to its fields in encounter order.

    Usage:
        card = VCard()
        card.add_field("VERSION", VCardField("4.0"))
        card.add_field("FN", VCardField("J. Doe", Params(PID=["1.1"])))
        data = card.to_bytes()
    """

    properties: dict[str, list[VCardField]] = field(default_factory=dict)

    def add_field(self, key: str, f: VCardField) -> VCardField:
        """Append a field under key. Returns the field for chaining."""
        self.properties.setdefault(key, []).append(f)
        return f

    def extend(self, key: str, fields: list[VCardField]) -> None:
        self.properties.setdefault(key, []).extend(fields)

    def get_field(self, key: str) -> VCardField | None:
        """First stored field for key, or None."""
        fields = self.properties.get(key)
        if fields:
            return fields[0]
        return None

    def get_fields(self, key: str) -> list[VCardField]:
        return list(self.properties.get(key, []))

    def keys(self) -> list[str]:
        return list(self.properties)

    @property
    def version(self) -> str:
        f = self.get_field(FIELD_VERSION)
        return f.value if f else ""

    def to_bytes(self, strict: bool = True) -> bytes:
        """Serialize this card to bytes."""
        from vcard.writer import VCardEncoder
        return VCardEncoder.serialize(self, strict=strict)

    def __contains__(self, key: object) -> bool:
        return key in self.properties

    def __iter__(self) -> Iterator[str]:
        return iter(self.properties)

    def __len__(self) -> int:
        return len(self.properties)

    def __repr__(self) -> str:
        return f"VCard(version={self.version!r}, keys={self.keys()})"
