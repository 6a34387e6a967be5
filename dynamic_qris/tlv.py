"""Utility helpers to build and parse EMV-style TLV payloads.

Lengths are counted in UTF-8 bytes and always written as two decimal digits,
so a single value can hold at most 99 bytes. Parsing is deliberately lenient:
a malformed length reads as its leading digits (or 0), and the scan stops
silently once a value would run past the end instead of raising. Partially
damaged real-world codes stay readable.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from .services.errors import err_invalid_argument

TAG_WIDTH = 2
LENGTH_WIDTH = 2
HEADER_WIDTH = TAG_WIDTH + LENGTH_WIDTH
MAX_VALUE_LENGTH = 99


@dataclass(frozen=True)
class TLVItem:
    tag: str
    value: str

    def serialize(self) -> str:
        if len(self.tag) != TAG_WIDTH:
            raise err_invalid_argument(f"Tag ID must be exactly {TAG_WIDTH} characters, got {self.tag!r}")
        size = len(self.value.encode("utf-8"))
        if size > MAX_VALUE_LENGTH:
            raise err_invalid_argument(f"Value for tag {self.tag} is {size} bytes, limit is {MAX_VALUE_LENGTH}")
        return f"{self.tag}{size:02d}{self.value}"


def build_tlv(items: Iterable[TLVItem]) -> str:
    """Serialize iterable of TLV items into EMV string."""

    return "".join(item.serialize() for item in items)


def _length_prefix(digits: bytes) -> int:
    """Read a length header from its leading ASCII digits; no digits reads as 0."""

    count = 0
    while count < len(digits) and digits[count : count + 1].isdigit():
        count += 1
    return int(digits[:count]) if count else 0


def parse_tlv(payload: str) -> Iterator[TLVItem]:
    """Parse TLV payload string into TLV items, stopping once a value would overrun the payload."""

    raw = payload.encode("utf-8")
    idx = 0
    total = len(raw)
    while idx + HEADER_WIDTH <= total:
        value_start = idx + HEADER_WIDTH
        value_end = value_start + _length_prefix(raw[idx + TAG_WIDTH : value_start])
        if value_end > total:
            break
        tag = raw[idx : idx + TAG_WIDTH].decode("utf-8", errors="replace")
        value = raw[value_start:value_end].decode("utf-8", errors="replace")
        yield TLVItem(tag=tag, value=value)
        idx = value_end


def parse_tlv_map(payload: str) -> dict[str, str]:
    """Parse TLV payload into a tag -> value mapping; a repeated tag keeps its last value."""

    return {item.tag: item.value for item in parse_tlv(payload)}
