# Copyright 2025 TIER IV, INC. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""A minimum DER/BER TLV reader.

Only what is needed for locating elements inside an encoded structure is
implemented here, no value decoding is performed.
"""

from __future__ import annotations

from dataclasses import dataclass

from worker_jwt.consts import MAX_DER_DEPTH, MAX_DER_LENGTH_OCTETS
from worker_jwt.errors import DERParseError

TAG_SEQUENCE = 0x30
TAG_EXPLICIT_0 = 0xA0

_HIGH_TAG_NUMBER = 0x1F
_CONSTRUCTED_BIT = 0x20
_LONG_FORM_BIT = 0x80
_INDEFINITE_LENGTH = 0x80
_END_OF_CONTENTS = b"\x00\x00"


@dataclass(frozen=True)
class TLV:
    """One tag-length-value element inside a buffer.

    Offsets are absolute offsets into the buffer the element was read from.
    For indefinite-length element, `end` includes the end-of-contents octets.
    """

    tag: int
    start: int
    value_start: int
    value_end: int
    end: int

    @property
    def constructed(self) -> bool:
        return bool(self.tag & _CONSTRUCTED_BIT)

    @property
    def length(self) -> int:
        return self.value_end - self.value_start

    def encoded(self, buf: bytes) -> bytes:
        return bytes(buf[self.start : self.end])

    def value(self, buf: bytes) -> bytes:
        return bytes(buf[self.value_start : self.value_end])


def _read_tag(buf: bytes, offset: int, limit: int) -> tuple[int, int]:
    if offset >= limit:
        raise DERParseError(f"unexpected end of input when reading tag at {offset}")
    tag = buf[offset]
    offset += 1
    if tag & _HIGH_TAG_NUMBER == _HIGH_TAG_NUMBER:
        # high-tag-number form, we only need to skip over the subsequent octets
        while True:
            if offset >= limit:
                raise DERParseError("unexpected end of input in high tag number")
            _octet = buf[offset]
            offset += 1
            if not _octet & _LONG_FORM_BIT:
                break
    return tag, offset


def _read_length(buf: bytes, offset: int, limit: int) -> tuple[int | None, int]:
    """Return (length, offset after length octets), length is None for indefinite form."""
    if offset >= limit:
        raise DERParseError(f"unexpected end of input when reading length at {offset}")
    first = buf[offset]
    offset += 1
    if first < _LONG_FORM_BIT:
        return first, offset
    if first == _INDEFINITE_LENGTH:
        return None, offset

    _octets = first & 0x7F
    if _octets > MAX_DER_LENGTH_OCTETS:
        raise DERParseError(f"length field too long: {_octets} octets")
    if offset + _octets > limit:
        raise DERParseError("unexpected end of input in long form length")
    length = int.from_bytes(buf[offset : offset + _octets], "big")
    return length, offset + _octets


def read_tlv(
    buf: bytes, offset: int = 0, limit: int | None = None, *, _depth: int = 0
) -> TLV:
    """Read one TLV element at <offset>, the element must end before <limit>.

    Raises:
        DERParseError on truncated or malformed input.
    """
    if _depth > MAX_DER_DEPTH:
        raise DERParseError(f"exceed maximum nesting depth {MAX_DER_DEPTH}")
    if limit is None:
        limit = len(buf)

    start = offset
    tag, offset = _read_tag(buf, offset, limit)
    length, value_start = _read_length(buf, offset, limit)

    if length is not None:
        value_end = value_start + length
        if value_end > limit:
            raise DERParseError(
                f"element at {start} overruns its container: {value_end=} > {limit=}"
            )
        return TLV(tag, start, value_start, value_end, value_end)

    if not tag & _CONSTRUCTED_BIT:
        raise DERParseError(f"indefinite length on primitive element at {start}")

    # indefinite form, scan the children until the end-of-contents octets.
    # Each child read strictly advances the cursor, and the cursor is bounded by <limit>.
    cursor = value_start
    while True:
        if cursor + 2 > limit:
            raise DERParseError(f"missing end-of-contents for element at {start}")
        if buf[cursor : cursor + 2] == _END_OF_CONTENTS:
            return TLV(tag, start, value_start, cursor, cursor + 2)
        cursor = read_tlv(buf, cursor, limit, _depth=_depth + 1).end


def read_children(buf: bytes, parent: TLV) -> list[TLV]:
    """Read all the direct children of a constructed element."""
    if not parent.constructed:
        raise DERParseError(f"element with tag {parent.tag:#04x} is not constructed")

    res: list[TLV] = []
    cursor = parent.value_start
    while cursor < parent.value_end:
        _child = read_tlv(buf, cursor, parent.value_end, _depth=1)
        res.append(_child)
        cursor = _child.end
    return res


def expect_tag(element: TLV, tag: int) -> TLV:
    if element.tag != tag:
        raise DERParseError(f"expect tag {tag:#04x}, get {element.tag:#04x}")
    return element
