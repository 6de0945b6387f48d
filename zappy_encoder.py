"""
Zappy Encoder — text → token stream → transport string
========================================================

Greedy single-pass encoder. At each source position the strategies are
tried in strict priority order; the first one that consumes bytes wins:

  1. Contraction (tables 16 → 0, entries longest-first)
  2. Repeat run (3..31 identical bytes)
  3. Unsigned integer run (decimal or single-case hex)
  4. ASCII passthrough
  5. Blob (1..31 consecutive non-ASCII bytes)

Steps 4/5 always consume at least one byte, so the pass always progresses.
"""

import struct

from zappy_types import (
    TokenTag, FAST_TABLE_ID,
    MAX_BLOB_SIZE, MAX_REPEAT_COUNT, MIN_REPEAT_COUNT,
    MAX_DECIMAL_DIGITS, MAX_HEX_DIGITS,
    MAX_INTEGER_VALUE, HEX_OVERFLOW_MASK,
    MIN_DECIMAL_VALUE, MIN_HEX_VALUE,
    DECIMAL_WIDTHS, HEX_WIDTHS, LE_FORMATS,
    integer_width, table_nibble,
)
from zappy_base64 import bytes_to_base64_alphabet
from zappy_contractions import ContractionSet


def _is_digit(b: int) -> bool:
    return 0x30 <= b <= 0x39          # [0-9]

def _is_upper_hex(b: int) -> bool:
    return 0x41 <= b <= 0x46          # [A-F]

def _is_lower_hex(b: int) -> bool:
    return 0x61 <= b <= 0x66          # [a-f]

def _starts_number(b: int) -> bool:
    # No leading zero: the decoder renders numbers without one.
    return (0x31 <= b <= 0x39) or _is_upper_hex(b) or _is_lower_hex(b)


def _hex_digit_value(b: int) -> int:
    if _is_digit(b):
        return b - 0x30
    if _is_upper_hex(b):
        return b - 0x37
    return b - 0x57


class ZappyEncoder:
    """
    Zappy token encoder.

    Holds a read-only reference to the codec's ContractionSet. Each call
    builds its own output buffer, so one encoder can serve many calls.

    Usage:
        encoder = ZappyEncoder(build_contractions())
        token_bytes = encoder.encode_bytes('{"id":12345}')
        transport = encoder.encode('{"id":12345}')
    """

    def __init__(self, contractions: ContractionSet):
        self.contractions = contractions

    # ─── Main Entry Points ────────────────────────────────────

    def encode(self, text: str) -> str:
        """Encode text into a transport-alphabet string."""
        return bytes_to_base64_alphabet(self.encode_bytes(text))

    def encode_bytes(self, text: str) -> bytes:
        """Encode text into the raw token stream."""
        if not isinstance(text, str):
            raise TypeError(f"text must be str, got {type(text).__name__}")
        source = text.encode('utf-8')
        buf = bytearray()
        index = 0
        while index < len(source):
            index += self._add_next_token(buf, source, index)
        return bytes(buf)

    # ─── Token Selection ──────────────────────────────────────

    def _add_next_token(self, buf: bytearray, source: bytes, index: int) -> int:
        used = self._add_contraction_token(buf, source, index)
        if used:
            return used

        used = self._add_repeat_token(buf, source, index)
        if used:
            return used

        b = source[index]
        if _starts_number(b):
            used = self._add_unsigned_integer_token(buf, source, index)
            if used:
                return used

        if b & 0x80 == 0:
            buf.append(b)
            return 1

        return self._add_blob_token(buf, source, index)

    # ─── Contractions ─────────────────────────────────────────

    def _add_contraction_token(self, buf: bytearray, source: bytes, index: int) -> int:
        for table in self.contractions.by_priority():
            lookup_index = table.match(source, index)
            if lookup_index is None:
                continue
            if table.table_id == FAST_TABLE_ID:
                buf.append(TokenTag.FAST_CONTRACTION | lookup_index)
            else:
                buf.append(TokenTag.TABLE_CONTRACTION | table_nibble(table.table_id))
                buf.append(lookup_index)
            return len(table.entries[lookup_index])
        return 0

    # ─── Repeats ──────────────────────────────────────────────

    def _add_repeat_token(self, buf: bytearray, source: bytes, index: int) -> int:
        value = source[index]
        end = min(len(source), index + MAX_REPEAT_COUNT)
        count = 1
        while index + count < end and source[index + count] == value:
            count += 1
        if count < MIN_REPEAT_COUNT:
            return 0
        buf.append(TokenTag.REPEAT | count)
        buf.append(value)
        return count

    # ─── Unsigned Integers ────────────────────────────────────

    def _add_unsigned_integer_token(self, buf: bytearray, source: bytes, index: int) -> int:
        """Collect up to 10 decimal or 8 hex digits and emit the best token."""
        count = 1
        b = source[index]
        is_upper = _is_upper_hex(b)
        is_hex = is_upper or _is_lower_hex(b)

        while count < (MAX_HEX_DIGITS if is_hex else MAX_DECIMAL_DIGITS):
            walker = index + count
            if walker >= len(source):
                break
            b = source[walker]
            if _is_digit(b):
                count += 1
                continue
            if is_hex:
                # Case is locked by the first hex letter.
                if (is_upper and _is_upper_hex(b)) or (not is_upper and _is_lower_hex(b)):
                    count += 1
                    continue
                break
            if _is_upper_hex(b) or _is_lower_hex(b):
                if count >= MAX_HEX_DIGITS:
                    break
                is_hex = True
                is_upper = _is_upper_hex(b)
                count += 1
                continue
            break

        if is_hex:
            return self._add_hexadecimal_token(buf, source, index, count, is_upper)
        return self._add_decimal_token(buf, source, index, count)

    def _add_decimal_token(self, buf: bytearray, source: bytes, index: int, count: int) -> int:
        value = 0
        digits = 0
        while digits < count:
            new_value = value * 10 + (source[index + digits] - 0x30)
            if new_value > MAX_INTEGER_VALUE:
                break
            value = new_value
            digits += 1

        if value < MIN_DECIMAL_VALUE:
            return 0

        width = integer_width(value, DECIMAL_WIDTHS)
        buf.append(TokenTag.DECIMAL | width)
        buf.extend(struct.pack(LE_FORMATS[width], value))
        return digits

    def _add_hexadecimal_token(self, buf: bytearray, source: bytes, index: int,
                               count: int, is_upper: bool) -> int:
        value = 0
        digits = 0
        while digits < count:
            if value & HEX_OVERFLOW_MASK:
                break
            value = (value << 4) | _hex_digit_value(source[index + digits])
            digits += 1

        if value < MIN_HEX_VALUE:
            return 0

        width = integer_width(value, HEX_WIDTHS)
        tag = TokenTag.HEX_UPPER if is_upper else TokenTag.HEX_LOWER
        buf.append(tag | width)
        buf.extend(struct.pack(LE_FORMATS[width], value))
        return digits

    # ─── Blobs ────────────────────────────────────────────────

    def _add_blob_token(self, buf: bytearray, source: bytes, index: int) -> int:
        end = min(len(source), index + MAX_BLOB_SIZE)
        count = 1
        while index + count < end and source[index + count] & 0x80:
            count += 1
        buf.append(TokenTag.BLOB | count)
        buf.extend(source[index:index + count])
        return count
