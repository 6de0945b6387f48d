"""
Zappy Decoder — transport string → token stream → text
========================================================

Single pass over the token stream, dispatching on the leading bits of
each control byte (see zappy_types for the layout). Output is appended
in token order; nothing is buffered ahead or reordered.

Any malformed token (unknown width, missing table or index, truncated
payload) aborts the pass with ZappyParseError. No partial output is
returned.
"""

import struct

from zappy_types import (
    TokenTag, FAST_TABLE_ID,
    DECIMAL_WIDTHS, HEX_WIDTHS, LE_FORMATS,
    ZappyParseError,
)
from zappy_base64 import base64_alphabet_to_bytes, utf8_decode
from zappy_contractions import ContractionSet


class _TokenReader:
    """Cursor over a token stream with bounds-checked reads."""

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def has_remaining(self) -> bool:
        return self.pos < len(self.data)

    def read(self, count: int, what: str) -> bytes:
        end = self.pos + count
        if end > len(self.data):
            raise ZappyParseError(
                f"Truncated {what} at offset {self.pos}: "
                f"need {count} bytes, have {len(self.data) - self.pos}"
            )
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk

    def read_byte(self, what: str) -> int:
        return self.read(1, what)[0]

    def read_uint(self, width: int, what: str) -> int:
        return struct.unpack(LE_FORMATS[width], self.read(width, what))[0]


class ZappyDecoder:
    """
    Zappy token decoder.

    Holds a read-only reference to the codec's ContractionSet; it must be
    the same configuration the encoder used.

    Usage:
        decoder = ZappyDecoder(build_contractions())
        text = decoder.decode(transport_string)
    """

    def __init__(self, contractions: ContractionSet):
        self.contractions = contractions

    # ─── Main Entry Points ────────────────────────────────────

    def decode(self, text: str) -> str:
        """Decode a transport string back into the original text."""
        return self.decode_bytes(base64_alphabet_to_bytes(text))

    def decode_bytes(self, data: bytes) -> str:
        """Decode a raw token stream back into the original text."""
        reader = _TokenReader(bytes(data))
        buf = bytearray()
        while reader.has_remaining():
            control = reader.read_byte("control byte")
            self._resolve_next_token(buf, control, reader)
        return utf8_decode(bytes(buf))

    # ─── Dispatch ─────────────────────────────────────────────

    def _resolve_next_token(self, buf: bytearray, control: int, reader: _TokenReader) -> None:
        if control & 0x80 == 0:
            # ASCII, as-is.
            buf.append(control)
            return

        if control & 0x40 == 0:
            if control & 0x20 == 0:
                self._resolve_blob_token(buf, control, reader)
            else:
                self._resolve_repeat_token(buf, control, reader)
            return

        if control & 0x20 == 0:
            if control & 0x10 == 0:
                self._resolve_decimal_token(buf, control, reader)
            else:
                self._resolve_hexadecimal_token(buf, control, reader,
                                                is_upper=(control & 0x08) == 0)
            return

        self._resolve_contraction_token(buf, control, reader)

    # ─── Token Resolution ─────────────────────────────────────

    def _resolve_blob_token(self, buf: bytearray, control: int, reader: _TokenReader) -> None:
        count = control & 0x1F
        buf.extend(reader.read(count, "blob"))

    def _resolve_repeat_token(self, buf: bytearray, control: int, reader: _TokenReader) -> None:
        count = control & 0x1F
        value = reader.read_byte("repeat value")
        buf.extend(bytes([value]) * count)

    def _resolve_decimal_token(self, buf: bytearray, control: int, reader: _TokenReader) -> None:
        width = control & 0x0F
        if width not in DECIMAL_WIDTHS:
            raise ZappyParseError(f"Invalid byte count: {width} (decimal)")
        value = reader.read_uint(width, "decimal value")
        buf.extend(str(value).encode('ascii'))

    def _resolve_hexadecimal_token(self, buf: bytearray, control: int, reader: _TokenReader,
                                   is_upper: bool) -> None:
        width = control & 0x07
        if width not in HEX_WIDTHS:
            raise ZappyParseError(f"Invalid byte count: {width} (hex)")
        value = reader.read_uint(width, "hex value")
        digits = f"{value:X}" if is_upper else f"{value:x}"
        buf.extend(digits.encode('ascii'))

    def _resolve_contraction_token(self, buf: bytearray, control: int, reader: _TokenReader) -> None:
        if control & 0xF0 == TokenTag.FAST_CONTRACTION:
            table_id = FAST_TABLE_ID
            lookup_index = control & 0x0F
        else:
            table_id = (control & 0x0F) + 1
            lookup_index = reader.read_byte("contraction index")

        table = self.contractions.get(table_id)
        if table is None:
            raise ZappyParseError(f"No contractions found [tableId: {table_id}]")
        entry = table.lookup(lookup_index)
        if entry is None:
            raise ZappyParseError(
                f"Contraction lookup index [{table_id}]:{lookup_index} not found"
            )
        buf.extend(entry)
