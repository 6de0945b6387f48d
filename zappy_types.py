"""
Zappy Types & Constants — Zappy token stream v1
=================================================

Foundational type definitions, constants, enumerations, and error classes
for the Zappy codec. This module has ZERO external dependencies beyond
the Python standard library.

Token stream layout (one leading control byte per token):

    0xxxxxxx   literal ASCII byte
    100nnnnn   blob, n raw bytes follow
    101nnnnn   repeat, 1 value byte follows, repeated n times
    1100wwww   decimal integer, w little-endian bytes follow
    11010www   uppercase hex integer, w little-endian bytes follow
    11011www   lowercase hex integer, w little-endian bytes follow
    1110iiii   fast contraction (table 0, index i)
    1111tttt   table contraction (table t+1), 1 index byte follows
"""

from enum import IntEnum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

# ═══════════════════════════════════════════════════════════════
# TRANSPORT ALPHABET
# ═══════════════════════════════════════════════════════════════

# URL-safe, unpadded. Index == 6-bit value.
BASE64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


# ═══════════════════════════════════════════════════════════════
# CONTROL BYTES (wire format, locked)
# ═══════════════════════════════════════════════════════════════

class TokenTag(IntEnum):
    """Leading bits of every non-ASCII token."""
    BLOB               = 0x80  # 100n nnnn
    REPEAT             = 0xA0  # 101n nnnn
    DECIMAL            = 0xC0  # 1100 wwww
    HEX_UPPER          = 0xD0  # 1101 0www
    HEX_LOWER          = 0xD8  # 1101 1www
    FAST_CONTRACTION   = 0xE0  # 1110 iiii
    TABLE_CONTRACTION  = 0xF0  # 1111 tttt


# ═══════════════════════════════════════════════════════════════
# FORMAT LIMITS
# ═══════════════════════════════════════════════════════════════

MAX_BLOB_SIZE = 0x1F       # 5-bit length field
MAX_REPEAT_COUNT = 0x1F    # 5-bit count field
MIN_REPEAT_COUNT = 3       # Two bytes of token, so 3 is the first win

MAX_DECIMAL_DIGITS = 10
MAX_HEX_DIGITS = 8

# 31-bit cap: 32-bit signed consumers must never see a negative.
MAX_INTEGER_VALUE = 0x7FFFFFFF
HEX_OVERFLOW_MASK = 0x08000000  # Next nibble shift would reach bit 31

# Smaller values are no shorter than their ASCII digits.
MIN_DECIMAL_VALUE = 100
MIN_HEX_VALUE = 0x1000

DECIMAL_WIDTHS = (1, 2, 4)
HEX_WIDTHS = (2, 4)

# struct formats for little-endian integer payloads, keyed by width.
LE_FORMATS = {1: "<B", 2: "<H", 4: "<I"}

FAST_TABLE_ID = 0
MAX_TABLE_ID = 16
FAST_TABLE_SIZE = 16
TABLE_SIZE = 256

# Bytes needed to reference an entry; entries must be strictly longer.
FAST_REFERENCE_COST = 1
TABLE_REFERENCE_COST = 2


# ═══════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ContractionTable:
    """
    One ordered contraction table.

    Entries are UTF-8 byte strings, longest first. An entry's position
    in ``entries`` is its wire index.
    """
    table_id: int
    entries: Tuple[bytes, ...] = field(default_factory=tuple)

    @property
    def reference_cost(self) -> int:
        if self.table_id == FAST_TABLE_ID:
            return FAST_REFERENCE_COST
        return TABLE_REFERENCE_COST

    @property
    def capacity(self) -> int:
        if self.table_id == FAST_TABLE_ID:
            return FAST_TABLE_SIZE
        return TABLE_SIZE

    def __len__(self) -> int:
        return len(self.entries)

    def match(self, source: bytes, index: int) -> Optional[int]:
        """Return the first entry index matching ``source`` at ``index``."""
        for lookup_index, entry in enumerate(self.entries):
            if source.startswith(entry, index):
                return lookup_index
        return None

    def lookup(self, lookup_index: int) -> Optional[bytes]:
        if 0 <= lookup_index < len(self.entries):
            return self.entries[lookup_index]
        return None


# ═══════════════════════════════════════════════════════════════
# ERROR CLASSES
# ═══════════════════════════════════════════════════════════════

class ZappyError(Exception):
    """Base error for all Zappy operations."""
    pass

class ZappyConfigurationError(ZappyError, ValueError):
    """Invalid contraction source (table id or entry size)."""
    pass

class ZappyParseError(ZappyError):
    """Malformed transport string or token stream."""
    pass


# ═══════════════════════════════════════════════════════════════
# UTILITY FUNCTIONS
# ═══════════════════════════════════════════════════════════════

def integer_width(value: int, widths: Tuple[int, ...]) -> int:
    """Smallest width in ``widths`` (bytes) able to hold ``value``."""
    for width in widths:
        if value < (1 << (8 * width)):
            return width
    return widths[-1]


def table_nibble(table_id: int) -> int:
    """Low nibble of a table contraction control byte for ``table_id``."""
    return (table_id - 1) & 0x0F


def describe_token(control: int) -> str:
    """Human-readable token kind for a control byte (debugging aid)."""
    if control & 0x80 == 0:
        return "ascii"
    if control & 0xE0 == TokenTag.BLOB:
        return f"blob[{control & 0x1F}]"
    if control & 0xE0 == TokenTag.REPEAT:
        return f"repeat[{control & 0x1F}]"
    if control & 0xF0 == TokenTag.DECIMAL:
        return f"decimal[{control & 0x0F}]"
    if control & 0xF8 == TokenTag.HEX_UPPER:
        return f"hex-upper[{control & 0x07}]"
    if control & 0xF8 == TokenTag.HEX_LOWER:
        return f"hex-lower[{control & 0x07}]"
    if control & 0xF0 == TokenTag.FAST_CONTRACTION:
        return f"contraction[0:{control & 0x0F}]"
    return f"contraction[{(control & 0x0F) + 1}]"


def split_tokens(data: bytes) -> List[Tuple[str, bytes]]:
    """
    Split a token stream into (kind, raw token bytes) pairs.

    Walks the same bit-pattern protocol as the decoder without resolving
    contractions. Raises ZappyParseError on a truncated token.
    """
    tokens = []
    pos = 0
    while pos < len(data):
        control = data[pos]
        if control & 0x80 == 0:
            size = 1
        elif control & 0xC0 == 0x80:
            size = 1 + (control & 0x1F if control & 0x20 == 0 else 1)
        elif control & 0xE0 == 0xC0:
            size = 1 + (control & (0x0F if control & 0x10 == 0 else 0x07))
        elif control & 0xF0 == TokenTag.FAST_CONTRACTION:
            size = 1
        else:
            size = 2
        if pos + size > len(data):
            raise ZappyParseError(
                f"Truncated {describe_token(control)} token at offset {pos}: "
                f"need {size} bytes, have {len(data) - pos}"
            )
        tokens.append((describe_token(control), data[pos:pos + size]))
        pos += size
    return tokens
