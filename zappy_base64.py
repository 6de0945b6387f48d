"""
Zappy Transport Codec — URL-safe base64, unpadded
===================================================

Maps raw bytes to and from the printable transport alphabet
(``A-Z a-z 0-9 - _``). No padding characters are produced or accepted.

    3 bytes → 4 symbols
    2 bytes → 3 symbols (last 2 bits zero)
    1 byte  → 2 symbols (last 4 bits zero)

Used on its own for plain text, and as the outer layer around the
Zappy token stream.
"""

import base64
import binascii
from typing import FrozenSet

from zappy_types import BASE64_ALPHABET, ZappyParseError

_ALPHABET_SET: FrozenSet[str] = frozenset(BASE64_ALPHABET)


def _check_symbols(text: str) -> None:
    for position, ch in enumerate(text):
        if ch not in _ALPHABET_SET:
            raise ZappyParseError(f"Invalid base64 character {ch!r} at position {position}")


def bytes_to_base64_alphabet(data: bytes) -> str:
    """Encode raw bytes into the transport alphabet."""
    return base64.urlsafe_b64encode(data).rstrip(b'=').decode('ascii')


def base64_alphabet_to_bytes(text: str) -> bytes:
    """
    Decode a transport string into raw bytes.

    Raises:
        ZappyParseError: on a character outside the alphabet (padding
            included), or when the length leaves a single dangling
            symbol (len % 4 == 1).
    """
    length = len(text)
    if length & 3 == 1:
        raise ZappyParseError(f"Illegal base64 length: {length} (len % 4 == 1)")
    _check_symbols(text)
    try:
        return base64.urlsafe_b64decode(text + '=' * (-length % 4))
    except (binascii.Error, ValueError) as e:
        raise ZappyParseError(f"Invalid base64 string: {e}") from e


def utf8_decode(data: bytes) -> str:
    """Decode UTF-8, reporting malformed sequences as ZappyParseError."""
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise ZappyParseError(f"Decoded bytes are not valid UTF-8: {e}") from e


def base64_string_encode(text: str) -> str:
    """Encode a string's UTF-8 bytes into the transport alphabet."""
    return bytes_to_base64_alphabet(text.encode('utf-8'))


def base64_string_decode(text: str) -> str:
    """Decode a transport string back into the original string."""
    return utf8_decode(base64_alphabet_to_bytes(text))
