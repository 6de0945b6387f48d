"""
Zappy — compressed web text for transport
===========================================

Facade over the contraction model, encoder and decoder. Compresses short
structured text (JSON, URLs, ids) into a token stream and carries it in
the URL-safe transport alphabet.

    zappy = Zappy({1: ["hello", "hey"], 4: ["ice cream"]})
    packed = zappy.encode('{"msg":"hello"}')
    assert zappy.decode(packed) == '{"msg":"hello"}'

Both ends must build their Zappy with the same contraction source.
"""

import logging
from typing import Optional

from zappy_base64 import (
    base64_string_encode, base64_string_decode, bytes_to_base64_alphabet,
)
from zappy_contractions import ContractionSet, ContractionSource, build_contractions
from zappy_decoder import ZappyDecoder
from zappy_encoder import ZappyEncoder

logger = logging.getLogger(__name__)


class Zappy:
    """
    Encoding and decoding of compressed web text.

    Args:
        source: Contraction tables to overlay on the defaults, keyed by
            table id (0..16). Whole tables are replaced, not individual
            entries. None = defaults only (JSON/URL oriented). Adding
            tables for your own payloads is highly recommended.

    Raises:
        ZappyConfigurationError: if ``source`` is invalid. No instance
            is created.
    """

    def __init__(self, source: Optional[ContractionSource] = None):
        self._contractions = build_contractions(source)
        self.encoder = ZappyEncoder(self._contractions)
        self.decoder = ZappyDecoder(self._contractions)
        logger.debug("Zappy ready: %r", self._contractions)

    @property
    def contractions(self) -> ContractionSet:
        return self._contractions

    # ─── Transport Alphabet Only ──────────────────────────────

    def base64_string_encode(self, text: str) -> str:
        """Encode a string with ``-``/``_`` and no padding (no compression)."""
        return base64_string_encode(text)

    def base64_string_decode(self, text: str) -> str:
        """Decode a ``-``/``_`` unpadded string. Raises ZappyParseError."""
        return base64_string_decode(text)

    # ─── Full Pipeline ────────────────────────────────────────

    def encode(self, text: str) -> str:
        """Turn a string into a Zappy compressed string."""
        return self.encoder.encode(text)

    def decode(self, text: str) -> str:
        """Turn a Zappy compressed string into a string. Raises ZappyParseError."""
        return self.decoder.decode(text)

    # ─── Raw Token Stream ─────────────────────────────────────

    def compress(self, text: str) -> bytes:
        """Encode text into the raw token stream, without the base64 layer."""
        return self.encoder.encode_bytes(text)

    def decompress(self, data: bytes) -> str:
        """Decode a raw token stream into text. Raises ZappyParseError."""
        return self.decoder.decode_bytes(data)

    def stats(self, text: str) -> dict:
        """
        Size report for ``text``.

        Returns:
            dict with original_size, token_size, encoded_length,
            base64_length and compression_ratio (base64 / encoded).
        """
        tokens = self.compress(text)
        encoded_length = len(bytes_to_base64_alphabet(tokens))
        base64_length = len(base64_string_encode(text))
        return {
            'original_size': len(text.encode('utf-8')),
            'token_size': len(tokens),
            'encoded_length': encoded_length,
            'base64_length': base64_length,
            'compression_ratio': (base64_length / encoded_length) if encoded_length else 1.0,
        }
