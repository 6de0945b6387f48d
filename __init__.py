"""
Zappy — compressed web text for transport
===========================================

Lightweight codec for compressing short web text (JSON, URLs, UUIDs)
into a URL-safe string. Text is turned into a compact token stream
(contractions, repeats, integers, raw runs) which is then written in an
unpadded ``A-Za-z0-9-_`` alphabet.
"""

from zappy_types import (
    TokenTag, ContractionTable,
    ZappyError, ZappyConfigurationError, ZappyParseError,
)
from zappy_contractions import (
    DEFAULT_CONTRACTIONS, ContractionSet,
    build_contractions, load_contraction_source,
)
from zappy_encoder import ZappyEncoder
from zappy_decoder import ZappyDecoder
from zappy_codec import Zappy

__version__ = "1.0.0"
__all__ = [
    'Zappy', 'ZappyEncoder', 'ZappyDecoder',
    'DEFAULT_CONTRACTIONS', 'ContractionSet', 'ContractionTable', 'TokenTag',
    'build_contractions', 'load_contraction_source',
    'ZappyError', 'ZappyConfigurationError', 'ZappyParseError',
]
