"""
Zappy Contraction Model — layered substitution tables
=======================================================

Builds the immutable set of contraction tables a codec instance uses.

Up to 17 tables, ids 0..16:
  - Table 0 ("fast"): max 16 entries, referenced with 1 byte.
  - Tables 1..16: max 256 entries each, referenced with 2 bytes.

Layering: for each id, a caller-supplied table replaces the built-in
default for that id as a whole. Ids with neither are absent.

The defaults favor JSON and URLs. Callers are expected to add their own
tables for their payloads.
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Union

from zappy_types import (
    FAST_TABLE_ID, MAX_TABLE_ID,
    ContractionTable, ZappyConfigurationError,
)

logger = logging.getLogger(__name__)

ContractionSource = Mapping[int, Sequence[str]]


# ═══════════════════════════════════════════════════════════════
# DEFAULT CONTRACTIONS
# ═══════════════════════════════════════════════════════════════

def _longest_first(entries: Sequence[str]) -> List[str]:
    # Stable sort keeps the given order for equal lengths.
    return sorted(entries, key=lambda s: len(s.encode('utf-8')), reverse=True)


DEFAULT_CONTRACTIONS: Dict[int, List[str]] = {
    0: _longest_first([  # Up to 16 entries.
        'null',
        'true',
        'false',
        'https://',
        '0x',
        '{"',
        '"}',
        '":',
        '":"',
        ',"',
        '","',
        '":[',
        '":["',
        '":[{',
        '}]',
        ']}',
    ]),
    16: _longest_first([  # Up to 256 entries.
        'localhost',
        '127.0.0.1',
        'http://',
        'ws://',
        '://',
        '.com',
        '.org',
        '.net',
        '.edu',
        '.io',
        '.dev',
        '.gg',
    ]),
}


# ═══════════════════════════════════════════════════════════════
# CONTRACTION SET
# ═══════════════════════════════════════════════════════════════

class ContractionSet(Mapping[int, ContractionTable]):
    """
    Read-only mapping of table id → ContractionTable.

    ``by_priority()`` yields the present tables in encoder search order
    (highest id first).
    """

    def __init__(self, tables: Mapping[int, ContractionTable]):
        self._tables = MappingProxyType(dict(tables))
        self._priority = tuple(self._tables[t] for t in sorted(self._tables, reverse=True))

    def __getitem__(self, table_id: int) -> ContractionTable:
        return self._tables[table_id]

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._tables))

    def __len__(self) -> int:
        return len(self._tables)

    def __repr__(self) -> str:
        sizes = ', '.join(f"{t}: {len(self._tables[t])}" for t in self)
        return f"ContractionSet({{{sizes}}})"

    def by_priority(self) -> tuple:
        return self._priority


def _validate_source_ids(source: ContractionSource) -> None:
    for table_id in source:
        if not isinstance(table_id, int) or isinstance(table_id, bool) \
                or not (FAST_TABLE_ID <= table_id <= MAX_TABLE_ID):
            raise ZappyConfigurationError(f"Invalid tableId: {table_id!r}")


def create_table(table_id: int, entries: Sequence[str]) -> ContractionTable:
    """
    Convert sorted string entries into a ContractionTable.

    Every entry must be longer, in UTF-8 bytes, than its reference.
    """
    table = ContractionTable(table_id=table_id)
    raw_entries = []
    for entry in entries:
        raw = entry.encode('utf-8')
        if len(raw) <= table.reference_cost:
            raise ZappyConfigurationError(
                f"Contraction is smaller than encoding: "
                f"[{table.reference_cost}-byte] {entry!r} (table {table_id})"
            )
        raw_entries.append(raw)
    if len(raw_entries) > table.capacity:
        raise ZappyConfigurationError(
            f"Table {table_id} holds at most {table.capacity} entries, got {len(raw_entries)}"
        )
    return ContractionTable(table_id=table_id, entries=tuple(raw_entries))


def build_contractions(source: Optional[ContractionSource] = None) -> ContractionSet:
    """
    Layer ``source`` over DEFAULT_CONTRACTIONS.

    Args:
        source: Mapping of table id (0..16) → list of strings. Whole tables
            are replaced, not individual entries. None = defaults only.

    Raises:
        ZappyConfigurationError: on an id outside 0..16, an entry not
            longer than its reference, or a table over capacity.
    """
    if source is not None:
        _validate_source_ids(source)

    tables = {}
    for table_id in range(FAST_TABLE_ID, MAX_TABLE_ID + 1):
        if source is not None and table_id in source:
            entries = _longest_first(source[table_id])
            origin = 'override'
        elif table_id in DEFAULT_CONTRACTIONS:
            entries = DEFAULT_CONTRACTIONS[table_id]
            origin = 'default'
        else:
            continue
        tables[table_id] = create_table(table_id, entries)
        logger.debug("Contraction table %d: %d entries (%s)",
                     table_id, len(entries), origin)
    return ContractionSet(tables)


def load_contraction_source(path: Union[str, Path]) -> Dict[int, List[str]]:
    """
    Read a contraction source from a JSON file.

    Expected shape: ``{"1": ["hello", "hey"], "4": ["ice cream"]}``.
    Ids are validated later by build_contractions.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ZappyConfigurationError(f"{path}: invalid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ZappyConfigurationError(f"{path}: expected a JSON object of tables")

    source = {}
    for key, entries in raw.items():
        try:
            table_id = int(key)
        except ValueError:
            raise ZappyConfigurationError(f"{path}: invalid tableId {key!r}") from None
        if not isinstance(entries, list) or not all(isinstance(e, str) for e in entries):
            raise ZappyConfigurationError(f"{path}: table {key} must be a list of strings")
        source[table_id] = entries
    return source
