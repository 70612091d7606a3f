"""
IdentifierTable - identifier <-> index map rebuilt on every reload.
"""
from typing import Dict, Iterable, List, Optional

from loguru import logger


class IdentifierTable:
    """
    Bidirectional identifier/index map for one reload.

    Duplicate identifiers are renamed deterministically by appending the
    first free numeric suffix starting at 2, so ["a", "a", "a"] becomes
    ["a", "a2", "a3"].
    """

    def __init__(self):
        self._by_index: List[str] = []
        self._by_identifier: Dict[str, int] = {}

    @classmethod
    def build(cls, identifiers: Iterable[str]) -> "IdentifierTable":
        table = cls()
        for identifier in identifiers:
            table.append(identifier)
        return table

    def append(self, identifier: str) -> str:
        """Register the identifier for the next index and return the effective key."""
        key = identifier
        if key in self._by_identifier:
            suffix = 2
            while f"{identifier}{suffix}" in self._by_identifier:
                suffix += 1
            key = f"{identifier}{suffix}"
            logger.warning(f"Duplicate identifier '{identifier}' at index {len(self._by_index)}, using '{key}'")
        self._by_identifier[key] = len(self._by_index)
        self._by_index.append(key)
        return key

    def __len__(self) -> int:
        return len(self._by_index)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._by_identifier

    def identifier_at(self, index: int) -> str:
        return self._by_index[index]

    def index_of(self, identifier: str) -> Optional[int]:
        return self._by_identifier.get(identifier)

    @property
    def identifiers(self) -> List[str]:
        return list(self._by_index)
