from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from santa.services.errors import DuplicateKeyError, UnknownKeyError


class ExclusionMatrix:
    """Square "may X give to Y" grid over participant identifiers.

    Cell ``(x, y)`` is true while ``x`` may still be assigned ``y`` as
    recipient. The diagonal is false from construction on and stays false.
    """

    def __init__(self, keys: Iterable[str]) -> None:
        self._keys: List[str] = list(keys)
        self._indexes: Dict[str, int] = {}
        for index, key in enumerate(self._keys):
            if key in self._indexes:
                raise DuplicateKeyError(key)
            self._indexes[key] = index

        size = len(self._keys)
        self._data: List[List[bool]] = [[True] * size for _ in range(size)]
        for index in range(size):
            self._data[index][index] = False

    def _index(self, key: str) -> int:
        try:
            return self._indexes[key]
        except KeyError:
            raise UnknownKeyError(key) from None

    @property
    def keys(self) -> Tuple[str, ...]:
        return tuple(self._keys)

    def get(self, x: str, y: str) -> bool:
        return self._data[self._index(x)][self._index(y)]

    def get_row(self, x: str) -> List[bool]:
        # A copy: callers scan it while the draw keeps clearing columns.
        return list(self._data[self._index(x)])

    def set(self, x: str, y: str, value: bool) -> None:
        ix = self._index(x)
        iy = self._index(y)
        if ix == iy and value:
            raise ValueError(f"\"{x}\" cannot be allowed to give to themselves.")
        self._data[ix][iy] = value

    def set_column(self, y: str, value: bool) -> None:
        iy = self._index(y)
        for ix, row in enumerate(self._data):
            row[iy] = value and ix != iy

    def contains(self, key: str) -> bool:
        return key in self._indexes

    def size(self) -> int:
        return len(self._keys)

    def key_at(self, index: int) -> str:
        return self._keys[index]

    def eligible(self, x: str) -> List[str]:
        row = self.get_row(x)
        return [self.key_at(index) for index, allowed in enumerate(row) if allowed]

    def __contains__(self, key: object) -> bool:
        return key in self._indexes

    def __len__(self) -> int:
        return self.size()

    def __repr__(self) -> str:
        return f"<ExclusionMatrix(size={self.size()})>"
