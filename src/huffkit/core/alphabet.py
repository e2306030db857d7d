from __future__ import annotations

from typing import Any, Dict, Hashable, Iterable, Iterator, List, Tuple

from huffkit.core.errors import DuplicateSymbol, EmptyAlphabet, InvalidSymbol, InvalidWeight


def _check_symbol(sym: Any) -> None:
    if sym is None:
        raise InvalidSymbol("symbol cannot be None")
    try:
        hash(sym)
    except TypeError:
        raise InvalidSymbol(f"symbol must be hashable: {sym!r}") from None


def _check_weight(sym: Any, weight: Any) -> None:
    # bool is an int subclass but never a weight
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise InvalidWeight(f"weight for {sym!r} must be an int, got {type(weight).__name__}")
    if weight <= 0:
        raise InvalidWeight(f"weight for {sym!r} must be positive, got {weight}")


class Alphabet:
    """
    Immutable, ordered set of (symbol, weight) pairs.

    Order matters: it is the insertion order the tree builder uses
    to break ties between equal weights.
    """

    __slots__ = ("_pairs", "_index")

    def __init__(self, pairs: Iterable[Tuple[Hashable, int]]):
        items: List[Tuple[Hashable, int]] = []
        index: Dict[Hashable, int] = {}

        for sym, weight in pairs:
            _check_symbol(sym)
            _check_weight(sym, weight)
            if sym in index:
                raise DuplicateSymbol(f"symbol listed twice: {sym!r}")
            index[sym] = len(items)
            items.append((sym, weight))

        if not items:
            raise EmptyAlphabet("alphabet has no symbols")

        self._pairs: Tuple[Tuple[Hashable, int], ...] = tuple(items)
        self._index = index

    @classmethod
    def from_sample(cls, symbols: Iterable[Hashable]) -> "Alphabet":
        """
        Count occurrences in a sample. Symbols keep first-seen order.
        """
        freqs: Dict[Hashable, int] = {}
        for s in symbols:
            _check_symbol(s)
            freqs[s] = freqs.get(s, 0) + 1
        return cls(freqs.items())

    @property
    def symbols(self) -> List[Hashable]:
        return [s for s, _ in self._pairs]

    @property
    def weights(self) -> List[int]:
        return [w for _, w in self._pairs]

    @property
    def total_weight(self) -> int:
        return sum(w for _, w in self._pairs)

    def weight_of(self, sym: Hashable) -> int:
        return self._pairs[self._index[sym]][1]

    def __contains__(self, sym: object) -> bool:
        try:
            return sym in self._index
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> Iterator[Tuple[Hashable, int]]:
        return iter(self._pairs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Alphabet):
            return NotImplemented
        return self._pairs == other._pairs

    def __hash__(self) -> int:
        return hash(self._pairs)

    def __repr__(self) -> str:
        return f"Alphabet({list(self._pairs)!r})"
