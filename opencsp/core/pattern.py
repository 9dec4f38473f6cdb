"""
Pattern module - cutting patterns and the append-only pattern set.

A pattern says how many pieces of each item type are cut from one stock
unit. In column generation a pattern is a column of the master problem:
its entry in row i is the number of copies of item i it produces.

Design Notes:
------------
- Pattern is immutable and hashable (frozen dataclass over a tuple)
- PatternSet only grows; the index of a pattern is its master variable id
- PatternSet rejects duplicates, so every priced pattern is new
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from opencsp.core.instance import Instance
from opencsp.exceptions import InvalidInstance


@dataclass(frozen=True)
class Pattern:
    """
    A cutting pattern: counts[i] copies of item i from one stock unit.

    Example:
        >>> p = Pattern((2, 1))
        >>> p.length_used((3, 4))
        10
        >>> p.cut_offsets((3, 4))
        [3, 6, 10]
    """
    counts: Tuple[int, ...]

    def __post_init__(self):
        counts = tuple(int(c) for c in self.counts)
        if any(c < 0 for c in counts):
            raise ValueError(f"Pattern counts must be non-negative, got {counts}")
        object.__setattr__(self, 'counts', counts)

    @classmethod
    def single_item(cls, num_items: int, item_idx: int, copies: int) -> 'Pattern':
        """Pattern made of `copies` pieces of one item type."""
        counts = [0] * num_items
        counts[item_idx] = copies
        return cls(tuple(counts))

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def num_items(self) -> int:
        """Number of item types the pattern is defined over."""
        return len(self.counts)

    @property
    def num_pieces(self) -> int:
        """Total pieces cut from one stock unit."""
        return sum(self.counts)

    @property
    def is_empty(self) -> bool:
        return not any(self.counts)

    # =========================================================================
    # Methods
    # =========================================================================

    def length_used(self, item_lengths: Sequence[int]) -> int:
        """Total length consumed: sum_i counts[i] * item_lengths[i]."""
        return sum(c * l for c, l in zip(self.counts, item_lengths))

    def waste(self, instance: Instance) -> int:
        """Trim loss of this pattern on the instance's stock unit."""
        return instance.stock_length - self.length_used(instance.item_lengths)

    def is_feasible(self, instance: Instance) -> bool:
        """Check the pattern fits the instance's stock unit."""
        return (
            self.num_items == instance.num_items
            and self.length_used(instance.item_lengths) <= instance.stock_length
        )

    def value(self, prices: Sequence[float]) -> float:
        """Priced value sum_i prices[i] * counts[i]."""
        return sum(w * c for w, c in zip(prices, self.counts))

    def reduced_cost(self, duals: Sequence[float]) -> float:
        """
        Reduced cost of the pattern as a master column.

        Every pattern costs one stock unit, so the reduced cost is
        1 - sum_i duals[i] * counts[i].
        """
        return 1.0 - self.value(duals)

    def cut_offsets(self, item_lengths: Sequence[int]) -> List[int]:
        """
        Positions of the cuts along the stock unit.

        Items are laid out in item-index order, item i repeated counts[i]
        times; the offsets are the cumulative end positions.

        Args:
            item_lengths: Length of each item type

        Returns:
            Cumulative cut positions (empty for the all-zero pattern)
        """
        offsets = []
        position = 0
        for count, length in zip(self.counts, item_lengths):
            for _ in range(count):
                position += length
                offsets.append(position)
        return offsets

    def __iter__(self) -> Iterator[int]:
        return iter(self.counts)

    def __len__(self) -> int:
        return len(self.counts)

    def __getitem__(self, idx: int) -> int:
        return self.counts[idx]

    def __repr__(self) -> str:
        return f"Pattern({list(self.counts)})"


class PatternSet:
    """
    Ordered, append-only collection of distinct patterns.

    The position of a pattern in the set is the identity of its decision
    variable in the master problem. Patterns are checked against the
    instance's stock length when added.

    Example:
        >>> patterns = PatternSet(instance)
        >>> patterns.add(Pattern((3, 0)))
        0
        >>> patterns.add(Pattern((3, 0))) is None
        True
    """

    def __init__(self, instance: Instance, patterns: Optional[Iterable[Pattern]] = None):
        """
        Create a pattern set for an instance.

        Args:
            instance: The instance the patterns are cut for
            patterns: Optional initial patterns (duplicates are skipped)
        """
        self._instance = instance
        self._patterns: List[Pattern] = []
        self._index: Dict[Pattern, int] = {}

        for pattern in patterns or ():
            self.add(pattern)

    @property
    def instance(self) -> Instance:
        return self._instance

    def add(self, pattern: Pattern) -> Optional[int]:
        """
        Append a pattern unless it is already present.

        Args:
            pattern: Pattern to add

        Returns:
            Index of the new pattern, or None if it was a duplicate

        Raises:
            InvalidInstance: If the pattern does not fit the stock unit
        """
        if not pattern.is_feasible(self._instance):
            raise InvalidInstance(
                f"{pattern!r} does not fit stock length {self._instance.stock_length}"
            )
        if pattern in self._index:
            return None
        idx = len(self._patterns)
        self._patterns.append(pattern)
        self._index[pattern] = idx
        return idx

    def index_of(self, pattern: Pattern) -> Optional[int]:
        """Index of a pattern, or None if absent."""
        return self._index.get(pattern)

    def __contains__(self, pattern: object) -> bool:
        return pattern in self._index

    def __len__(self) -> int:
        return len(self._patterns)

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self._patterns)

    def __getitem__(self, idx: int) -> Pattern:
        return self._patterns[idx]

    def to_list(self) -> List[Tuple[int, ...]]:
        """Patterns as plain count tuples."""
        return [p.counts for p in self._patterns]

    def __repr__(self) -> str:
        return f"PatternSet(size={len(self)})"


def initial_patterns(instance: Instance) -> List[Pattern]:
    """
    One homogeneous seed pattern per item type that fits the stock unit.

    Item i contributes stock_length // item_lengths[i] copies of itself.
    Oversized items contribute nothing.

    Args:
        instance: The instance

    Returns:
        Seed patterns in item order
    """
    return [
        Pattern.single_item(instance.num_items, i, instance.max_copies(i))
        for i in range(instance.num_items)
        if instance.item_lengths[i] <= instance.stock_length
    ]
