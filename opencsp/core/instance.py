"""
Instance module - immutable cutting stock problem data.

An Instance describes one cutting-stock problem: a stock unit of fixed
length and n item types, each with a required length and demand. Item
order is meaningful: index i is the row of item i in the master problem
and the position of item i in every Pattern.

Validation happens once, at construction:
- malformed data raises InvalidInstance
- items longer than the stock unit raise an OversizedItemWarning
- if every item is longer than the stock unit, InfeasibleInstance is raised
"""

import logging
import math
import numbers
import warnings
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from opencsp.exceptions import InfeasibleInstance, InvalidInstance, OversizedItemWarning

logger = logging.getLogger(__name__)


def _as_int(value, what: str) -> int:
    """Convert an integral number to int, rejecting floats with a fraction."""
    if isinstance(value, bool) or not isinstance(value, numbers.Number):
        raise InvalidInstance(f"{what} must be an integer, got {value!r}")
    if isinstance(value, numbers.Integral):
        return int(value)
    if float(value) != math.floor(float(value)):
        raise InvalidInstance(f"{what} must be an integer, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class Instance:
    """
    A one-dimensional cutting stock instance.

    Attributes:
        stock_length: Length of one stock unit (roll/bar), > 0
        item_lengths: Length of each item type
        item_demands: Required number of pieces of each item type
        name: Optional instance name

    Example:
        >>> inst = Instance(10, [3, 4], [5, 3])
        >>> inst.num_items
        2
        >>> inst.max_copies(0)
        3
    """
    stock_length: int
    item_lengths: Tuple[int, ...]
    item_demands: Tuple[int, ...]
    name: Optional[str] = None

    def __post_init__(self):
        lengths = tuple(self.item_lengths)
        demands = tuple(self.item_demands)

        if len(lengths) != len(demands):
            raise InvalidInstance(
                f"item_lengths and item_demands must have same length "
                f"({len(lengths)} != {len(demands)})"
            )
        if len(lengths) == 0:
            raise InvalidInstance("Instance must have at least one item type")

        stock_length = _as_int(self.stock_length, "stock_length")
        if stock_length <= 0:
            raise InvalidInstance(f"stock_length must be positive, got {stock_length}")

        lengths = tuple(_as_int(v, f"item_lengths[{i}]") for i, v in enumerate(lengths))
        demands = tuple(_as_int(v, f"item_demands[{i}]") for i, v in enumerate(demands))

        for i, length in enumerate(lengths):
            if length < 0:
                raise InvalidInstance(f"item_lengths[{i}] is negative ({length})")
            if length == 0:
                raise InvalidInstance(
                    f"item_lengths[{i}] is zero; a pattern could hold unboundedly many copies"
                )
        for i, demand in enumerate(demands):
            if demand < 0:
                raise InvalidInstance(f"item_demands[{i}] is negative ({demand})")

        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, 'stock_length', stock_length)
        object.__setattr__(self, 'item_lengths', lengths)
        object.__setattr__(self, 'item_demands', demands)

        oversized = self.oversized_items
        if len(oversized) == len(lengths):
            raise InfeasibleInstance(
                f"All item lengths exceed the stock length {stock_length}"
            )
        if oversized:
            message = (
                f"Items {list(oversized)} exceed the stock length {stock_length} "
                f"and can never be cut"
            )
            logger.warning(message)
            warnings.warn(message, OversizedItemWarning, stacklevel=3)

    # =========================================================================
    # Constructors
    # =========================================================================

    @classmethod
    def from_lists(
        cls,
        stock_length: int,
        item_lengths: Sequence[int],
        item_demands: Sequence[int],
        name: Optional[str] = None,
    ) -> 'Instance':
        """
        Build an Instance from raw length and demand sequences.

        Args:
            stock_length: Length of the stock unit
            item_lengths: Length of each item type
            item_demands: Demand of each item type
            name: Optional instance name

        Returns:
            Validated Instance

        Raises:
            InvalidInstance: If the data is malformed
            InfeasibleInstance: If no item fits in the stock unit
        """
        return cls(stock_length, tuple(item_lengths), tuple(item_demands), name)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def num_items(self) -> int:
        """Number of item types."""
        return len(self.item_lengths)

    @property
    def oversized_items(self) -> Tuple[int, ...]:
        """Indices of items longer than the stock unit."""
        return tuple(
            i for i, length in enumerate(self.item_lengths)
            if length > self.stock_length
        )

    @property
    def total_demand(self) -> int:
        """Total number of pieces demanded."""
        return sum(self.item_demands)

    @property
    def material_lower_bound(self) -> int:
        """
        Trivial lower bound on the number of stock units.

        ceil(total demanded length / stock length)
        """
        total = sum(l * d for l, d in zip(self.item_lengths, self.item_demands))
        return -(-total // self.stock_length)

    def max_copies(self, item_idx: int) -> int:
        """Maximum copies of an item that fit in one stock unit."""
        return self.stock_length // self.item_lengths[item_idx]

    def summary(self) -> str:
        """Return a human-readable summary."""
        lines = [
            f"Instance: {self.name or '<unnamed>'}",
            f"  Stock length: {self.stock_length}",
            f"  Item types: {self.num_items}",
            f"  Total demand: {self.total_demand}",
            f"  Material lower bound: {self.material_lower_bound}",
        ]
        if self.oversized_items:
            lines.append(f"  Oversized items: {list(self.oversized_items)}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        name = f"{self.name!r}, " if self.name else ""
        return f"Instance({name}L={self.stock_length}, n={self.num_items})"
