"""
Random cutting stock instance generation.

Item lengths are drawn uniformly from [min_item_length,
min(max_item_length, stock_length)], so every generated item fits the
stock unit, and demands uniformly from [min_demand, max_demand].

Usage:
    >>> from opencsp.generator import generate_instance
    >>> inst = generate_instance(100, 5, 10, 40, 1, 20, seed=7)
    >>> inst.num_items
    5
"""

import logging
import random
import warnings
from typing import Optional

from opencsp.core.instance import Instance
from opencsp.exceptions import InfeasibleInstance, InvalidInstance, OversizedItemWarning

logger = logging.getLogger(__name__)


def generate_instance(
    stock_length: int,
    num_items: int,
    min_item_length: int,
    max_item_length: int,
    min_demand: int,
    max_demand: int,
    seed: Optional[int] = None,
    name: Optional[str] = None,
) -> Instance:
    """
    Generate a random instance.

    Args:
        stock_length: Length of the stock unit
        num_items: Number of item types
        min_item_length: Smallest item length
        max_item_length: Largest item length (capped at stock_length)
        min_demand: Smallest demand
        max_demand: Largest demand
        seed: Random seed for reproducibility
        name: Optional instance name

    Returns:
        Generated Instance

    Raises:
        InvalidInstance: On empty or inverted intervals
        InfeasibleInstance: If min_item_length exceeds stock_length
    """
    if stock_length <= 0:
        raise InvalidInstance(f"stock_length must be positive, got {stock_length}")
    if num_items <= 0:
        raise InvalidInstance(f"num_items must be positive, got {num_items}")
    if min_item_length <= 0:
        raise InvalidInstance(f"min_item_length must be positive, got {min_item_length}")
    if min_item_length > max_item_length:
        raise InvalidInstance(
            f"Item length interval is empty: [{min_item_length}, {max_item_length}]"
        )
    if min_demand < 0:
        raise InvalidInstance(f"min_demand must be non-negative, got {min_demand}")
    if min_demand > max_demand:
        raise InvalidInstance(f"Demand interval is empty: [{min_demand}, {max_demand}]")

    if min_item_length > stock_length:
        raise InfeasibleInstance(
            f"All item lengths exceed the stock length {stock_length}"
        )
    if max_item_length > stock_length:
        message = (
            f"max_item_length {max_item_length} exceeds the stock length "
            f"{stock_length}; lengths are capped at {stock_length}"
        )
        logger.warning(message)
        warnings.warn(message, OversizedItemWarning, stacklevel=2)

    rng = random.Random(seed)
    upper = min(max_item_length, stock_length)
    lengths = [rng.randint(min_item_length, upper) for _ in range(num_items)]
    demands = [rng.randint(min_demand, max_demand) for _ in range(num_items)]

    logger.debug(
        "Generated instance: L=%d n=%d lengths in [%d, %d] demands in [%d, %d] seed=%s",
        stock_length, num_items, min_item_length, upper, min_demand, max_demand, seed,
    )

    return Instance(stock_length, tuple(lengths), tuple(demands), name=name)
