"""
Core module - problem data and cutting patterns.

This module provides:
- Instance: Immutable, validated cutting stock data
- Pattern: One stock unit's cutting pattern
- PatternSet: Append-only set of distinct patterns (master columns)
- initial_patterns: Homogeneous seed patterns
"""

from opencsp.core.instance import Instance
from opencsp.core.pattern import Pattern, PatternSet, initial_patterns

__all__ = [
    "Instance",
    "Pattern",
    "PatternSet",
    "initial_patterns",
]
