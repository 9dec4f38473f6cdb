"""
Tests for the core data model: Instance, Pattern and PatternSet.
"""

import warnings

import pytest

from opencsp.core.instance import Instance
from opencsp.core.pattern import Pattern, PatternSet, initial_patterns
from opencsp.exceptions import (
    CSPError,
    InfeasibleInstance,
    InvalidInstance,
    OversizedItemWarning,
)


# =============================================================================
# Test Instance
# =============================================================================

class TestInstance:
    """Tests for Instance construction and validation."""

    def test_basic_creation(self):
        inst = Instance(10, [3, 4], [5, 3], name="demo")

        assert inst.stock_length == 10
        assert inst.item_lengths == (3, 4)
        assert inst.item_demands == (5, 3)
        assert inst.num_items == 2
        assert inst.total_demand == 8
        assert inst.name == "demo"

    def test_from_lists(self):
        inst = Instance.from_lists(10, [3, 4], [5, 3])
        assert inst.item_lengths == (3, 4)

    def test_is_immutable(self, small_instance):
        with pytest.raises(AttributeError):
            small_instance.stock_length = 20

    def test_max_copies(self, small_instance):
        assert small_instance.max_copies(0) == 3
        assert small_instance.max_copies(1) == 2

    def test_material_lower_bound(self, small_instance):
        # 5*3 + 3*4 = 27 -> ceil(27/10) = 3
        assert small_instance.material_lower_bound == 3

    def test_integral_floats_accepted(self):
        inst = Instance(10.0, [3.0, 4], [5, 3.0])
        assert inst.stock_length == 10
        assert isinstance(inst.item_lengths[0], int)

    def test_mismatched_sizes(self):
        with pytest.raises(InvalidInstance):
            Instance(10, [3, 4], [5])

    def test_empty_items(self):
        with pytest.raises(InvalidInstance):
            Instance(10, [], [])

    @pytest.mark.parametrize("stock_length", [0, -5])
    def test_non_positive_stock_length(self, stock_length):
        with pytest.raises(InvalidInstance):
            Instance(stock_length, [3], [1])

    def test_negative_length(self):
        with pytest.raises(InvalidInstance):
            Instance(10, [3, -1], [1, 1])

    def test_zero_length(self):
        with pytest.raises(InvalidInstance):
            Instance(10, [3, 0], [1, 1])

    def test_negative_demand(self):
        with pytest.raises(InvalidInstance):
            Instance(10, [3], [-2])

    def test_fractional_length(self):
        with pytest.raises(InvalidInstance):
            Instance(10, [3.5], [1])

    def test_invalid_instance_is_value_error(self):
        with pytest.raises(ValueError):
            Instance(10, [3, 4], [5])

    def test_all_items_oversized(self):
        with pytest.raises(InfeasibleInstance):
            Instance(10, [11, 12], [1, 1])

    def test_infeasible_is_csp_error(self):
        with pytest.raises(CSPError):
            Instance(10, [11], [1])

    def test_some_items_oversized_warns(self):
        with pytest.warns(OversizedItemWarning):
            inst = Instance(10, [3, 11], [1, 1])
        assert inst.oversized_items == (1,)

    def test_no_warning_when_all_fit(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            Instance(10, [10, 3], [1, 1])

    def test_summary(self, small_instance):
        summary = small_instance.summary()
        assert "Stock length: 10" in summary
        assert "Item types: 2" in summary


# =============================================================================
# Test Pattern
# =============================================================================

class TestPattern:
    """Tests for the Pattern value object."""

    def test_value_semantics(self):
        assert Pattern((2, 1)) == Pattern([2, 1])
        assert hash(Pattern((2, 1))) == hash(Pattern((2, 1)))
        assert len({Pattern((2, 1)), Pattern((2, 1)), Pattern((1, 2))}) == 2

    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            Pattern((1, -1))

    def test_length_and_waste(self, small_instance):
        p = Pattern((2, 1))
        assert p.length_used(small_instance.item_lengths) == 10
        assert p.waste(small_instance) == 0
        assert p.is_feasible(small_instance)

    def test_infeasible_pattern(self, small_instance):
        assert not Pattern((2, 2)).is_feasible(small_instance)
        assert not Pattern((1,)).is_feasible(small_instance)

    def test_reduced_cost(self):
        p = Pattern((2, 1))
        assert p.value([0.25, 0.5]) == pytest.approx(1.0)
        assert p.reduced_cost([0.3, 0.5]) == pytest.approx(-0.1)

    def test_cut_offsets(self):
        assert Pattern((2, 1)).cut_offsets((3, 4)) == [3, 6, 10]
        assert Pattern((0, 2)).cut_offsets((3, 4)) == [4, 8]
        assert Pattern((0, 0)).cut_offsets((3, 4)) == []

    def test_single_item(self):
        assert Pattern.single_item(3, 1, 4) == Pattern((0, 4, 0))

    def test_is_empty(self):
        assert Pattern((0, 0)).is_empty
        assert not Pattern((0, 1)).is_empty


# =============================================================================
# Test PatternSet
# =============================================================================

class TestPatternSet:
    """Tests for the append-only PatternSet."""

    def test_add_returns_index(self, small_instance):
        patterns = PatternSet(small_instance)
        assert patterns.add(Pattern((3, 0))) == 0
        assert patterns.add(Pattern((0, 2))) == 1
        assert len(patterns) == 2
        assert patterns[1] == Pattern((0, 2))

    def test_duplicate_rejected(self, small_instance):
        patterns = PatternSet(small_instance)
        patterns.add(Pattern((3, 0)))
        assert patterns.add(Pattern((3, 0))) is None
        assert len(patterns) == 1
        assert Pattern((3, 0)) in patterns
        assert patterns.index_of(Pattern((3, 0))) == 0

    def test_infeasible_rejected(self, small_instance):
        patterns = PatternSet(small_instance)
        with pytest.raises(InvalidInstance):
            patterns.add(Pattern((4, 0)))

    def test_initial_patterns_argument(self, small_instance):
        patterns = PatternSet(small_instance, [Pattern((3, 0)), Pattern((3, 0))])
        assert patterns.to_list() == [(3, 0)]

    def test_iteration_order(self, small_instance):
        seq = [Pattern((3, 0)), Pattern((0, 2)), Pattern((2, 1))]
        patterns = PatternSet(small_instance, seq)
        assert list(patterns) == seq


class TestInitialPatterns:
    """Tests for homogeneous seed patterns."""

    def test_one_per_item(self, small_instance):
        assert initial_patterns(small_instance) == [Pattern((3, 0)), Pattern((0, 2))]

    def test_single_item(self, single_item_instance):
        assert initial_patterns(single_item_instance) == [Pattern((2,))]

    def test_oversized_item_skipped(self):
        with pytest.warns(OversizedItemWarning):
            inst = Instance(10, [3, 11, 5], [1, 0, 1])
        assert initial_patterns(inst) == [Pattern((3, 0, 0)), Pattern((0, 0, 2))]
