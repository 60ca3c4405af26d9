"""Unit tests for the difficulty scaling policy."""

import pytest

from mathwiz.engines.difficulty import DIFFICULTY_CAP, difficulty_multiplier, sets_completed_for
from mathwiz.engines.errors import InvalidArgument


class TestDifficultyMultiplier:
    def test_known_points(self):
        assert difficulty_multiplier(0) == 1.0
        assert difficulty_multiplier(1) == 1.15
        assert difficulty_multiplier(4) == 1.6
        assert difficulty_multiplier(10) == 2.5
        assert difficulty_multiplier(100) == 2.5

    def test_monotone_and_capped(self):
        for n in range(200):
            assert difficulty_multiplier(n) <= difficulty_multiplier(n + 1) <= DIFFICULTY_CAP

    def test_negative_rejected(self):
        with pytest.raises(InvalidArgument):
            difficulty_multiplier(-1)

    @pytest.mark.parametrize("value", [2.5, 3.0, "4", None, True])
    def test_non_integer_rejected(self, value):
        with pytest.raises(InvalidArgument):
            difficulty_multiplier(value)


class TestSetsCompleted:
    def test_whole_sets_only(self):
        assert sets_completed_for(0) == 0
        assert sets_completed_for(9) == 0
        assert sets_completed_for(10) == 1
        assert sets_completed_for(57) == 5

    def test_custom_set_size(self):
        assert sets_completed_for(12, set_size=4) == 3

    @pytest.mark.parametrize("total,size", [(-1, 10), (10, 0)])
    def test_invalid_arguments(self, total, size):
        with pytest.raises(InvalidArgument):
            sets_completed_for(total, set_size=size)
