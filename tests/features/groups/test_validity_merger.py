"""Tests for validity window merging."""

import pytest

from neo_membership.features.groups.entities.membership import ValidityWindow
from neo_membership.features.groups.services.validity_merger import ValidityMerger


class TestValidityMerger:
    """Test merging of windows reached through several paths."""

    @pytest.fixture
    def merger(self):
        return ValidityMerger()

    def test_single_window_unchanged(self, merger):
        window = ValidityWindow(1000, 3000)
        assert merger.merge([window]) == window

    def test_earliest_from_and_latest_to(self, merger):
        merged = merger.merge([ValidityWindow(1000, 2000), ValidityWindow(500, 1500)])

        assert merged == ValidityWindow(500, 2000)

    def test_open_ended_wins_over_any_end(self, merger):
        merged = merger.merge([
            ValidityWindow(2000, 3000),
            ValidityWindow(1000, None),
            ValidityWindow(1500, 9000),
        ])

        assert merged.time_from == 1000
        assert merged.time_to is None

    def test_accepts_generator(self, merger):
        merged = merger.merge(ValidityWindow(t, t + 10) for t in (30, 10, 20))
        assert merged == ValidityWindow(10, 40)

    def test_empty_input_rejected(self, merger):
        with pytest.raises(ValueError):
            merger.merge([])

    @pytest.mark.parametrize("window,active", [
        (ValidityWindow(1000, None), True),
        (ValidityWindow(2500, 2500), True),
        (ValidityWindow(2501, None), False),
        (ValidityWindow(1000, 2499), False),
        (ValidityWindow(2000, 3000), True),
    ])
    def test_is_active(self, merger, window, active):
        assert merger.is_active(window, 2500) is active
        assert window.is_active(2500) is active


class TestNextTransition:
    """Test the time at which a set of windows next changes state."""

    @pytest.fixture
    def merger(self):
        return ValidityMerger()

    def test_end_boundary_is_one_past_time_to(self, merger):
        assert merger.next_transition([ValidityWindow(1000, 3000)], 2500) == 3001

    def test_end_reached_at_exactly_now(self, merger):
        assert merger.next_transition([ValidityWindow(1000, 2500)], 2500) == 2501

    def test_future_start(self, merger):
        assert merger.next_transition([ValidityWindow(3000, None)], 2500) == 3000

    def test_earliest_of_several(self, merger):
        windows = [
            ValidityWindow(1000, 9000),
            ValidityWindow(4000, 5000),
            ValidityWindow(1000, 3500),
        ]

        assert merger.next_transition(windows, 2500) == 3501

    def test_settled_windows_have_none(self, merger):
        windows = [ValidityWindow(1000, None), ValidityWindow(100, 200)]

        assert merger.next_transition(windows, 2500) is None
        assert merger.next_transition([], 2500) is None
