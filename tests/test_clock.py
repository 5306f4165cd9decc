# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Tests for the match clock and the possession tracker."""

import pytest

from courtside.engine.clock import MatchClock
from courtside.engine.possession import PossessionTracker, opposite_possession
from courtside.models.match import EXTRA_TIME_PERIODS, REGULATION_PERIODS


class TestMatchClock:
    """Tests for MatchClock state transitions."""

    def test_starts_stopped_in_first_period(self) -> None:
        """A new clock sits at 00:00 of the first half."""
        clock = MatchClock()
        assert clock.status == "stopped"
        assert clock.period == "1T"
        assert clock.seconds == 0
        assert clock.remaining == 1200

    def test_ticks_only_while_running(self) -> None:
        """Ticks are ignored unless the clock runs."""
        clock = MatchClock()
        assert clock.tick(5) == 0
        assert clock.start()
        assert clock.tick(5) == 5
        assert clock.pause()
        assert clock.tick(5) == 0
        assert clock.seconds == 5
        assert clock.status == "paused"

    def test_run_generation_counts_starts_and_pauses(self) -> None:
        """Every start and pause bumps the generation; redundant calls do not."""
        clock = MatchClock()
        assert clock.run_generation == 0
        clock.start()
        clock.start()
        assert clock.run_generation == 1
        clock.pause()
        clock.pause()
        assert clock.run_generation == 2
        clock.start()
        assert clock.run_generation == 3

    def test_pause_requires_running_clock(self) -> None:
        """Pausing a stopped clock is refused."""
        clock = MatchClock()
        assert not clock.pause()

    def test_tick_clamps_at_period_length(self) -> None:
        """The clock never passes the period length and then ends the period."""
        clock = MatchClock()
        clock.start()
        assert clock.tick(1190) == 1190
        assert clock.tick(30) == 10
        assert clock.seconds == 1200
        assert clock.status == "period_ended"

    def test_end_period_refused_before_full_length(self) -> None:
        """Periods cannot be ended early."""
        clock = MatchClock()
        clock.start()
        clock.tick(600)
        assert not clock.end_period()
        assert clock.status == "running"

    def test_start_opens_next_period(self) -> None:
        """Starting after a period ended opens the next one at zero."""
        clock = MatchClock()
        clock.start()
        clock.tick(1200)
        assert clock.end_period()
        assert clock.start()
        assert clock.period == "2T"
        assert clock.period_index == 1
        assert clock.seconds == 0
        assert clock.is_final_period

    def test_final_period_closes_match(self) -> None:
        """After the last period only close_match moves the clock on."""
        clock = MatchClock(REGULATION_PERIODS)
        clock.start()
        clock.tick(1200)
        clock.start()
        clock.tick(1200)
        assert clock.status == "period_ended"
        assert not clock.start()
        assert clock.close_match()
        assert clock.status == "match_ended"
        assert not clock.start()
        assert clock.tick(1) == 0

    def test_close_match_refused_mid_match(self) -> None:
        """The match cannot be closed while periods remain."""
        clock = MatchClock()
        clock.start()
        clock.tick(1200)
        assert not clock.close_match()

    def test_extra_time_periods_are_shorter(self) -> None:
        """Extra-time halves use their own length."""
        clock = MatchClock(REGULATION_PERIODS + EXTRA_TIME_PERIODS)
        for _ in range(2):
            clock.start()
            clock.tick(1200)
        clock.start()
        assert clock.period == "1P"
        assert clock.current_period_length == 300
        assert clock.tick(400) == 300
        assert clock.status == "period_ended"

    def test_period_index_of(self) -> None:
        """Period labels map to their position in the match."""
        clock = MatchClock(REGULATION_PERIODS + EXTRA_TIME_PERIODS)
        assert clock.period_index_of("1T") == 0
        assert clock.period_index_of("2P") == 3
        assert clock.period_index_of("9X") == -1

    def test_requires_periods(self) -> None:
        """A clock without periods is refused."""
        with pytest.raises(ValueError):
            MatchClock(())

    def test_finish_forces_terminal_state(self) -> None:
        """finish ends the match from any state."""
        clock = MatchClock()
        clock.start()
        clock.finish()
        assert clock.status == "match_ended"


class TestPossessionTracker:
    """Tests for possession accrual."""

    def test_accrues_into_active_counter(self) -> None:
        """Elapsed seconds go to the current state only."""
        tracker = PossessionTracker()
        tracker.accrue(10)
        tracker.flip()
        tracker.accrue(4)
        assert tracker.seconds_with == 10
        assert tracker.seconds_without == 4
        assert tracker.total_seconds == 14

    def test_non_positive_accrual_ignored(self) -> None:
        """Zero or negative seconds do nothing."""
        tracker = PossessionTracker("without")
        tracker.accrue(0)
        tracker.accrue(-3)
        assert tracker.total_seconds == 0

    def test_set_state_reports_change(self) -> None:
        """set_state tells whether the state actually changed."""
        tracker = PossessionTracker()
        assert not tracker.set_state("with")
        assert tracker.set_state("without")
        assert tracker.state == "without"

    def test_set_state_rejects_unknown_state(self) -> None:
        """Only with/without are valid states."""
        tracker = PossessionTracker()
        with pytest.raises(ValueError):
            tracker.set_state("maybe")

    def test_opposite_possession(self) -> None:
        """The complement of each state is the other one."""
        assert opposite_possession("with") == "without"
        assert opposite_possession("without") == "with"
