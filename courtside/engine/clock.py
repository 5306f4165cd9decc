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
"""Match clock owning elapsed time per period and period transitions."""

from __future__ import annotations

from typing import Literal, Optional, Sequence, Tuple

from courtside.engine.config import ENGINE_CONFIG
from courtside.models.match import EXTRA_TIME_PERIODS, REGULATION_PERIODS

ClockStatus = Literal["stopped", "running", "paused", "period_ended", "match_ended"]


class MatchClock:
    """Stopwatch for a futsal match played over a fixed sequence of periods.

    The clock only advances while running and never passes the length of the
    current period: reaching it moves the clock to ``period_ended``. Starting
    it again from there opens the next period at zero. After the final period
    only :meth:`close_match` moves it on, to ``match_ended``.

    Parameters
    ----------
    periods : Sequence[str], optional
        Ordered period labels. Defaults to the two regulation halves.
    period_length : int | None, optional
        Regulation half length in seconds; defaults to configuration.
    extra_time_length : int | None, optional
        Extra-time half length in seconds; defaults to configuration.
    """

    def __init__(
        self,
        periods: Sequence[str] = REGULATION_PERIODS,
        period_length: Optional[int] = None,
        extra_time_length: Optional[int] = None,
    ) -> None:
        """Create a stopped clock at the start of the first period.

        Parameters
        ----------
        periods : Sequence[str]
            Ordered period labels.
        period_length : int | None
            Regulation half length in seconds.
        extra_time_length : int | None
            Extra-time half length in seconds.
        """
        if not periods:
            raise ValueError("A match needs at least one period")
        self.periods: Tuple[str, ...] = tuple(periods)
        self.period_length = period_length or ENGINE_CONFIG.clock.period_length
        self.extra_time_length = extra_time_length or ENGINE_CONFIG.clock.extra_time_length
        self.period_index = 0
        self.seconds = 0
        self.status: ClockStatus = "stopped"
        # Bumped on every start and pause so wall-clock drivers can re-anchor.
        self.run_generation = 0

    @property
    def period(self) -> str:
        """Return the label of the current period."""
        return self.periods[self.period_index]

    @property
    def is_running(self) -> bool:
        """Return ``True`` while the clock advances on ticks."""
        return self.status == "running"

    @property
    def is_final_period(self) -> bool:
        """Return ``True`` when no period follows the current one."""
        return self.period_index == len(self.periods) - 1

    @property
    def current_period_length(self) -> int:
        """Return the length in seconds of the current period."""
        if self.period in EXTRA_TIME_PERIODS:
            return self.extra_time_length
        return self.period_length

    @property
    def remaining(self) -> int:
        """Return the seconds left in the current period."""
        return max(0, self.current_period_length - self.seconds)

    def start(self) -> bool:
        """Start or resume the clock, opening the next period when needed.

        Returns
        -------
        bool
            ``True`` when the clock is running after the call.
        """
        if self.status == "running":
            return True
        if self.status == "match_ended":
            return False
        if self.status == "period_ended":
            if self.is_final_period:
                return False
            self.period_index += 1
            self.seconds = 0
        self.status = "running"
        self.run_generation += 1
        return True

    def pause(self) -> bool:
        """Pause a running clock.

        Returns
        -------
        bool
            ``True`` when the clock was running and is now paused.
        """
        if self.status != "running":
            return False
        self.status = "paused"
        self.run_generation += 1
        return True

    def tick(self, seconds: int = 1) -> int:
        """Advance a running clock.

        Parameters
        ----------
        seconds : int
            Whole seconds to add.

        Returns
        -------
        int
            Seconds actually applied. Zero when the clock is not running;
            less than ``seconds`` when the period ends in between.
        """
        if self.status != "running" or seconds <= 0:
            return 0
        applied = min(seconds, self.remaining)
        self.seconds += applied
        if self.seconds >= self.current_period_length:
            self._close_period()
        return applied

    def end_period(self) -> bool:
        """End the current period once its full length has been played.

        Returns
        -------
        bool
            ``True`` when the period is over after the call. Refused while the
            period is still short of its length.
        """
        if self.status in ("period_ended", "match_ended"):
            return True
        if self.seconds < self.current_period_length:
            return False
        self._close_period()
        return True

    def close_match(self) -> bool:
        """Move from the end of the final period to ``match_ended``.

        Returns
        -------
        bool
            ``True`` when the match is over after the call.
        """
        if self.status == "match_ended":
            return True
        if self.status != "period_ended" or not self.is_final_period:
            return False
        self.status = "match_ended"
        return True

    def finish(self) -> None:
        """Force the clock into its terminal state."""
        self.status = "match_ended"

    def period_index_of(self, period: str) -> int:
        """Return the position of a period label in the match order.

        Parameters
        ----------
        period : str
            Period label such as ``"2T"``.

        Returns
        -------
        int
            Zero-based index, or ``-1`` when the label is not part of the match.
        """
        try:
            return self.periods.index(period)
        except ValueError:
            return -1

    def _close_period(self) -> None:
        """Stop the clock at the end of the period."""
        self.status = "period_ended"
