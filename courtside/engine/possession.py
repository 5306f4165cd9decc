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
"""Two-state ball possession tracker."""

from __future__ import annotations

from typing import Literal

PossessionState = Literal["with", "without"]


def opposite_possession(state: PossessionState) -> PossessionState:
    """Return the complement of a possession state.

    Parameters
    ----------
    state : {"with", "without"}
        Possession state to flip.

    Returns
    -------
    {"with", "without"}
        The other state.
    """
    return "without" if state == "with" else "with"


class PossessionTracker:
    """Split elapsed clock seconds between having and not having the ball.

    Parameters
    ----------
    state : {"with", "without"}, optional
        Initial possession state.
    """

    def __init__(self, state: PossessionState = "with") -> None:
        """Create a tracker with empty counters.

        Parameters
        ----------
        state : {"with", "without"}
            Initial possession state.
        """
        self.state: PossessionState = state
        self.seconds_with = 0
        self.seconds_without = 0

    @property
    def total_seconds(self) -> int:
        """Return the seconds accrued into either counter."""
        return self.seconds_with + self.seconds_without

    def accrue(self, seconds: int) -> None:
        """Add elapsed clock seconds to the active counter.

        Parameters
        ----------
        seconds : int
            Whole seconds elapsed on the running clock.
        """
        if seconds <= 0:
            return
        if self.state == "with":
            self.seconds_with += seconds
        else:
            self.seconds_without += seconds

    def set_state(self, state: PossessionState) -> bool:
        """Switch the possession state.

        Parameters
        ----------
        state : {"with", "without"}
            New possession state.

        Returns
        -------
        bool
            ``True`` when the state changed.
        """
        if state not in ("with", "without"):
            raise ValueError(f"Unknown possession state '{state}'")
        changed = state != self.state
        self.state = state
        return changed

    def flip(self) -> PossessionState:
        """Toggle the possession state.

        Returns
        -------
        {"with", "without"}
            State after the toggle.
        """
        self.state = opposite_possession(self.state)
        return self.state
