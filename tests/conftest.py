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
"""Shared fixtures: a ten-player squad, match metadata and capture engines."""

from __future__ import annotations

from typing import Iterator

import pytest

from courtside.engine.capture import CaptureEngine
from courtside.models.match import MatchInfo
from courtside.models.player import Player
from courtside.models.team import Team
from courtside.utils.debug import MatchDebugger

SQUAD = [
    ("p1", "Rafael", 1, "Goleiro"),
    ("p2", "Bruno", 4, "Fixo"),
    ("p3", "Diego", 7, "Ala"),
    ("p4", "Lucas", 10, "Pivô"),
    ("p5", "Gustavo", 11, "Ala"),
    ("p6", "Mateus", 8, "Ala"),
    ("p7", "Felipe", 5, "Fixo"),
    ("p8", "Thiago", 9, "Pivô"),
    ("p9", "Caio", 14, "Ala"),
    ("p10", "Renan", 12, "Goleiro"),
]
STARTING_FIVE = ["p1", "p2", "p3", "p4", "p5"]


class FakeWallClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        """Move time forward.

        Parameters
        ----------
        seconds : float
            Seconds to add.
        """
        self.now += seconds


@pytest.fixture
def team() -> Team:
    """Ten-player squad with two goalkeepers."""
    return Team(
        team_id="t1",
        name="Vinte e Um",
        players=[Player(pid, name, number, position) for pid, name, number, position in SQUAD],
    )


@pytest.fixture
def match() -> MatchInfo:
    """Regulation match metadata."""
    return MatchInfo(match_id="m1", opponent="Rivais FC", date="2025-03-01", competition="Liga")


@pytest.fixture
def debugger(tmp_path) -> Iterator[MatchDebugger]:
    """Telemetry log written under the test's temporary directory."""
    dbg = MatchDebugger(tmp_path / "debug_logs")
    yield dbg
    dbg.close()


@pytest.fixture
def wall() -> FakeWallClock:
    """Controllable wall clock."""
    return FakeWallClock()


@pytest.fixture
def engine(match: MatchInfo, team: Team, debugger: MatchDebugger, wall: FakeWallClock) -> CaptureEngine:
    """Realtime engine before lineup confirmation."""
    return CaptureEngine(match, team, debugger=debugger, now=wall)


@pytest.fixture
def live_engine(engine: CaptureEngine) -> CaptureEngine:
    """Realtime engine with the starting five confirmed and the clock running."""
    assert engine.confirm_lineup(STARTING_FIVE, "us").ok
    assert engine.start_clock().ok
    return engine


@pytest.fixture
def manual_engine(match: MatchInfo, team: Team, debugger: MatchDebugger) -> CaptureEngine:
    """Post-match sheet engine."""
    return CaptureEngine(match, team, mode="manual", debugger=debugger)
