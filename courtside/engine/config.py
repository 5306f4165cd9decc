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
"""Central configuration for capture engine rules and timings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(slots=True)
class ClockConfig:
    """Timing rules for the realtime match clock and manual time entry.

    Parameters
    ----------
    period_length : int, default=1200
        Length of a regulation half in seconds (20 minutes).
    extra_time_length : int, default=300
        Length of each extra-time half in seconds.
    manual_time_limit : int, default=3600
        Exclusive upper bound for operator supplied event times.
    tick_interval : float, default=1.0
        Wall-clock seconds between realtime clock ticks.
    frame_sleep : float, default=0.05
        Delay between pump iterations when the runner drives the clock.
    """

    period_length: int = 20 * 60
    extra_time_length: int = 5 * 60
    manual_time_limit: int = 60 * 60
    tick_interval: float = 1.0
    frame_sleep: float = 0.05

    def __post_init__(self) -> None:
        """Reject non-positive period lengths."""
        if self.period_length <= 0 or self.extra_time_length <= 0:
            raise ValueError("Period lengths must be positive")


@dataclass(slots=True)
class DisciplineConfig:
    """Card and expulsion rules.

    Parameters
    ----------
    expulsion_wait : int, default=120
        Seconds a team plays short-handed before a replacement may enter.
    yellows_for_expulsion : int, default=2
        Number of yellow cards that amount to a sending off.
    """

    expulsion_wait: int = 120
    yellows_for_expulsion: int = 2


@dataclass(slots=True)
class CaptureConfig:
    """Rules that govern the operator capture flows.

    Parameters
    ----------
    lineup_size : int, default=5
        Number of players on court, goalkeeper included.
    max_goalkeepers : int, default=1
        Maximum goalkeeper-capable players allowed in a starting lineup.
    assist_window : int, default=5
        Trailing seconds in which a correct pass counts as an assist.
    free_kick_foul_threshold : int, default=5
        Fouls by one side within a period that unlock the free kick action.
    auto_resume_delay : float, default=1.0
        Wall-clock delay before the clock resumes after a missed set piece.
    scored_goal_methods : Tuple[str, ...]
        Vocabulary offered when our team scores.
    conceded_goal_methods : Tuple[str, ...]
        Vocabulary offered when the opponent scores.
    """

    lineup_size: int = 5
    max_goalkeepers: int = 1
    assist_window: int = 5
    free_kick_foul_threshold: int = 5
    auto_resume_delay: float = 1.0
    scored_goal_methods: Tuple[str, ...] = (
        "Ataque",
        "Contra-ataque",
        "Bola parada",
        "Escanteio",
        "Falta",
        "Lateral",
        "Pênalti",
        "Tiro livre",
        "Goleiro-linha",
        "Roubada de bola 1ª linha",
    )
    conceded_goal_methods: Tuple[str, ...] = (
        "Ataque",
        "Contra-ataque",
        "Bola parada",
        "Escanteio",
        "Falta",
        "Lateral",
        "Pênalti",
        "Tiro livre",
        "Goleiro-linha adversário",
        "Erro de saída de bola",
    )


@dataclass(slots=True)
class StatsConfig:
    """Reporting buckets used by the stats aggregator.

    Parameters
    ----------
    goal_bucket_size : int, default=300
        Width of each goal-time bucket in seconds.
    goal_bucket_horizon : int, default=3000
        Last bucket boundary in seconds (50:00).
    period_offset : int, default=1200
        Seconds added per elapsed period when converting to absolute match time.
    """

    goal_bucket_size: int = 5 * 60
    goal_bucket_horizon: int = 50 * 60
    period_offset: int = 20 * 60


@dataclass(slots=True)
class EngineConfig:
    """Top-level container for all capture engine configuration blocks.

    Parameters
    ----------
    clock : ClockConfig, default=ClockConfig()
        Clock and manual time settings.
    discipline : DisciplineConfig, default=DisciplineConfig()
        Card and expulsion rules.
    capture : CaptureConfig, default=CaptureConfig()
        Operator flow rules.
    stats : StatsConfig, default=StatsConfig()
        Aggregation buckets.
    """

    clock: ClockConfig = field(default_factory=ClockConfig)
    discipline: DisciplineConfig = field(default_factory=DisciplineConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)


ENGINE_CONFIG = EngineConfig()
"""Singleton-style access to the engine configuration."""
