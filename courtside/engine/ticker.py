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
"""Wall-clock driver for the realtime match clock."""

from __future__ import annotations

import time
from typing import Callable, Optional

from courtside.engine.capture import CaptureEngine
from courtside.engine.config import ENGINE_CONFIG


class LiveClockRunner:
    """Feed whole-second ticks to a capture engine from a monotonic clock.

    The runner keeps an anchor at the wall-clock instant the last counted
    second ended. Fractions of a second carry over to the next pump. The
    anchor is dropped whenever the match clock was started or paused since
    the previous pump and whenever :meth:`run` begins, so time spent paused
    is never counted.

    Parameters
    ----------
    engine : CaptureEngine
        Session whose clock is driven.
    interval : float | None, optional
        Wall-clock seconds per match second; defaults to configuration.
    speed : float, optional
        Multiplier applied to elapsed wall-clock time (``2.0`` runs twice as
        fast).
    now : Callable[[], float], optional
        Monotonic time source.
    sleep : Callable[[float], None], optional
        Sleep function used by :meth:`run`.
    """

    def __init__(
        self,
        engine: CaptureEngine,
        interval: Optional[float] = None,
        speed: float = 1.0,
        now: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Create an idle runner.

        Parameters
        ----------
        engine : CaptureEngine
            Session whose clock is driven.
        interval : float | None
            Wall-clock seconds per match second.
        speed : float
            Elapsed-time multiplier.
        now : Callable[[], float]
            Monotonic time source.
        sleep : Callable[[float], None]
            Sleep function used by :meth:`run`.
        """
        if speed <= 0:
            raise ValueError("speed must be positive")
        self.engine = engine
        self.interval = interval or ENGINE_CONFIG.clock.tick_interval
        self.speed = speed
        self._now = now
        self._sleep = sleep
        self._anchor: Optional[float] = None
        self._generation: Optional[int] = None
        self.is_active = False

    def pump(self, now: Optional[float] = None) -> int:
        """Apply the ticks owed since the previous pump.

        Parameters
        ----------
        now : float | None, optional
            Current monotonic time; read from the time source when omitted.

        Returns
        -------
        int
            Match seconds applied by this call.
        """
        now = self._now() if now is None else now
        self.engine.poll(now)

        generation = self.engine.clock.run_generation
        if generation != self._generation:
            # Started or paused since the previous pump.
            self._generation = generation
            self._anchor = None
        if not self.engine.is_running:
            self._anchor = None
            return 0
        if self._anchor is None:
            self._anchor = now
            return 0

        step = self.interval / self.speed
        owed = int((now - self._anchor) // step)
        if owed <= 0:
            return 0
        self._anchor += owed * step
        applied = self.engine.tick(owed)
        if not self.engine.is_running:
            self._anchor = None
        return applied

    def stop(self) -> None:
        """Stop :meth:`run` and forget the anchor."""
        self.is_active = False
        self._anchor = None

    def run(self, duration: Optional[float] = None) -> int:
        """Pump until stopped, the session ends, or ``duration`` elapses.

        Parameters
        ----------
        duration : float | None, optional
            Wall-clock seconds to run for; unbounded when omitted.

        Returns
        -------
        int
            Match seconds applied while running.
        """
        self.is_active = True
        self._anchor = None
        started = self._now()
        total = 0

        while self.is_active and not self.engine.is_ended:
            current = self._now()
            total += self.pump(current)
            if duration is not None and current - started >= duration:
                break

            # Small sleep to prevent excessive CPU usage
            self._sleep(ENGINE_CONFIG.clock.frame_sleep)

        self.is_active = False
        return total
