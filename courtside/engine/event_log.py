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
"""Ordered event log with score tallies and operator corrections."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from courtside.engine.assists import link_assist, relink_assists
from courtside.engine.config import ENGINE_CONFIG
from courtside.engine.events import EventPayload, FoulPayload, GoalPayload, MatchEvent
from courtside.engine.outcome import ActionResult


@dataclass(slots=True)
class ScoreTally:
    """Goal and foul counters derived from the log.

    Parameters
    ----------
    goals_for : int, optional
        Goals credited to our team, opponent own goals included.
    goals_against : int, optional
        Goals conceded.
    fouls_for : int, optional
        Fouls committed by our team.
    fouls_against : int, optional
        Fouls committed by the opponent.
    """

    goals_for: int = 0
    goals_against: int = 0
    fouls_for: int = 0
    fouls_against: int = 0

    def apply(self, event: MatchEvent) -> None:
        """Add one event to the counters.

        Parameters
        ----------
        event : MatchEvent
            Event being appended to the log.
        """
        payload = event.payload
        if isinstance(payload, GoalPayload):
            if payload.is_opponent_goal:
                self.goals_against += 1
            else:
                self.goals_for += 1
        elif isinstance(payload, FoulPayload):
            if payload.foul_team == "for":
                self.fouls_for += 1
            else:
                self.fouls_against += 1

    @classmethod
    def from_events(cls, events: Iterable[MatchEvent]) -> "ScoreTally":
        """Count goals and fouls over a whole log.

        Parameters
        ----------
        events : Iterable[MatchEvent]
            Events to count.

        Returns
        -------
        ScoreTally
            Fresh counters.
        """
        tally = cls()
        for event in events:
            tally.apply(event)
        return tally


class EventLog:
    """Capture-ordered list of match events.

    Appends update the tally incrementally. Every other change (receiver
    attachment, correction, removal) rebuilds it from the full log so stored
    counters can never drift from the events.

    Parameters
    ----------
    periods : Sequence[str]
        Period labels a corrected event may be moved to.
    """

    def __init__(self, periods: Sequence[str]) -> None:
        """Create an empty log.

        Parameters
        ----------
        periods : Sequence[str]
            Period labels a corrected event may be moved to.
        """
        self.periods: Tuple[str, ...] = tuple(periods)
        self._events: List[MatchEvent] = []
        self.tally = ScoreTally()

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[MatchEvent]:
        return iter(list(self._events))

    @property
    def events(self) -> Tuple[MatchEvent, ...]:
        """Return a snapshot of the log."""
        return tuple(self._events)

    def append(self, event: MatchEvent) -> MatchEvent:
        """Add an event at the end of the log.

        Parameters
        ----------
        event : MatchEvent
            Event to store.

        Returns
        -------
        MatchEvent
            The stored event.
        """
        if self.index_of(event.event_id) >= 0:
            raise ValueError(f"Duplicate event id '{event.event_id}'")
        self._events.append(event)
        self.tally.apply(event)
        return event

    def index_of(self, event_id: str) -> int:
        """Return the position of an event.

        Parameters
        ----------
        event_id : str
            Identifier to look up.

        Returns
        -------
        int
            Zero-based index, ``-1`` when absent.
        """
        for idx, event in enumerate(self._events):
            if event.event_id == event_id:
                return idx
        return -1

    def get(self, event_id: str) -> Optional[MatchEvent]:
        """Return an event by id.

        Parameters
        ----------
        event_id : str
            Identifier to look up.

        Returns
        -------
        MatchEvent | None
            Stored event, or ``None``.
        """
        idx = self.index_of(event_id)
        return self._events[idx] if idx >= 0 else None

    def replace(self, event: MatchEvent) -> None:
        """Swap a stored event for an updated copy with the same id.

        Parameters
        ----------
        event : MatchEvent
            Replacement record.
        """
        idx = self.index_of(event.event_id)
        if idx < 0:
            raise KeyError(event.event_id)
        self._events[idx] = event
        self.recount()

    def link_assist(self, goal: MatchEvent) -> Optional[MatchEvent]:
        """Flag the pass that assisted a goal already in the log.

        Parameters
        ----------
        goal : MatchEvent
            Goal event.

        Returns
        -------
        MatchEvent | None
            The flagged pass, or ``None`` when no pass qualified.
        """
        before = list(self._events)
        self._events = link_assist(self._events, goal)
        for old, new in zip(before, self._events):
            if old is not new:
                return new
        return None

    def correct(
        self,
        event_id: str,
        time: Optional[int] = None,
        period: Optional[str] = None,
        payload: Optional[EventPayload] = None,
        player_id: Optional[str] = None,
        player_name: Optional[str] = None,
    ) -> ActionResult:
        """Edit a stored event and rebuild everything derived from the log.

        Parameters
        ----------
        event_id : str
            Event to edit.
        time : int | None, optional
            New time in seconds.
        period : str | None, optional
            New period label.
        payload : EventPayload | None, optional
            New payload; changes type, subtype or team attribution.
        player_id : str | None, optional
            New acting player.
        player_name : str | None, optional
            Display name of the new acting player.

        Returns
        -------
        ActionResult
            Accepted result carrying the replacement event, or a rejection
            when the event is unknown or the new values are out of range.
        """
        current = self.get(event_id)
        if current is None:
            return ActionResult.reject("Event not found")
        if time is not None and not 0 <= time < ENGINE_CONFIG.clock.manual_time_limit:
            return ActionResult.reject("Enter a valid time")
        if period is not None and period not in self.periods:
            return ActionResult.reject(f"Unknown period '{period}'")

        updated = replace(
            current,
            time=current.time if time is None else time,
            period=current.period if period is None else period,
            payload=current.payload if payload is None else payload,
            player_id=current.player_id if player_id is None else player_id,
            player_name=current.player_name if player_name is None else player_name,
        )
        self._events[self.index_of(event_id)] = updated
        self._events = relink_assists(self._events)
        self.recount()
        return ActionResult.accept("Event corrected", self.get(event_id))

    def remove(self, event_id: str) -> ActionResult:
        """Delete an event and rebuild everything derived from the log.

        Parameters
        ----------
        event_id : str
            Event to delete.

        Returns
        -------
        ActionResult
            Accepted result carrying the removed event, or a rejection when it
            is unknown.
        """
        idx = self.index_of(event_id)
        if idx < 0:
            return ActionResult.reject("Event not found")
        removed = self._events.pop(idx)
        self._events = relink_assists(self._events)
        self.recount()
        return ActionResult.accept("Event removed", removed)

    def recount(self) -> ScoreTally:
        """Recompute the tally from the full log.

        Returns
        -------
        ScoreTally
            The fresh counters, also stored on the log.
        """
        self.tally = ScoreTally.from_events(self._events)
        return self.tally

    def fouls_in_period(self, period: str) -> Tuple[int, int]:
        """Count fouls committed by each side in one period.

        Parameters
        ----------
        period : str
            Period label.

        Returns
        -------
        tuple[int, int]
            ``(fouls_for, fouls_against)`` for the period.
        """
        tally = ScoreTally.from_events(e for e in self._events if e.period == period)
        return tally.fouls_for, tally.fouls_against

    def opponent_goals(self) -> List[Tuple[str, int]]:
        """List when the opponent scored.

        Returns
        -------
        List[tuple[str, int]]
            ``(period, time)`` of every conceded goal, in log order.
        """
        return [(e.period, e.time) for e in self._events if e.is_goal_against]
