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
"""Assist linking between goals and the correct pass that set them up.

A goal scored by one of our players marks the most recent correct pass to
that player, in the same period and within the trailing assist window, as an
assist. Linking never mutates events: the matched pass is replaced by a copy
carrying ``is_assist=True``. Running it again over the same log yields the
same log.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Sequence

from courtside.engine.config import ENGINE_CONFIG
from courtside.engine.events import GoalPayload, MatchEvent, PassPayload


def is_assistable_goal(event: MatchEvent) -> bool:
    """Return whether a goal can credit an assist.

    Parameters
    ----------
    event : MatchEvent
        Candidate goal event.

    Returns
    -------
    bool
        ``True`` for regular goals scored by one of our players.
    """
    payload = event.payload
    return (
        isinstance(payload, GoalPayload)
        and not payload.is_opponent_goal
        and payload.result == "normal"
        and event.player_id is not None
    )


def find_assist(events: Sequence[MatchEvent], goal: MatchEvent, window: Optional[int] = None) -> Optional[int]:
    """Locate the pass that assisted ``goal``.

    Parameters
    ----------
    events : Sequence[MatchEvent]
        Event log in capture order.
    goal : MatchEvent
        Goal event, logged or about to be logged.
    window : int | None, optional
        Trailing window in seconds; defaults to configuration.

    Returns
    -------
    int | None
        Index of the matching pass in ``events``, or ``None``.
    """
    if not is_assistable_goal(goal):
        return None
    window = ENGINE_CONFIG.capture.assist_window if window is None else window

    # Only passes logged before the goal are eligible.
    stop = len(events)
    for idx, event in enumerate(events):
        if event.event_id == goal.event_id:
            stop = idx
            break

    for idx in range(stop - 1, -1, -1):
        event = events[idx]
        payload = event.payload
        if not isinstance(payload, PassPayload) or payload.result != "correct":
            continue
        if event.period != goal.period or payload.receiver_id != goal.player_id:
            continue
        if goal.time - window <= event.time <= goal.time:
            return idx
    return None


def link_assist(events: Sequence[MatchEvent], goal: MatchEvent, window: Optional[int] = None) -> List[MatchEvent]:
    """Return the log with the assisting pass for ``goal`` flagged.

    Parameters
    ----------
    events : Sequence[MatchEvent]
        Event log in capture order.
    goal : MatchEvent
        Goal whose assist should be linked.
    window : int | None, optional
        Trailing window in seconds; defaults to configuration.

    Returns
    -------
    List[MatchEvent]
        New list; identical to ``events`` when nothing matched or the pass
        was already flagged.
    """
    linked = list(events)
    idx = find_assist(linked, goal, window)
    if idx is None:
        return linked
    target = linked[idx]
    if not target.payload.is_assist:
        linked[idx] = target.with_payload(replace(target.payload, is_assist=True))
    return linked


def relink_assists(events: Sequence[MatchEvent], window: Optional[int] = None) -> List[MatchEvent]:
    """Re-derive every assist flag from scratch.

    Used after corrections and removals, where a goal may have moved out of
    (or into) the window of a pass.

    Parameters
    ----------
    events : Sequence[MatchEvent]
        Event log in capture order.
    window : int | None, optional
        Trailing window in seconds; defaults to configuration.

    Returns
    -------
    List[MatchEvent]
        New list with assist flags matching the current goals.
    """
    cleared: List[MatchEvent] = []
    for event in events:
        payload = event.payload
        if isinstance(payload, PassPayload) and payload.is_assist:
            event = event.with_payload(replace(payload, is_assist=False))
        cleared.append(event)

    for goal in [e for e in cleared if is_assistable_goal(e)]:
        cleared = link_assist(cleared, goal, window)
    return cleared
