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
"""Tests for assist linking and the event log."""

import pytest

from courtside.engine.assists import find_assist, link_assist, relink_assists
from courtside.engine.event_log import EventLog, ScoreTally
from courtside.engine.events import FoulPayload, GoalPayload, MatchEvent, PassPayload, ShotPayload


def _pass(event_id: str, time: int, passer: str, receiver: str, period: str = "1T") -> MatchEvent:
    payload = PassPayload("correct", receiver, receiver.upper())
    return MatchEvent(event_id, time, period, payload, passer, passer.upper())


def _goal(event_id: str, time: int, scorer: str, period: str = "1T") -> MatchEvent:
    return MatchEvent(event_id, time, period, GoalPayload("normal", False, "Ataque"), scorer, scorer.upper())


def _conceded(event_id: str, time: int, period: str = "1T") -> MatchEvent:
    return MatchEvent(event_id, time, period, GoalPayload("normal", True, "Ataque"), None, "Adversário")


def _foul(event_id: str, time: int, team: str, period: str = "1T") -> MatchEvent:
    return MatchEvent(event_id, time, period, FoulPayload(team), "p2", "P2")


class TestAssists:
    """Tests for assist detection."""

    def test_pass_inside_window_is_assist(self) -> None:
        """A correct pass to the scorer within five seconds is the assist."""
        events = [_pass("pass-1", 60, "p2", "p4"), _goal("goal-2", 65, "p4")]
        linked = link_assist(events, events[1])
        assert linked[0].payload.is_assist
        assert not events[0].payload.is_assist

    def test_pass_outside_window_is_not_assist(self) -> None:
        """Six seconds before the goal is too early."""
        events = [_pass("pass-1", 59, "p2", "p4"), _goal("goal-2", 65, "p4")]
        assert find_assist(events, events[1]) is None

    def test_other_period_is_not_assist(self) -> None:
        """Passes from another period never count."""
        events = [_pass("pass-1", 64, "p2", "p4", period="1T"), _goal("goal-2", 65, "p4", period="2T")]
        assert find_assist(events, events[1]) is None

    def test_receiver_must_be_scorer(self) -> None:
        """A pass to someone else does not assist the goal."""
        events = [_pass("pass-1", 63, "p2", "p3"), _goal("goal-2", 65, "p4")]
        assert find_assist(events, events[1]) is None

    def test_most_recent_pass_wins(self) -> None:
        """Only the latest qualifying pass is flagged."""
        events = [_pass("pass-1", 61, "p2", "p4"), _pass("pass-2", 63, "p3", "p4"), _goal("goal-3", 65, "p4")]
        linked = link_assist(events, events[2])
        assert [e.payload.is_assist for e in linked[:2]] == [False, True]

    def test_passes_logged_after_goal_ignored(self) -> None:
        """Passes recorded after the goal cannot assist it."""
        events = [_goal("goal-1", 65, "p4"), _pass("pass-2", 65, "p2", "p4")]
        assert find_assist(events, events[0]) is None

    def test_opponent_goal_has_no_assist(self) -> None:
        """Conceded goals never flag our passes."""
        events = [_pass("pass-1", 63, "p2", "p4"), _conceded("goal-2", 65)]
        assert find_assist(events, events[1]) is None

    def test_linking_is_idempotent(self) -> None:
        """Linking twice gives the same log."""
        events = [_pass("pass-1", 62, "p2", "p4"), _goal("goal-2", 65, "p4")]
        once = link_assist(events, events[1])
        twice = link_assist(once, once[1])
        assert once == twice

    def test_relink_clears_stale_flags(self) -> None:
        """Moving the goal out of the window clears the assist."""
        events = link_assist([_pass("pass-1", 62, "p2", "p4"), _goal("goal-2", 65, "p4")], _goal("goal-2", 65, "p4"))
        assert events[0].payload.is_assist
        moved = [events[0], _goal("goal-2", 90, "p4")]
        assert not relink_assists(moved)[0].payload.is_assist


class TestEventLog:
    """Tests for the event log and its tallies."""

    def test_append_updates_tally(self) -> None:
        """Goals and fouls are counted as they are appended."""
        log = EventLog(("1T", "2T"))
        log.append(_goal("goal-1", 65, "p4"))
        log.append(_conceded("goal-2", 80))
        log.append(_foul("foul-3", 90, "for"))
        log.append(_foul("foul-4", 95, "against"))
        assert log.tally == ScoreTally(1, 1, 1, 1)
        assert len(log) == 4

    def test_duplicate_id_rejected(self) -> None:
        """Event ids are unique within the log."""
        log = EventLog(("1T", "2T"))
        log.append(_goal("goal-1", 65, "p4"))
        with pytest.raises(ValueError):
            log.append(_goal("goal-1", 70, "p4"))
        assert len(log) == 1

    def test_correct_changes_team_attribution(self) -> None:
        """Turning our goal into a conceded one moves the score."""
        log = EventLog(("1T", "2T"))
        log.append(_goal("goal-1", 65, "p4"))
        result = log.correct("goal-1", payload=GoalPayload("normal", True, "Ataque"))
        assert result.ok
        assert result.event.is_goal_against
        assert (log.tally.goals_for, log.tally.goals_against) == (0, 1)

    def test_correct_then_revert_restores_tally(self) -> None:
        """Reverting a correction restores the original counters."""
        log = EventLog(("1T", "2T"))
        log.append(_foul("foul-1", 10, "for"))
        log.append(_goal("goal-2", 65, "p4"))
        before = ScoreTally.from_events(log)
        log.correct("foul-1", payload=FoulPayload("against"))
        log.correct("foul-1", payload=FoulPayload("for"))
        assert log.tally == before

    def test_correct_rejects_bad_values(self) -> None:
        """Unknown events, out-of-range times and unknown periods are refused."""
        log = EventLog(("1T", "2T"))
        log.append(_goal("goal-1", 65, "p4"))
        assert log.correct("nope", time=10).message == "Event not found"
        assert log.correct("goal-1", time=3600).message == "Enter a valid time"
        assert log.correct("goal-1", time=-1).rejected
        assert log.correct("goal-1", period="3T").rejected
        assert log.get("goal-1").time == 65

    def test_correct_relinks_assists(self) -> None:
        """Moving a goal out of the window drops its assist."""
        log = EventLog(("1T", "2T"))
        log.append(_pass("pass-1", 62, "p2", "p4"))
        goal = log.append(_goal("goal-2", 65, "p4"))
        assert log.link_assist(goal).event_id == "pass-1"
        log.correct("goal-2", time=120)
        assert not log.get("pass-1").payload.is_assist

    def test_remove_recounts_and_returns_event(self) -> None:
        """Removing a goal updates the score and returns the removed event."""
        log = EventLog(("1T", "2T"))
        log.append(_pass("pass-1", 62, "p2", "p4"))
        goal = log.append(_goal("goal-2", 65, "p4"))
        log.link_assist(goal)
        result = log.remove("goal-2")
        assert result.ok
        assert result.event.event_id == "goal-2"
        assert log.tally.goals_for == 0
        assert not log.get("pass-1").payload.is_assist
        assert log.remove("goal-2").rejected

    def test_fouls_in_period(self) -> None:
        """Foul counts are split by period and side."""
        log = EventLog(("1T", "2T"))
        log.append(_foul("foul-1", 10, "for"))
        log.append(_foul("foul-2", 20, "against"))
        log.append(_foul("foul-3", 30, "against", period="2T"))
        assert log.fouls_in_period("1T") == (1, 1)
        assert log.fouls_in_period("2T") == (0, 1)

    def test_opponent_goals(self) -> None:
        """Conceded goals are listed with period and time."""
        log = EventLog(("1T", "2T"))
        log.append(_goal("goal-1", 65, "p4"))
        log.append(_conceded("goal-2", 80, period="2T"))
        assert log.opponent_goals() == [("2T", 80)]

    def test_replace_unknown_event(self) -> None:
        """Replacing an event that is not stored raises KeyError."""
        log = EventLog(("1T", "2T"))
        event = MatchEvent("shot-1", 5, "1T", ShotPayload("inside"))
        with pytest.raises(KeyError):
            log.replace(event)
