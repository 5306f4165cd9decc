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
"""Pure aggregation of an event log into match statistics.

Nothing here mutates its input: calling any function twice over the same
events returns equal results, and reverting an edited event restores the
original output.

Absolute goal times add a fixed :attr:`StatsConfig.period_offset` (20
minutes) per elapsed period. Extra-time halves are shorter than that, so goals
in the second extra-time half land later than they were actually scored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from courtside.engine.config import ENGINE_CONFIG
from courtside.engine.events import (
    BlockPayload,
    CardPayload,
    FoulPayload,
    GoalPayload,
    MatchEvent,
    PassPayload,
    SavePayload,
    ShotPayload,
    TacklePayload,
)
from courtside.engine.lineup import SubstitutionRecord
from courtside.models.match import EXTRA_TIME_PERIODS, REGULATION_PERIODS, MatchInfo, RecordingUser
from courtside.utils.timefmt import format_clock, parse_clock

ALL_PERIODS: Tuple[str, ...] = REGULATION_PERIODS + EXTRA_TIME_PERIODS
_CAMEL_BOUNDARY = re.compile(r"_([a-z])")


def _camel(name: str) -> str:
    """Convert a snake_case attribute name to camelCase.

    Parameters
    ----------
    name : str
        Attribute name.

    Returns
    -------
    str
        Camel-cased key.
    """
    return _CAMEL_BOUNDARY.sub(lambda m: m.group(1).upper(), name)


@dataclass
class MatchStats:
    """Counters for a team or a single player over one match.

    Parameters
    ----------
    goals : int
        Goals scored.
    assists : int
        Passes flagged as assists.
    passes_correct : int
        Completed passes.
    passes_wrong : int
        Misplaced passes.
    shots_on_target : int
        Shots on goal.
    shots_off_target : int
        Shots wide or off the post.
    shots_blocked : int
        Shots blocked by a defender.
    tackles_with_ball : int
        Tackles that won the ball.
    tackles_without_ball : int
        Tackles that did not win the ball.
    tackles_counter_attack : int
        Tackles that started a counter-attack.
    saves : int
        Goalkeeper saves.
    blocks : int
        Opponent shots or passes blocked.
    fouls : int
        Fouls; players only count the fouls they committed.
    yellow_cards : int
        Yellow cards, second yellows included.
    red_cards : int
        Sendings off, second yellows included.
    goals_conceded : int
        Goals conceded (team level).
    goal_methods_scored : Dict[str, int]
        Goals scored per method.
    goal_methods_conceded : Dict[str, int]
        Goals conceded per method.
    goal_times : List[Dict[str, Optional[str]]]
        Absolute ``MM:SS`` time and method of each goal scored.
    goals_conceded_times : List[Dict[str, Optional[str]]]
        Absolute ``MM:SS`` time and method of each goal conceded.
    """

    goals: int = 0
    assists: int = 0
    passes_correct: int = 0
    passes_wrong: int = 0
    shots_on_target: int = 0
    shots_off_target: int = 0
    shots_blocked: int = 0
    tackles_with_ball: int = 0
    tackles_without_ball: int = 0
    tackles_counter_attack: int = 0
    saves: int = 0
    blocks: int = 0
    fouls: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    goals_conceded: int = 0
    goal_methods_scored: Dict[str, int] = field(default_factory=dict)
    goal_methods_conceded: Dict[str, int] = field(default_factory=dict)
    goal_times: List[Dict[str, Optional[str]]] = field(default_factory=list)
    goals_conceded_times: List[Dict[str, Optional[str]]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the counters with camel-cased keys.

        Returns
        -------
        Dict[str, Any]
            Mapping in the stored match-record shape.
        """
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, dict):
                value = dict(value)
            elif isinstance(value, list):
                value = [dict(item) for item in value]
            data[_camel(f.name)] = value
        return data


def absolute_time(event: MatchEvent) -> int:
    """Convert an event time to seconds since kickoff.

    Parameters
    ----------
    event : MatchEvent
        Event with a period-relative time.

    Returns
    -------
    int
        ``time`` plus the fixed period offset for each period before the
        event's period.
    """
    try:
        index = ALL_PERIODS.index(event.period)
    except ValueError:
        index = 0
    return event.time + index * ENGINE_CONFIG.stats.period_offset


def _count_event(stats: MatchStats, event: MatchEvent, team_level: bool) -> None:
    """Add one event to a counter block.

    Parameters
    ----------
    stats : MatchStats
        Counters being filled.
    event : MatchEvent
        Event to count.
    team_level : bool
        ``True`` for team totals, ``False`` for the acting player's counters.
    """
    payload = event.payload
    if isinstance(payload, PassPayload):
        if payload.result == "correct":
            stats.passes_correct += 1
        else:
            stats.passes_wrong += 1
        if payload.is_assist:
            stats.assists += 1
    elif isinstance(payload, ShotPayload):
        if payload.result == "inside":
            stats.shots_on_target += 1
        elif payload.result == "blocked":
            stats.shots_blocked += 1
        else:
            stats.shots_off_target += 1
    elif isinstance(payload, TacklePayload):
        if payload.result == "withBall":
            stats.tackles_with_ball += 1
        elif payload.result == "withoutBall":
            stats.tackles_without_ball += 1
        else:
            stats.tackles_counter_attack += 1
    elif isinstance(payload, SavePayload):
        stats.saves += 1
    elif isinstance(payload, BlockPayload):
        stats.blocks += 1
    elif isinstance(payload, FoulPayload):
        if team_level or payload.foul_team == "for":
            stats.fouls += 1
    elif isinstance(payload, CardPayload):
        if payload.card_type in ("yellow", "secondYellow"):
            stats.yellow_cards += 1
        if payload.card_type in ("secondYellow", "red"):
            stats.red_cards += 1
    elif isinstance(payload, GoalPayload):
        entry = {"time": format_clock(absolute_time(event)), "method": payload.method}
        if payload.is_opponent_goal:
            if not team_level:
                return
            stats.goals_conceded += 1
            stats.goals_conceded_times.append(entry)
            if payload.method:
                stats.goal_methods_conceded[payload.method] = stats.goal_methods_conceded.get(payload.method, 0) + 1
        else:
            stats.goals += 1
            stats.goal_times.append(entry)
            if payload.method:
                stats.goal_methods_scored[payload.method] = stats.goal_methods_scored.get(payload.method, 0) + 1


def aggregate_team_stats(events: Iterable[MatchEvent]) -> MatchStats:
    """Sum every event into team totals.

    Parameters
    ----------
    events : Iterable[MatchEvent]
        Event log.

    Returns
    -------
    MatchStats
        Team counters. Fouls include both sides; goals include opponent own
        goals.
    """
    stats = MatchStats()
    for event in events:
        _count_event(stats, event, team_level=True)
    return stats


def aggregate_player_stats(events: Iterable[MatchEvent]) -> Dict[str, MatchStats]:
    """Sum events into counters per acting player.

    Parameters
    ----------
    events : Iterable[MatchEvent]
        Event log.

    Returns
    -------
    Dict[str, MatchStats]
        Counters keyed by player id, for every player who appears as the
        actor of at least one event.
    """
    per_player: Dict[str, MatchStats] = {}
    for event in events:
        if event.player_id is None:
            continue
        stats = per_player.setdefault(event.player_id, MatchStats())
        _count_event(stats, event, team_level=False)
    return per_player


def build_relationship_graph(events: Iterable[MatchEvent]) -> Dict[str, Dict[str, Dict[str, int]]]:
    """Count completed passes between each pair of players.

    Pairs are undirected: the lexicographically smaller id is the outer key,
    so a pass from A to B and one from B to A land in the same counter.

    Parameters
    ----------
    events : Iterable[MatchEvent]
        Event log.

    Returns
    -------
    Dict[str, Dict[str, Dict[str, int]]]
        ``graph[min_id][max_id] == {"passes": n, "assists": m}``.
    """
    graph: Dict[str, Dict[str, Dict[str, int]]] = {}
    for event in events:
        payload = event.payload
        if not isinstance(payload, PassPayload) or payload.result != "correct":
            continue
        passer, receiver = event.player_id, payload.receiver_id
        if not passer or not receiver or passer == receiver:
            continue
        low, high = sorted((passer, receiver))
        pair = graph.setdefault(low, {}).setdefault(high, {"passes": 0, "assists": 0})
        pair["passes"] += 1
        if payload.is_assist:
            pair["assists"] += 1
    return graph


def goal_time_distribution(events: Iterable[MatchEvent]) -> List[Dict[str, Any]]:
    """Bucket goals scored and conceded into five-minute windows.

    Parameters
    ----------
    events : Iterable[MatchEvent]
        Event log.

    Returns
    -------
    List[Dict[str, Any]]
        One entry per window from ``"00:00-05:00"`` to ``"50:00-50:00"`` with
        ``scored`` and ``conceded`` counts. Goals after the horizon are left
        out.
    """
    size = ENGINE_CONFIG.stats.goal_bucket_size
    horizon = ENGINE_CONFIG.stats.goal_bucket_horizon
    buckets: List[Dict[str, Any]] = []
    for start in range(0, horizon + 1, size):
        end = min(start + size, horizon)
        buckets.append({"period": f"{format_clock(start)}-{format_clock(end)}", "scored": 0, "conceded": 0})

    team = aggregate_team_stats(events)
    for key, times in (("scored", team.goal_times), ("conceded", team.goals_conceded_times)):
        for entry in times:
            seconds = parse_clock(entry["time"] or "")
            if seconds is None or seconds > horizon:
                continue
            # Bucketed by whole minutes.
            buckets[(seconds // 60) // (size // 60)][key] += 1
    return buckets


def match_result(goals_for: int, goals_against: int) -> str:
    """Derive the match result letter.

    Parameters
    ----------
    goals_for : int
        Goals scored.
    goals_against : int
        Goals conceded.

    Returns
    -------
    str
        ``"V"`` for a win, ``"D"`` for a loss, ``"E"`` for a draw.
    """
    if goals_for > goals_against:
        return "V"
    if goals_for < goals_against:
        return "D"
    return "E"


@dataclass
class MatchRecord:
    """Normalized record handed to the persistence gateway.

    Parameters
    ----------
    match_id : str
        Match identifier.
    opponent : str
        Opponent name.
    date : str
        Match date.
    result : {"V", "D", "E"}
        Win, loss or draw.
    goals_for : int
        Goals scored.
    goals_against : int
        Goals conceded.
    competition : str | None
        Competition name.
    player_stats : Dict[str, MatchStats]
        Counters per player.
    team_stats : MatchStats
        Team counters.
    post_match_event_log : List[Dict[str, Any]]
        Normalized events with audit fields.
    player_relationships : Dict[str, Dict[str, Dict[str, int]]]
        Passer/receiver graph.
    lineup : Dict[str, Any] | None, optional
        Starting lineup block.
    substitution_history : List[Dict[str, Any]], optional
        Substitutions in order.
    possession_seconds_with : int | None, optional
        Seconds with the ball (live capture only).
    possession_seconds_without : int | None, optional
        Seconds without the ball (live capture only).
    status : str, optional
        Match status after collection.
    """

    match_id: str
    opponent: str
    date: str
    result: str
    goals_for: int
    goals_against: int
    competition: Optional[str]
    player_stats: Dict[str, MatchStats]
    team_stats: MatchStats
    post_match_event_log: List[Dict[str, Any]]
    player_relationships: Dict[str, Dict[str, Dict[str, int]]]
    lineup: Optional[Dict[str, Any]] = None
    substitution_history: List[Dict[str, Any]] = field(default_factory=list)
    possession_seconds_with: Optional[int] = None
    possession_seconds_without: Optional[int] = None
    status: str = "encerrado"

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the record, leaving out absent optional blocks.

        Returns
        -------
        Dict[str, Any]
            Camel-cased mapping accepted by the persistence gateway.
        """
        data: Dict[str, Any] = {
            "id": self.match_id,
            "opponent": self.opponent,
            "date": self.date,
            "result": self.result,
            "goalsFor": self.goals_for,
            "goalsAgainst": self.goals_against,
            "competition": self.competition,
            "playerStats": {pid: stats.to_dict() for pid, stats in self.player_stats.items()},
            "teamStats": self.team_stats.to_dict(),
            "postMatchEventLog": list(self.post_match_event_log),
            "playerRelationships": self.player_relationships,
            "substitutionHistory": list(self.substitution_history),
            "status": self.status,
        }
        if self.lineup is not None:
            data["lineup"] = self.lineup
        if self.possession_seconds_with is not None:
            data["possessionSecondsWith"] = self.possession_seconds_with
            data["possessionSecondsWithout"] = self.possession_seconds_without
        return data


def normalize_event(event: MatchEvent, user: Optional[RecordingUser] = None) -> Dict[str, Any]:
    """Serialise one event for the post-match log.

    Parameters
    ----------
    event : MatchEvent
        Event to serialise.
    user : RecordingUser | None, optional
        Operator credited with the event.

    Returns
    -------
    Dict[str, Any]
        Event mapping with ``recordedByUserId``/``recordedByName`` when a
        user is known.
    """
    data = event.to_dict()
    if user is not None:
        data["recordedByUserId"] = user.user_id
        data["recordedByName"] = user.name
    return data


def build_match_record(
    match: MatchInfo,
    events: Sequence[MatchEvent],
    user: Optional[RecordingUser] = None,
    lineup: Optional[Sequence[str]] = None,
    bench: Optional[Sequence[str]] = None,
    possession_start: Optional[str] = None,
    substitutions: Sequence[SubstitutionRecord] = (),
    possession: Optional[Tuple[int, int]] = None,
) -> MatchRecord:
    """Assemble the record for a finished match.

    Parameters
    ----------
    match : MatchInfo
        Match metadata.
    events : Sequence[MatchEvent]
        Final event log.
    user : RecordingUser | None, optional
        Operator credited on every event.
    lineup : Sequence[str] | None, optional
        Starting five, goalkeeper first.
    bench : Sequence[str] | None, optional
        Bench at the end of the match.
    possession_start : {"us", "opponent"} | None, optional
        Kickoff possession.
    substitutions : Sequence[SubstitutionRecord], optional
        Substitution history.
    possession : tuple[int, int] | None, optional
        Seconds with and without the ball.

    Returns
    -------
    MatchRecord
        Record with the result derived from the goal counts.
    """
    team = aggregate_team_stats(events)
    goals_for, goals_against = team.goals, team.goals_conceded

    lineup_block = None
    if lineup is not None:
        lineup_block = {
            "players": list(lineup),
            "bench": list(bench or []),
            "ballPossessionStart": possession_start,
        }

    return MatchRecord(
        match_id=match.match_id,
        opponent=match.opponent,
        date=match.date,
        result=match_result(goals_for, goals_against),
        goals_for=goals_for,
        goals_against=goals_against,
        competition=match.competition,
        player_stats=aggregate_player_stats(events),
        team_stats=team,
        post_match_event_log=[normalize_event(e, user) for e in events],
        player_relationships=build_relationship_graph(events),
        lineup=lineup_block,
        substitution_history=[record.to_dict() for record in substitutions],
        possession_seconds_with=possession[0] if possession else None,
        possession_seconds_without=possession[1] if possession else None,
    )
