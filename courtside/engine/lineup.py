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
"""On-court lineup, bench, substitutions and the expulsion slot.

The manager owns who is on court. Slot 0 of the confirmed lineup holds the
goalkeeper of record, but the acting goalkeeper is tracked separately in
``goalkeeper_id`` because a line player may take over the role mid-match.

A sending off removes the player from the court without returning them to the
bench and leaves the team one short until the expulsion slot unlocks, either
after the configured wait within the same period or as soon as the opponent
scores.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Literal, Mapping, Optional, Sequence, Set, Tuple

from courtside.engine.config import ENGINE_CONFIG
from courtside.engine.events import CARD_TYPES, CardPayload
from courtside.engine.outcome import ActionResult
from courtside.models.player import Player
from courtside.models.team import Team

PossessionStart = Literal["us", "opponent"]


@dataclass(frozen=True)
class SubstitutionRecord:
    """One player leaving the court for another.

    Parameters
    ----------
    player_out_id : str
        Player who left (or was sent off, for expulsion replacements).
    player_in_id : str
        Player who entered.
    time : int
        Clock seconds of the change.
    period : str
        Period label of the change.
    """

    player_out_id: str
    player_in_id: str
    time: int
    period: str

    def to_dict(self) -> Dict[str, object]:
        """Serialise the record for the match record.

        Returns
        -------
        Dict[str, object]
            Camel-cased mapping.
        """
        return {
            "playerOutId": self.player_out_id,
            "playerInId": self.player_in_id,
            "time": self.time,
            "period": self.period,
        }


@dataclass(frozen=True)
class ExpulsionSlot:
    """Open vacancy left by a sent-off player.

    Parameters
    ----------
    expelled_player_id : str
        Player who was sent off.
    expelled_at : int
        Clock seconds of the sending off.
    period : str
        Period label of the sending off.
    period_index : int
        Position of ``period`` in the match order.
    was_goalkeeper : bool, optional
        ``True`` when the player was the acting goalkeeper.
    """

    expelled_player_id: str
    expelled_at: int
    period: str
    period_index: int
    was_goalkeeper: bool = False


class LineupManager:
    """Track the five players on court for one squad.

    Parameters
    ----------
    team : Team
        Squad the lineup is picked from.
    """

    def __init__(self, team: Team) -> None:
        """Create a manager with no lineup confirmed.

        Parameters
        ----------
        team : Team
            Squad the lineup is picked from.
        """
        self.team = team
        self.lineup: List[str] = []
        self.starting_lineup: List[str] = []
        self.goalkeeper_id: Optional[str] = None
        self.possession_start: Optional[PossessionStart] = None
        self.substitutions: List[SubstitutionRecord] = []
        self.cards: Dict[str, List[str]] = {}
        self.expelled: Set[str] = set()
        self.expulsions: List[ExpulsionSlot] = []

    @property
    def is_confirmed(self) -> bool:
        """Return ``True`` once a starting lineup has been accepted."""
        return self.possession_start is not None

    @property
    def bench(self) -> List[Player]:
        """Return squad players neither on court nor sent off, in roster order."""
        return [
            p for p in self.team.players
            if p.player_id not in self.lineup and p.player_id not in self.expelled
        ]

    @property
    def on_court(self) -> List[Player]:
        """Return the players on court in slot order."""
        by_id = self.team.players_by_id()
        return [by_id[pid] for pid in self.lineup]

    @property
    def expulsion_slot(self) -> Optional[ExpulsionSlot]:
        """Return the oldest vacancy still waiting for a replacement."""
        return self.expulsions[0] if self.expulsions else None

    def is_on_court(self, player_id: str) -> bool:
        """Check whether a player is in the lineup.

        Parameters
        ----------
        player_id : str
            Player to check.

        Returns
        -------
        bool
            ``True`` when the player is on court.
        """
        return player_id in self.lineup

    def is_expelled(self, player_id: str) -> bool:
        """Check whether a player has been sent off.

        Parameters
        ----------
        player_id : str
            Player to check.

        Returns
        -------
        bool
            ``True`` once the player's cards amount to an expulsion.
        """
        return player_id in self.expelled

    def confirm_lineup(self, player_ids: Sequence[str], possession_start: Optional[str]) -> ActionResult:
        """Validate and store the starting five.

        Parameters
        ----------
        player_ids : Sequence[str]
            Selected players; the goalkeeper-capable one is moved to slot 0.
        possession_start : {"us", "opponent"} | None
            Who kicks off with the ball.

        Returns
        -------
        ActionResult
            Rejection when the selection is not exactly five distinct squad
            players with at most one goalkeeper, or when no kickoff possession
            was chosen. A rejection leaves the manager untouched.
        """
        size = ENGINE_CONFIG.capture.lineup_size
        ids = [str(pid) for pid in player_ids]
        if len(ids) != size:
            return ActionResult.reject(f"Select exactly {size} players")
        if len(set(ids)) != len(ids):
            return ActionResult.reject("A player can only be selected once")

        by_id = self.team.players_by_id()
        unknown = [pid for pid in ids if pid not in by_id]
        if unknown:
            return ActionResult.reject(f"Unknown player(s): {', '.join(unknown)}")

        goalkeepers = [pid for pid in ids if by_id[pid].is_goalkeeper]
        if len(goalkeepers) > ENGINE_CONFIG.capture.max_goalkeepers:
            return ActionResult.reject("Only one goalkeeper may start")
        if possession_start not in ("us", "opponent"):
            return ActionResult.reject("Choose who starts with the ball")

        # Without a registered goalkeeper the first pick starts in goal.
        keeper = goalkeepers[0] if goalkeepers else ids[0]
        self.lineup = [keeper] + [pid for pid in ids if pid != keeper]
        self.starting_lineup = list(self.lineup)
        self.goalkeeper_id = keeper
        self.possession_start = possession_start
        return ActionResult.accept("Lineup confirmed")

    def substitute(self, player_out_id: str, player_in_id: str, time: int, period: str) -> ActionResult:
        """Swap an on-court player for a bench player.

        Parameters
        ----------
        player_out_id : str
            Player leaving the court.
        player_in_id : str
            Bench player entering.
        time : int
            Clock seconds of the change.
        period : str
            Period label of the change.

        Returns
        -------
        ActionResult
            Rejection when either player is not where the change expects.
        """
        if not self.is_confirmed:
            return ActionResult.reject("Confirm the lineup first")
        if player_out_id not in self.lineup:
            return ActionResult.reject("The outgoing player is not on court")
        if player_in_id not in {p.player_id for p in self.bench}:
            return ActionResult.reject("The incoming player is not on the bench")

        self.lineup[self.lineup.index(player_out_id)] = player_in_id
        if player_out_id == self.goalkeeper_id:
            self.goalkeeper_id = player_in_id
        self.substitutions.append(SubstitutionRecord(player_out_id, player_in_id, time, period))
        return ActionResult.accept("Substitution recorded")

    def assign_goalkeeper(self, player_id: str) -> ActionResult:
        """Hand the goalkeeper role to any player on court.

        Parameters
        ----------
        player_id : str
            On-court player taking the role.

        Returns
        -------
        ActionResult
            Rejection when the player is not on court.
        """
        if player_id not in self.lineup:
            return ActionResult.reject("Only a player on court can keep goal")
        self.goalkeeper_id = player_id
        return ActionResult.accept("Goalkeeper updated")

    def record_card(
        self,
        player_id: str,
        card_type: str,
        time: int,
        period: str,
        period_index: int,
    ) -> CardPayload:
        """Register a card and apply escalation and expulsion.

        Parameters
        ----------
        player_id : str
            Player shown the card.
        card_type : {"yellow", "secondYellow", "red"}
            Card chosen by the operator.
        time : int
            Clock seconds of the card.
        period : str
            Period label of the card.
        period_index : int
            Position of ``period`` in the match order.

        Returns
        -------
        CardPayload
            Effective card (a repeated yellow becomes ``secondYellow``) and
            whether it sent the player off.
        """
        if card_type not in CARD_TYPES:
            raise ValueError(f"Unknown card type '{card_type}'")
        if player_id in self.expelled:
            raise ValueError(f"Player '{player_id}' has already been sent off")

        history = self.cards.setdefault(player_id, [])
        effective = card_type
        yellow_limit = ENGINE_CONFIG.discipline.yellows_for_expulsion
        if card_type == "yellow" and history.count("yellow") + 1 >= yellow_limit:
            effective = "secondYellow"
        history.append(effective)

        expelled = self.card_history_expels(history)
        if expelled:
            self._expel(player_id, time, period, period_index)
        return CardPayload(effective, expelled)

    @staticmethod
    def card_history_expels(history: Sequence[str]) -> bool:
        """Decide whether a card history amounts to a sending off.

        Parameters
        ----------
        history : Sequence[str]
            Card kinds shown to one player, in order.

        Returns
        -------
        bool
            ``True`` for two yellows, a second yellow or a red.
        """
        if "red" in history or "secondYellow" in history:
            return True
        return history.count("yellow") >= ENGINE_CONFIG.discipline.yellows_for_expulsion

    def expulsion_unlocked(
        self,
        clock_seconds: int,
        period_index: int,
        opponent_goals: Iterable[Tuple[int, int]],
    ) -> bool:
        """Decide whether the open vacancy may be filled.

        Parameters
        ----------
        clock_seconds : int
            Current clock seconds.
        period_index : int
            Position of the current period in the match order.
        opponent_goals : Iterable[tuple[int, int]]
            ``(period_index, time)`` of every goal conceded.

        Returns
        -------
        bool
            ``True`` when the wait has elapsed in the expulsion period or the
            opponent scored at or after the expulsion.
        """
        slot = self.expulsion_slot
        if slot is None:
            return False
        wait = ENGINE_CONFIG.discipline.expulsion_wait
        if period_index == slot.period_index and clock_seconds >= slot.expelled_at + wait:
            return True
        for goal_period, goal_time in opponent_goals:
            if goal_period > slot.period_index:
                return True
            if goal_period == slot.period_index and goal_time >= slot.expelled_at:
                return True
        return False

    def fill_expulsion(self, player_in_id: str, time: int, period: str, unlocked: bool) -> ActionResult:
        """Send a bench player into the vacancy left by a sending off.

        Parameters
        ----------
        player_in_id : str
            Bench player entering.
        time : int
            Clock seconds of the change.
        period : str
            Period label of the change.
        unlocked : bool
            Result of :meth:`expulsion_unlocked` for the current moment.

        Returns
        -------
        ActionResult
            Rejection when there is no vacancy, it is still locked, or the
            player is not on the bench.
        """
        slot = self.expulsion_slot
        if slot is None:
            return ActionResult.reject("No expulsion to replace")
        if not unlocked:
            return ActionResult.reject("The replacement is not allowed yet")
        if player_in_id not in {p.player_id for p in self.bench}:
            return ActionResult.reject("The incoming player is not on the bench")

        self.lineup.append(player_in_id)
        if slot.was_goalkeeper and self.goalkeeper_id is None:
            self.goalkeeper_id = player_in_id
        self.substitutions.append(SubstitutionRecord(slot.expelled_player_id, player_in_id, time, period))
        self.expulsions.pop(0)
        return ActionResult.accept("Expulsion replaced")

    def substitution_frequency(self) -> Dict[str, int]:
        """Count how often each player came on.

        Returns
        -------
        Dict[str, int]
            Entries per player id.
        """
        return dict(Counter(record.player_in_id for record in self.substitutions))

    def bench_candidates(self, frequency: Optional[Mapping[str, int]] = None) -> List[Player]:
        """Rank bench players for the substitution picker.

        Parameters
        ----------
        frequency : Mapping[str, int] | None, optional
            Persisted entry counts per player; defaults to this session's.

        Returns
        -------
        List[Player]
            Bench players, most frequently used first, then by shirt number.
        """
        counts = self.substitution_frequency() if frequency is None else frequency
        return sorted(self.bench, key=lambda p: (-counts.get(p.player_id, 0), p.jersey_number))

    def _expel(self, player_id: str, time: int, period: str, period_index: int) -> None:
        """Remove a player from the match.

        Parameters
        ----------
        player_id : str
            Player sent off.
        time : int
            Clock seconds of the sending off.
        period : str
            Period label of the sending off.
        period_index : int
            Position of ``period`` in the match order.
        """
        self.expelled.add(player_id)
        if player_id not in self.lineup:
            return
        was_goalkeeper = player_id == self.goalkeeper_id
        self.lineup.remove(player_id)
        if was_goalkeeper:
            self.goalkeeper_id = None
        self.expulsions.append(ExpulsionSlot(player_id, time, period, period_index, was_goalkeeper))
