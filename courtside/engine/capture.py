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
"""Event capture state machine for live and post-match scouting sessions.

The operator drives a session with a handful of taps: select a player, select
an action, pick a sub-result. :class:`CaptureEngine` turns those taps into
typed :class:`~courtside.engine.events.MatchEvent` records while keeping the
clock, possession, lineup and score consistent.

The open interaction is always exactly one :data:`CaptureFlow` value. It only
changes through :meth:`CaptureEngine.select_player`,
:meth:`CaptureEngine.select_action`, :meth:`CaptureEngine.choose`,
:meth:`CaptureEngine.confirm` and :meth:`CaptureEngine.cancel`. Every operator
input answers with an :class:`~courtside.engine.outcome.ActionResult`;
rejected inputs leave the session as it was.

Two capture modes exist. ``"realtime"`` follows a running :class:`MatchClock`
and only accepts players on court. ``"manual"`` fills a post-match sheet: the
operator types the time of each event and any squad player may be picked.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Callable, ClassVar, Dict, List, Literal, Mapping, Optional, Sequence, Tuple, Union

from courtside.engine import stats
from courtside.engine.clock import MatchClock
from courtside.engine.config import ENGINE_CONFIG
from courtside.engine.event_log import EventLog
from courtside.engine.events import (
    BLOCK_RESULTS,
    CARD_TYPES,
    COURT_ZONES,
    FOUL_TEAMS,
    PASS_RESULTS,
    SAVE_RESULTS,
    SET_PIECE_RESULTS,
    SHOT_RESULTS,
    TACKLE_RESULTS,
    BlockPayload,
    CardPayload,
    CornerPayload,
    EventPayload,
    FoulPayload,
    FreeKickPayload,
    GoalPayload,
    LateralPayload,
    MatchEvent,
    PassPayload,
    PenaltyPayload,
    SavePayload,
    ShotPayload,
    TacklePayload,
)
from courtside.engine.lineup import ExpulsionSlot, LineupManager
from courtside.engine.outcome import ActionResult
from courtside.engine.possession import PossessionState, PossessionTracker, opposite_possession
from courtside.models.match import MatchInfo, RecordingUser
from courtside.models.player import Player
from courtside.models.team import Team
from courtside.utils.debug import MatchDebugger
from courtside.utils.identity import IdentityProvider
from courtside.utils.persistence import PersistenceError, PersistenceGateway
from courtside.utils.timefmt import format_clock, parse_manual_time

CaptureMode = Literal["realtime", "manual"]

ACTIONS: Tuple[str, ...] = (
    "pass",
    "shot",
    "foul",
    "goal",
    "card",
    "tackle",
    "save",
    "block",
    "corner",
    "lateral",
    "freeKick",
    "penalty",
)
SET_PIECE_ACTIONS: Tuple[str, ...] = ("freeKick", "penalty")
TEAM_CHOICES: Tuple[str, ...] = ("ours", "theirs")
OWN_GOAL = "own_goal"

RESULT_CHOICES: Dict[str, Tuple[str, ...]] = {
    "pass": PASS_RESULTS,
    "shot": SHOT_RESULTS,
    "foul": FOUL_TEAMS,
    "card": CARD_TYPES,
    "tackle": TACKLE_RESULTS,
    "save": SAVE_RESULTS,
    "block": BLOCK_RESULTS,
    "corner": COURT_ZONES,
    "lateral": COURT_ZONES,
}

_RESULT_PAYLOADS = {
    "pass": PassPayload,
    "shot": ShotPayload,
    "foul": FoulPayload,
    "tackle": TacklePayload,
    "save": SavePayload,
    "block": BlockPayload,
    "corner": CornerPayload,
    "lateral": LateralPayload,
}

OPPONENT_NAME = "Adversário"
OWN_GOAL_NAME = "Gol contra"


@dataclass(frozen=True)
class Idle:
    """No capture flow is open."""

    kind: ClassVar[str] = "idle"


@dataclass(frozen=True)
class AwaitingReceiver:
    """A correct pass was logged; the next distinct player selected received it.

    Parameters
    ----------
    pass_event_id : str
        Logged pass waiting for its receiver.
    passer_id : str
        Player who made the pass.
    """

    pass_event_id: str
    passer_id: str
    kind: ClassVar[str] = "awaitingReceiver"


@dataclass(frozen=True)
class ResultChoice:
    """Single-step sub-result picker for one action.

    Parameters
    ----------
    action : str
        Action whose result is being picked.
    player_id : str
        Acting player.
    time : int
        Event time captured when the action was pressed.
    period : str
        Event period captured when the action was pressed.
    """

    action: str
    player_id: str
    time: int
    period: str
    kind: ClassVar[str] = "resultChoice"

    @property
    def options(self) -> Tuple[str, ...]:
        """Return the results the operator may pick."""
        return RESULT_CHOICES[self.action]


GoalStep = Literal["team", "author", "method", "confirm"]


@dataclass(frozen=True)
class GoalFlow:
    """Goal being resolved: team, then author, then method, then confirmation.

    Parameters
    ----------
    time : int
        Time captured when the goal control was pressed.
    period : str
        Period captured when the goal control was pressed.
    resume_clock : bool, optional
        Whether the clock was running when the goal was pressed.
    step : {"team", "author", "method", "confirm"}, optional
        Step waiting for the operator.
    is_opponent_goal : bool, optional
        ``True`` once the operator picked the opponent.
    author_id : str | None, optional
        Scorer, for our goals.
    own_goal : bool, optional
        ``True`` when the opponent put the ball into their own net.
    method : str | None, optional
        Chosen goal method.
    """

    time: int
    period: str
    resume_clock: bool = False
    step: GoalStep = "team"
    is_opponent_goal: bool = False
    author_id: Optional[str] = None
    own_goal: bool = False
    method: Optional[str] = None
    kind: ClassVar[str] = "goal"

    @property
    def methods(self) -> Tuple[str, ...]:
        """Return the method vocabulary for the side that scored."""
        if self.is_opponent_goal:
            return ENGINE_CONFIG.capture.conceded_goal_methods
        return ENGINE_CONFIG.capture.scored_goal_methods


SetPieceStep = Literal["team", "kicker", "result"]


@dataclass(frozen=True)
class SetPieceFlow:
    """Direct free kick or penalty: team, then kicker for our kicks, then result.

    Parameters
    ----------
    action : {"freeKick", "penalty"}
        Kind of set piece.
    time : int
        Time captured when the action was pressed.
    period : str
        Period captured when the action was pressed.
    resume_clock : bool, optional
        Whether the clock was running when the action was pressed.
    step : {"team", "kicker", "result"}, optional
        Step waiting for the operator.
    is_for_us : bool | None, optional
        Side taking the kick once chosen.
    kicker_id : str | None, optional
        Our kicker once chosen.
    """

    action: str
    time: int
    period: str
    resume_clock: bool = False
    step: SetPieceStep = "team"
    is_for_us: Optional[bool] = None
    kicker_id: Optional[str] = None
    kind: ClassVar[str] = "setPiece"


CaptureFlow = Union[Idle, AwaitingReceiver, ResultChoice, GoalFlow, SetPieceFlow]
IDLE = Idle()


@dataclass(frozen=True)
class MatchSession:
    """Read-only snapshot of a capture session.

    Parameters
    ----------
    match : MatchInfo
        Match being recorded.
    mode : {"realtime", "manual"}
        Capture mode.
    period : str
        Current period label.
    clock_seconds : int
        Seconds elapsed in the period (manual mode: last typed time).
    clock_status : str
        Clock state machine status.
    is_running : bool
        Whether the clock advances on ticks.
    is_ended : bool
        Whether the session reached its terminal state.
    is_match_started : bool
        Whether capture actions are accepted.
    lineup : Tuple[str, ...]
        Player ids on court, goalkeeper of record first.
    goalkeeper_id : str | None
        Acting goalkeeper.
    bench : Tuple[str, ...]
        Player ids available for substitutions.
    possession_state : {"with", "without"}
        Current possession.
    possession_seconds_with : int
        Seconds accrued with the ball.
    possession_seconds_without : int
        Seconds accrued without the ball.
    expulsion_slot : ExpulsionSlot | None
        Vacancy waiting for a replacement.
    goals_for : int
        Goals credited to our team.
    goals_against : int
        Goals conceded.
    fouls_for : int
        Fouls committed by our team.
    fouls_against : int
        Fouls committed by the opponent.
    selected_player_id : str | None
        Player the next action applies to.
    flow : CaptureFlow
        Open capture flow.
    """

    match: MatchInfo
    mode: CaptureMode
    period: str
    clock_seconds: int
    clock_status: str
    is_running: bool
    is_ended: bool
    is_match_started: bool
    lineup: Tuple[str, ...]
    goalkeeper_id: Optional[str]
    bench: Tuple[str, ...]
    possession_state: PossessionState
    possession_seconds_with: int
    possession_seconds_without: int
    expulsion_slot: Optional[ExpulsionSlot]
    goals_for: int
    goals_against: int
    fouls_for: int
    fouls_against: int
    selected_player_id: Optional[str]
    flow: CaptureFlow

    @property
    def score(self) -> str:
        """Return the score as shown on the capture header."""
        return f"{self.goals_for} x {self.goals_against}"


class CaptureEngine:
    """Reducer turning operator inputs into a consistent match event log.

    Parameters
    ----------
    match : MatchInfo
        Match being recorded.
    team : Team
        Squad of the recording team.
    mode : {"realtime", "manual"}, optional
        Live capture against the clock, or post-match sheet with typed times.
    debugger : MatchDebugger | None, optional
        Telemetry sink; a default one writing to ``debug_logs/`` is created
        when omitted.
    now : Callable[[], float], optional
        Monotonic wall-clock source used for the set-piece auto-resume.
    """

    def __init__(
        self,
        match: MatchInfo,
        team: Team,
        mode: CaptureMode = "realtime",
        debugger: Optional[MatchDebugger] = None,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        """Open a capture session.

        Parameters
        ----------
        match : MatchInfo
            Match being recorded.
        team : Team
            Squad of the recording team.
        mode : {"realtime", "manual"}
            Capture mode.
        debugger : MatchDebugger | None
            Telemetry sink.
        now : Callable[[], float]
            Monotonic wall-clock source.
        """
        if mode not in ("realtime", "manual"):
            raise ValueError(f"Unknown capture mode '{mode}'")
        if match.status == "encerrado":
            raise ValueError(f"Match '{match.match_id}' has already been recorded")

        self.match = match
        self.team = team
        self.mode: CaptureMode = mode
        self.debugger = debugger or MatchDebugger()
        self._now = now

        self.clock = MatchClock(match.periods)
        self.possession = PossessionTracker()
        self.lineup = LineupManager(team)
        self.log = EventLog(match.periods)

        self.flow: CaptureFlow = IDLE
        self.selected_player_id: Optional[str] = None
        self.kickoff_possession: Optional[PossessionState] = None
        self.corner_sector: Optional[str] = None
        self.manual_time: Optional[int] = None
        self.manual_period: str = match.periods[0]
        self.auto_resume_at: Optional[float] = None
        self._event_counter = 0
        self._collected = False

        self.debugger.log_capture_event(
            self.period, 0, "session", f"{mode} capture opened for {team.name} vs {match.opponent}"
        )

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------
    @property
    def is_manual(self) -> bool:
        """Return ``True`` for post-match capture."""
        return self.mode == "manual"

    @property
    def is_match_started(self) -> bool:
        """Return ``True`` once capture actions may be recorded."""
        return self.is_manual or self.lineup.is_confirmed

    @property
    def is_ended(self) -> bool:
        """Return ``True`` once the session reached its terminal state."""
        if self.is_manual:
            return self._collected
        return self.clock.status == "match_ended"

    @property
    def is_running(self) -> bool:
        """Return ``True`` while the clock advances."""
        return self.clock.is_running

    @property
    def period(self) -> str:
        """Return the period new events are recorded in."""
        return self.manual_period if self.is_manual else self.clock.period

    @property
    def clock_seconds(self) -> int:
        """Return the time new events are recorded at."""
        if self.is_manual:
            return self.manual_time or 0
        return self.clock.seconds

    @property
    def events(self) -> Tuple[MatchEvent, ...]:
        """Return a snapshot of the event log."""
        return self.log.events

    @property
    def free_kick_unlocked(self) -> bool:
        """Return ``True`` once either side reached the foul limit this period."""
        fouls_for, fouls_against = self.log.fouls_in_period(self.period)
        return max(fouls_for, fouls_against) >= ENGINE_CONFIG.capture.free_kick_foul_threshold

    def snapshot(self) -> MatchSession:
        """Capture the current session state.

        Returns
        -------
        MatchSession
            Immutable view of clock, lineup, possession and score.
        """
        tally = self.log.tally
        return MatchSession(
            match=self.match,
            mode=self.mode,
            period=self.period,
            clock_seconds=self.clock_seconds,
            clock_status=self.clock.status,
            is_running=self.is_running,
            is_ended=self.is_ended,
            is_match_started=self.is_match_started,
            lineup=tuple(self.lineup.lineup),
            goalkeeper_id=self.lineup.goalkeeper_id,
            bench=tuple(p.player_id for p in self.lineup.bench),
            possession_state=self.possession.state,
            possession_seconds_with=self.possession.seconds_with,
            possession_seconds_without=self.possession.seconds_without,
            expulsion_slot=self.lineup.expulsion_slot,
            goals_for=tally.goals_for,
            goals_against=tally.goals_against,
            fouls_for=tally.fouls_for,
            fouls_against=tally.fouls_against,
            selected_player_id=self.selected_player_id,
            flow=self.flow,
        )

    # ------------------------------------------------------------------
    # Lineup
    # ------------------------------------------------------------------
    def confirm_lineup(self, player_ids: Sequence[str], possession_start: Optional[str]) -> ActionResult:
        """Confirm the starting five and the kickoff possession.

        Parameters
        ----------
        player_ids : Sequence[str]
            Five distinct squad players, at most one goalkeeper.
        possession_start : {"us", "opponent"} | None
            Who kicks off with the ball.

        Returns
        -------
        ActionResult
            Rejection when the lineup is invalid or the match already started.
        """
        if self.lineup.is_confirmed and (self.clock.status != "stopped" or len(self.log)):
            return self._reject("confirm_lineup", "The match has already started")
        result = self.lineup.confirm_lineup(player_ids, possession_start)
        if result.rejected:
            self.debugger.log_validation("confirm_lineup", result.message)
            return result

        self.kickoff_possession = "with" if possession_start == "us" else "without"
        self.possession.set_state(self.kickoff_possession)
        self.debugger.log_lineup_change(self.clock_seconds, "Lineup confirmed", self.lineup.lineup)
        return result

    def substitute(self, player_out_id: str, player_in_id: str) -> ActionResult:
        """Swap an on-court player for a bench player at the current time.

        Parameters
        ----------
        player_out_id : str
            Player leaving the court.
        player_in_id : str
            Bench player entering.

        Returns
        -------
        ActionResult
            Outcome of the substitution.
        """
        error = self._lineup_change_error()
        if error:
            return self._reject("substitute", error)
        result = self.lineup.substitute(player_out_id, player_in_id, self.clock_seconds, self.period)
        if result.rejected:
            self.debugger.log_validation("substitute", result.message)
            return result

        if self.selected_player_id == player_out_id:
            self.selected_player_id = None
        self.debugger.log_lineup_change(
            self.clock_seconds, f"{player_out_id} off, {player_in_id} on", self.lineup.lineup
        )
        return result

    def assign_goalkeeper(self, player_id: str) -> ActionResult:
        """Hand the goalkeeper role to another player on court.

        Parameters
        ----------
        player_id : str
            On-court player taking the role.

        Returns
        -------
        ActionResult
            Outcome of the change.
        """
        result = self.lineup.assign_goalkeeper(player_id)
        if result.rejected:
            self.debugger.log_validation("assign_goalkeeper", result.message)
            return result
        self.debugger.log_lineup_change(self.clock_seconds, f"{player_id} in goal", self.lineup.lineup)
        return result

    def expulsion_unlocked(self) -> bool:
        """Check whether the open expulsion slot may be filled now.

        Returns
        -------
        bool
            ``True`` when the wait elapsed or the opponent scored since.
        """
        goals = [(self.clock.period_index_of(period), t) for period, t in self.log.opponent_goals()]
        return self.lineup.expulsion_unlocked(
            self.clock_seconds, self.clock.period_index_of(self.period), goals
        )

    def fill_expulsion(self, player_in_id: str) -> ActionResult:
        """Send a bench player into the expulsion vacancy.

        Parameters
        ----------
        player_in_id : str
            Bench player entering.

        Returns
        -------
        ActionResult
            Rejection while the vacancy is still locked.
        """
        error = self._lineup_change_error()
        if error:
            return self._reject("fill_expulsion", error)
        result = self.lineup.fill_expulsion(
            player_in_id, self.clock_seconds, self.period, self.expulsion_unlocked()
        )
        if result.rejected:
            self.debugger.log_validation("fill_expulsion", result.message)
            return result
        self.debugger.log_lineup_change(
            self.clock_seconds, f"{player_in_id} replaces expelled player", self.lineup.lineup
        )
        return result

    def bench_candidates(self, frequency: Optional[Mapping[str, int]] = None) -> List[Player]:
        """Rank bench players for the substitution picker.

        Parameters
        ----------
        frequency : Mapping[str, int] | None, optional
            Persisted entry counts per player.

        Returns
        -------
        List[Player]
            Bench players, most used first, then by shirt number.
        """
        return self.lineup.bench_candidates(frequency)

    # ------------------------------------------------------------------
    # Clock and possession
    # ------------------------------------------------------------------
    def start_clock(self) -> ActionResult:
        """Start or resume the clock, opening the next period after an interval.

        Returns
        -------
        ActionResult
            Rejection in manual mode, before the lineup is confirmed, while a
            goal or set piece is still open, or once the last period is over.
        """
        if self.is_manual:
            return self._reject("start_clock", "The clock is not used in post-match capture")
        if not self.is_match_started:
            return self._reject("start_clock", "Confirm the lineup to start the match")
        if self.clock.is_running:
            return ActionResult.accept("The clock is already running")
        if isinstance(self.flow, (GoalFlow, SetPieceFlow)):
            return self._reject("start_clock", "Finish or cancel the open flow first")

        opens_period = self.clock.status == "period_ended"
        if not self.clock.start():
            if self.clock.status == "match_ended":
                return self._reject("start_clock", "The match has ended")
            return self._reject("start_clock", "The last period is over; end the match")

        self.auto_resume_at = None
        if opens_period:
            self._open_next_period()
        self._log_clock()
        return ActionResult.accept(f"{self.clock.period} {format_clock(self.clock.seconds)}")

    def pause_clock(self) -> ActionResult:
        """Pause the running clock.

        Returns
        -------
        ActionResult
            Rejection when the clock is not running.
        """
        if not self.clock.pause():
            return self._reject("pause_clock", "The clock is not running")
        self.auto_resume_at = None
        self._log_clock()
        return ActionResult.accept("Clock paused")

    def tick(self, seconds: int = 1) -> int:
        """Advance the clock and the active possession counter.

        Parameters
        ----------
        seconds : int
            Whole seconds elapsed.

        Returns
        -------
        int
            Seconds applied to the clock.
        """
        applied = self.clock.tick(seconds)
        if applied:
            self.possession.accrue(applied)
            if self.clock.status == "period_ended":
                self._log_clock()
        return applied

    def poll(self, now: Optional[float] = None) -> bool:
        """Fire the set-piece auto-resume once its deadline has passed.

        Parameters
        ----------
        now : float | None, optional
            Current monotonic time; read from the engine clock source when
            omitted.

        Returns
        -------
        bool
            ``True`` when the clock was resumed by this call.
        """
        if self.auto_resume_at is None:
            return False
        if self.is_ended:
            self.auto_resume_at = None
            return False
        now = self._now() if now is None else now
        if now < self.auto_resume_at:
            return False

        self.auto_resume_at = None
        if self.clock.status != "paused":
            return False
        self.clock.start()
        self._log_clock()
        return True

    def end_period(self) -> ActionResult:
        """Close the current period; closing the last one ends the match.

        Returns
        -------
        ActionResult
            Rejection while the period has not been played in full.
        """
        if self.is_manual:
            return self._reject("end_period", "The clock is not used in post-match capture")
        if self.clock.status == "match_ended":
            return self._reject("end_period", "The match has already ended")
        if not self.clock.end_period():
            return self._reject(
                "end_period",
                f"The period can only end after {format_clock(self.clock.current_period_length)}",
            )

        self.auto_resume_at = None
        if self.clock.is_final_period:
            self.clock.close_match()
            self.flow = IDLE
            self._log_clock()
            return ActionResult.accept("Match ended")
        self._log_clock()
        return ActionResult.accept(f"{self.clock.period} ended")

    def toggle_possession(self) -> ActionResult:
        """Flip possession on an explicit operator input.

        Returns
        -------
        ActionResult
            Accepted with the new state in the message.
        """
        if not self.is_match_started:
            return self._reject("toggle_possession", "Confirm the lineup to start the match")
        state = self.possession.flip()
        self._log_clock()
        return ActionResult.accept(f"Possession: {state}")

    def set_manual_time(self, raw: str, period: Optional[str] = None) -> ActionResult:
        """Set the time (and optionally the period) of the next manual event.

        Parameters
        ----------
        raw : str
            Digits typed by the operator, see
            :func:`~courtside.utils.timefmt.parse_manual_time`.
        period : str | None, optional
            Period label; unchanged when omitted.

        Returns
        -------
        ActionResult
            Rejection for malformed times or unknown periods.
        """
        if not self.is_manual:
            return self._reject("set_manual_time", "Live capture takes the time from the clock")
        seconds = parse_manual_time(raw)
        if seconds is None or seconds >= ENGINE_CONFIG.clock.manual_time_limit:
            return self._reject("set_manual_time", "Enter a valid time")
        if period is not None and period not in self.match.periods:
            return self._reject("set_manual_time", f"Unknown period '{period}'")

        self.manual_time = seconds
        if period is not None:
            self.manual_period = period
        return ActionResult.accept(f"{self.manual_period} {format_clock(seconds)}")

    def arm_corner_sector(self, zone: Optional[str]) -> ActionResult:
        """Pre-select the court sector for the next corner.

        Parameters
        ----------
        zone : {"AT_ESQ", "AT_DIR", "DF_ESQ", "DF_DIR"} | None
            Sector to arm, or ``None`` to disarm.

        Returns
        -------
        ActionResult
            Rejection for unknown sectors.
        """
        if zone is not None and zone not in COURT_ZONES:
            return self._reject("arm_corner_sector", f"Unknown sector '{zone}'")
        self.corner_sector = zone
        return ActionResult.accept("Sector armed" if zone else "Sector cleared")

    # ------------------------------------------------------------------
    # Capture reducer
    # ------------------------------------------------------------------
    def select_player(self, player_id: str) -> ActionResult:
        """Handle a tap on a player.

        Parameters
        ----------
        player_id : str
            Player tapped by the operator.

        Returns
        -------
        ActionResult
            Carries the updated pass when the tap named a pass receiver.
        """
        flow = self.flow
        if isinstance(flow, GoalFlow) and flow.step == "author":
            return self.choose(player_id)
        if isinstance(flow, SetPieceFlow) and flow.step == "kicker":
            return self.choose(player_id)

        error = self._selection_error(player_id)
        if error:
            return self._reject("select_player", error)

        if isinstance(flow, AwaitingReceiver):
            if player_id == flow.passer_id:
                return ActionResult.accept("Select the player who received the pass")
            return self._attach_receiver(flow, player_id)

        self.selected_player_id = player_id
        if isinstance(flow, ResultChoice):
            self.flow = replace(flow, player_id=player_id)
        return ActionResult.accept()

    def select_action(self, action: str) -> ActionResult:
        """Handle a tap on an action button.

        Parameters
        ----------
        action : str
            One of :data:`ACTIONS`.

        Returns
        -------
        ActionResult
            Carries the emitted event for one-tap actions (pre-armed corner)
            and the deleted pass when a pending pass is cancelled.
        """
        if action not in ACTIONS:
            return self._reject("select_action", f"Unknown action '{action}'")

        flow = self.flow
        if isinstance(flow, AwaitingReceiver) and action == "pass":
            self.flow = IDLE
            removed = self.log.remove(flow.pass_event_id)
            self.debugger.log_capture_event(self.period, self.clock_seconds, "pass", "Pending pass cancelled")
            return ActionResult.accept("Pass cancelled", removed.event)

        error = self._readiness_error(action)
        if error:
            return self._reject("select_action", error)
        if isinstance(flow, (GoalFlow, SetPieceFlow)):
            return self._reject("select_action", "Finish or cancel the open flow first")

        player_id = self.selected_player_id
        if action not in ("goal",) + SET_PIECE_ACTIONS:
            if player_id is None:
                return self._reject("select_action", "Select a player first")
            if action == "save" and not self._is_goalkeeper(player_id):
                return self._reject("select_action", "Only the goalkeeper can make a save")
        if action == "freeKick" and not self.free_kick_unlocked:
            return self._reject("select_action", "Free kicks unlock after 5 fouls in the period")

        # Any other action leaves a pending pass without a receiver.
        self.flow = IDLE
        event_time, event_period = self.clock_seconds, self.period

        if action == "goal":
            self.flow = GoalFlow(event_time, event_period, resume_clock=self._hold_clock())
            return ActionResult.accept("Goal for us or for the opponent?")
        if action in SET_PIECE_ACTIONS:
            self.flow = SetPieceFlow(action, event_time, event_period, resume_clock=self._hold_clock())
            return ActionResult.accept("Kick for us or for the opponent?")

        if action == "corner" and self.corner_sector is not None:
            payload = CornerPayload(self.corner_sector)
            self.corner_sector = None
            event = self._emit(
                payload, event_time, event_period, self.team.get_player(player_id), details={"source": "sector"}
            )
            return ActionResult.accept(f"{event.tipo} - {event.subtipo}", event)

        self.flow = ResultChoice(action, player_id, event_time, event_period)
        return ActionResult.accept(f"Choose: {', '.join(RESULT_CHOICES[action])}")

    def choose(self, value: str) -> ActionResult:
        """Answer the step the open flow is waiting on.

        Parameters
        ----------
        value : str
            Result, team (``"ours"``/``"theirs"``), player id,
            :data:`OWN_GOAL` or goal method, depending on the step.

        Returns
        -------
        ActionResult
            Carries the emitted event when the choice completed a flow.
        """
        flow = self.flow
        if isinstance(flow, ResultChoice):
            return self._choose_result(flow, value)
        if isinstance(flow, GoalFlow):
            return self._choose_goal(flow, value)
        if isinstance(flow, SetPieceFlow):
            return self._choose_set_piece(flow, value)
        return self._reject("choose", "Select an action first")

    def confirm(self) -> ActionResult:
        """Confirm a fully resolved goal.

        Returns
        -------
        ActionResult
            Carries the goal event, logged at the time the goal was pressed.
            The clock stays paused.
        """
        flow = self.flow
        if not isinstance(flow, GoalFlow) or flow.step != "confirm":
            return self._reject("confirm", "Nothing to confirm")

        author: Optional[Player] = None
        if flow.is_opponent_goal:
            payload = GoalPayload("normal", True, flow.method)
            name: Optional[str] = OPPONENT_NAME
        elif flow.own_goal:
            payload = GoalPayload("contra", False, flow.method)
            name = OWN_GOAL_NAME
        else:
            author = self.team.get_player(flow.author_id or "")
            payload = GoalPayload("normal", False, flow.method)
            name = None

        self.flow = IDLE
        event = self._emit(payload, flow.time, flow.period, author, player_name=name)
        assist = self.log.link_assist(event)
        if assist is not None:
            self.debugger.log_capture_event(
                assist.period, assist.time, "assist", f"{assist.player_name} assisted {event.player_name}"
            )
        return ActionResult.accept(f"Goal! {self.snapshot().score}", event)

    def cancel(self) -> ActionResult:
        """Abandon the open flow.

        Goals and set pieces restart the clock when it was running before the
        control was pressed; a pending pass keeps its event without receiver.

        Returns
        -------
        ActionResult
            Rejection when no flow is open.
        """
        flow = self.flow
        if isinstance(flow, Idle):
            return self._reject("cancel", "Nothing to cancel")
        self.flow = IDLE
        if isinstance(flow, (GoalFlow, SetPieceFlow)) and flow.resume_clock and not self.is_ended:
            if self.clock.start():
                self._log_clock()
        return ActionResult.accept("Cancelled")

    # ------------------------------------------------------------------
    # Corrections and hand-off
    # ------------------------------------------------------------------
    def correct_event(
        self,
        event_id: str,
        time: Optional[int] = None,
        period: Optional[str] = None,
        payload: Optional[EventPayload] = None,
        player_id: Optional[str] = None,
    ) -> ActionResult:
        """Edit a logged event; score, fouls and assists are rebuilt.

        Parameters
        ----------
        event_id : str
            Event to edit.
        time : int | None, optional
            New time in seconds.
        period : str | None, optional
            New period label.
        payload : EventPayload | None, optional
            New payload.
        player_id : str | None, optional
            New acting player.

        Returns
        -------
        ActionResult
            Carries the replacement event.
        """
        player_name = None
        if player_id is not None:
            player = self.team.get_player(player_id)
            if player is None:
                return self._reject("correct_event", f"Unknown player '{player_id}'")
            player_name = player.name

        result = self.log.correct(event_id, time, period, payload, player_id, player_name)
        if result.rejected:
            self.debugger.log_validation("correct_event", result.message)
            return result

        event = result.event
        self.debugger.log_capture_event(
            event.period, event.time, "correction", f"{event.event_id}: {event.tipo} - {event.subtipo}"
        )
        if isinstance(self.flow, AwaitingReceiver) and self.flow.pass_event_id == event_id:
            if not isinstance(event.payload, PassPayload) or event.payload.result != "correct":
                self.flow = IDLE
        return result

    def remove_event(self, event_id: str) -> ActionResult:
        """Delete a logged event; score, fouls and assists are rebuilt.

        Parameters
        ----------
        event_id : str
            Event to delete.

        Returns
        -------
        ActionResult
            Carries the removed event.
        """
        result = self.log.remove(event_id)
        if result.rejected:
            self.debugger.log_validation("remove_event", result.message)
            return result
        if isinstance(self.flow, AwaitingReceiver) and self.flow.pass_event_id == event_id:
            self.flow = IDLE
        self.debugger.log_capture_event(result.event.period, result.event.time, "removal", event_id)
        return result

    def build_record(self, user: Optional[RecordingUser] = None) -> Dict[str, object]:
        """Build the normalized match record for the persistence gateway.

        Parameters
        ----------
        user : RecordingUser | None, optional
            Operator credited on every event.

        Returns
        -------
        Dict[str, object]
            Camel-cased match record.
        """
        starting = self.lineup.starting_lineup
        return stats.build_match_record(
            self.match,
            self.log.events,
            user=user,
            lineup=starting if self.lineup.is_confirmed else None,
            bench=[p.player_id for p in self.team.players if p.player_id not in starting],
            possession_start=self.lineup.possession_start,
            substitutions=self.lineup.substitutions,
            possession=(self.possession.seconds_with, self.possession.seconds_without)
            if not self.is_manual
            else None,
        ).to_dict()

    def end_collection(
        self,
        gateway: PersistenceGateway,
        identity: Optional[IdentityProvider] = None,
    ) -> ActionResult:
        """Hand the finished match to the persistence gateway.

        A gateway failure keeps the log intact so the operator can retry.

        Parameters
        ----------
        gateway : PersistenceGateway
            Destination of the match record.
        identity : IdentityProvider | None, optional
            Source of the recording user.

        Returns
        -------
        ActionResult
            Rejection when the match is not over yet or the gateway failed.
        """
        if self._collected:
            return self._reject("end_collection", "The match has already been saved")
        if self.is_manual:
            if not len(self.log):
                return self._reject("end_collection", "Record at least one event before saving")
        elif self.clock.status != "match_ended":
            return self._reject("end_collection", "End the match before saving")

        user = identity.current_user() if identity is not None else None
        record = self.build_record(user)
        try:
            gateway.save_match(record)
        except PersistenceError as exc:
            self.debugger.log_error("persistence", str(exc))
            return ActionResult.reject(f"Could not save the match: {exc}")

        self._collected = True
        self.auto_resume_at = None
        self.flow = IDLE
        self.debugger.log_capture_event(
            self.period,
            self.clock_seconds,
            "collection",
            f"Match {self.match.match_id} saved ({len(self.log)} events)",
        )
        return ActionResult.accept("Match saved")

    def close(self) -> None:
        """Release the telemetry log."""
        self.debugger.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _choose_result(self, flow: ResultChoice, value: str) -> ActionResult:
        """Complete a single-step action.

        Parameters
        ----------
        flow : ResultChoice
            Open picker.
        value : str
            Picked result.

        Returns
        -------
        ActionResult
            Carries the emitted event.
        """
        if value not in flow.options:
            return self._reject("choose", f"Invalid option '{value}'")
        player = self.team.get_player(flow.player_id)

        payload: EventPayload
        if flow.action == "card":
            if self.lineup.is_expelled(flow.player_id):
                return self._reject("choose", "The player has already been sent off")
            payload = self.lineup.record_card(
                flow.player_id, value, flow.time, flow.period, self.clock.period_index_of(flow.period)
            )
        else:
            payload = _RESULT_PAYLOADS[flow.action](value)

        self.flow = IDLE
        event = self._emit(payload, flow.time, flow.period, player)

        if isinstance(payload, PassPayload) and payload.result == "correct":
            self.flow = AwaitingReceiver(event.event_id, flow.player_id)
            return ActionResult.accept("Select the player who received the pass", event)
        if isinstance(payload, CardPayload) and payload.expelled:
            if self.selected_player_id == flow.player_id:
                self.selected_player_id = None
            self.debugger.log_lineup_change(flow.time, f"{flow.player_id} sent off", self.lineup.lineup)
        self._apply_possession_effect(payload)
        return ActionResult.accept(f"{event.tipo} - {event.subtipo}", event)

    def _choose_goal(self, flow: GoalFlow, value: str) -> ActionResult:
        """Advance the goal flow by one step.

        Parameters
        ----------
        flow : GoalFlow
            Open goal flow.
        value : str
            Team, author (or :data:`OWN_GOAL`) or method.

        Returns
        -------
        ActionResult
            Prompt for the next step.
        """
        if flow.step == "team":
            if value not in TEAM_CHOICES:
                return self._reject("choose", "Choose our goal or the opponent's")
            if value == "theirs":
                self.flow = replace(flow, is_opponent_goal=True, step="method")
                return ActionResult.accept("How was the goal conceded?")
            self.flow = replace(flow, step="author")
            return ActionResult.accept("Who scored?")

        if flow.step == "author":
            if value == OWN_GOAL:
                self.flow = replace(flow, own_goal=True, author_id=None, step="method")
                return ActionResult.accept("How was the goal scored?")
            error = self._selection_error(value)
            if error:
                return self._reject("choose", error)
            self.flow = replace(flow, author_id=value, step="method")
            return ActionResult.accept("How was the goal scored?")

        if flow.step == "method":
            if value not in flow.methods:
                return self._reject("choose", f"Unknown goal method '{value}'")
            self.flow = replace(flow, method=value, step="confirm")
            return ActionResult.accept("Confirm the goal")

        return self._reject("choose", "Confirm or cancel the goal")

    def _choose_set_piece(self, flow: SetPieceFlow, value: str) -> ActionResult:
        """Advance a free kick or penalty by one step.

        Parameters
        ----------
        flow : SetPieceFlow
            Open set-piece flow.
        value : str
            Team, kicker or result.

        Returns
        -------
        ActionResult
            Carries the emitted event once the result is picked.
        """
        if flow.step == "team":
            if value not in TEAM_CHOICES:
                return self._reject("choose", "Choose our kick or the opponent's")
            if value == "ours":
                self.flow = replace(flow, is_for_us=True, step="kicker")
                return ActionResult.accept("Who takes the kick?")
            self.flow = replace(flow, is_for_us=False, step="result")
            return ActionResult.accept("What was the result?")

        if flow.step == "kicker":
            error = self._selection_error(value)
            if error:
                return self._reject("choose", error)
            self.flow = replace(flow, kicker_id=value, step="result")
            return ActionResult.accept("What was the result?")

        if value not in SET_PIECE_RESULTS:
            return self._reject("choose", f"Invalid option '{value}'")
        kicker = self.team.get_player(flow.kicker_id) if flow.kicker_id else None
        payload_cls = FreeKickPayload if flow.action == "freeKick" else PenaltyPayload
        payload = payload_cls(
            bool(flow.is_for_us),
            value,
            kicker.player_id if kicker else None,
            kicker.name if kicker else None,
        )
        self.flow = IDLE
        event = self._emit(payload, flow.time, flow.period, kicker)
        if payload.resumes_play and flow.resume_clock and not self.is_manual:
            self.auto_resume_at = self._now() + ENGINE_CONFIG.capture.auto_resume_delay
        return ActionResult.accept(f"{event.tipo} - {event.subtipo}", event)

    def _attach_receiver(self, flow: AwaitingReceiver, receiver_id: str) -> ActionResult:
        """Record who received a pending pass and select them.

        Parameters
        ----------
        flow : AwaitingReceiver
            Pending pass.
        receiver_id : str
            Receiving player.

        Returns
        -------
        ActionResult
            Carries the updated pass.
        """
        self.flow = IDLE
        self.selected_player_id = receiver_id
        event = self.log.get(flow.pass_event_id)
        receiver = self.team.get_player(receiver_id)
        if event is None or not isinstance(event.payload, PassPayload) or receiver is None:
            return ActionResult.accept()

        updated = event.with_payload(
            replace(event.payload, receiver_id=receiver.player_id, receiver_name=receiver.name)
        )
        self.log.replace(updated)
        self.debugger.log_capture_event(
            updated.period, updated.time, "pass", f"{event.player_name} -> {receiver.name}"
        )
        return ActionResult.accept("Pass received", updated)

    def _emit(
        self,
        payload: EventPayload,
        event_time: int,
        period: str,
        player: Optional[Player] = None,
        player_name: Optional[str] = None,
        details: Optional[Dict[str, object]] = None,
    ) -> MatchEvent:
        """Append a new event to the log.

        Parameters
        ----------
        payload : EventPayload
            Event variant.
        event_time : int
            Event time in seconds.
        period : str
            Event period.
        player : Player | None, optional
            Acting player.
        player_name : str | None, optional
            Name shown when there is no acting player.
        details : Dict[str, object] | None, optional
            Free-form annotations.

        Returns
        -------
        MatchEvent
            The stored event.
        """
        self._event_counter += 1
        event = MatchEvent(
            event_id=f"{payload.kind}-{self._event_counter}",
            time=event_time,
            period=period,
            payload=payload,
            player_id=player.player_id if player else None,
            player_name=player.name if player else player_name,
            details=details or {},
        )
        self.log.append(event)
        who = f" ({event.player_name})" if event.player_name else ""
        self.debugger.log_capture_event(period, event_time, payload.kind, f"{event.tipo} - {event.subtipo}{who}")
        return event

    def _hold_clock(self) -> bool:
        """Pause the clock for a goal or set piece.

        Returns
        -------
        bool
            Whether the clock was running before.
        """
        if self.is_manual:
            return False
        self.auto_resume_at = None
        if self.clock.pause():
            self._log_clock()
            return True
        return False

    def _open_next_period(self) -> None:
        """Reset per-period capture state after the clock opened a new period."""
        # Sides swap the kickoff every period.
        kickoff = self.kickoff_possession or "with"
        state = kickoff if self.clock.period_index % 2 == 0 else opposite_possession(kickoff)
        self.possession.set_state(state)
        self.flow = IDLE
        self.selected_player_id = None
        self.corner_sector = None

    def _apply_possession_effect(self, payload: EventPayload) -> None:
        """Update possession after a tackle, save or block.

        Parameters
        ----------
        payload : EventPayload
            Payload just emitted.
        """
        if isinstance(payload, TacklePayload) and payload.result == "withoutBall":
            target: PossessionState = "without"
        elif isinstance(payload, (TacklePayload, SavePayload, BlockPayload)):
            target = "with"
        else:
            return
        if self.possession.set_state(target):
            self._log_clock()

    def _is_goalkeeper(self, player_id: str) -> bool:
        """Decide whether a player may record a save.

        Parameters
        ----------
        player_id : str
            Player to check.

        Returns
        -------
        bool
            ``True`` for the acting goalkeeper. Without a confirmed lineup the
            roster position decides.
        """
        if self.lineup.is_confirmed:
            return player_id == self.lineup.goalkeeper_id
        player = self.team.get_player(player_id)
        return bool(player and player.is_goalkeeper)

    def _readiness_error(self, action: str) -> Optional[str]:
        """Check the global preconditions for recording an action.

        Parameters
        ----------
        action : str
            Action being attempted.

        Returns
        -------
        str | None
            Operator message, or ``None`` when the action may proceed.
        """
        if self.is_ended:
            return "The match has ended"
        if not self.is_match_started:
            return "Confirm the lineup to start the match"
        if self.is_manual:
            if self.manual_time is None:
                return "Enter a valid time"
        elif action != "goal" and not self.clock.is_running:
            return "The clock is stopped"
        return None

    def _selection_error(self, player_id: str) -> Optional[str]:
        """Check whether a player may be tapped.

        Parameters
        ----------
        player_id : str
            Player being selected.

        Returns
        -------
        str | None
            Operator message, or ``None`` when the player is selectable.
        """
        if self.team.get_player(player_id) is None:
            return f"Unknown player '{player_id}'"
        if self.lineup.is_expelled(player_id):
            return "The player has been sent off"
        if not self.is_manual and not self.lineup.is_on_court(player_id):
            return "The player is not on court"
        return None

    def _lineup_change_error(self) -> Optional[str]:
        """Check the preconditions shared by lineup changes.

        Returns
        -------
        str | None
            Operator message, or ``None`` when the change may proceed.
        """
        if self.is_ended:
            return "The match has ended"
        if self.is_manual and self.manual_time is None:
            return "Enter a valid time"
        return None

    def _reject(self, action: str, message: str) -> ActionResult:
        """Log and build a rejection.

        Parameters
        ----------
        action : str
            Operation that was refused.
        message : str
            Operator-facing message.

        Returns
        -------
        ActionResult
            The rejection.
        """
        self.debugger.log_validation(action, message)
        return ActionResult.reject(message)

    def _log_clock(self) -> None:
        """Write the clock and possession state to the telemetry log."""
        self.debugger.log_clock_state(self.period, self.clock_seconds, self.clock.status, self.possession.state)
