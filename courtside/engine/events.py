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
"""Event domain models for the capture engine.

Every captured action is stored as a :class:`MatchEvent` envelope (id, time,
period, acting player) carrying exactly one payload variant. The payload set
is closed: each variant only holds the fields meaningful for its action, and
``payload.kind`` is the discriminator used by the log, the labels and the
stats aggregator.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Dict, Literal, Mapping, Optional, Tuple, Union

from courtside.utils.timefmt import format_clock

PassResult = Literal["correct", "wrong"]
ShotResult = Literal["inside", "outside", "post", "blocked"]
FoulTeam = Literal["for", "against"]
GoalResult = Literal["normal", "contra"]
CardType = Literal["yellow", "secondYellow", "red"]
TackleResult = Literal["withBall", "withoutBall", "counter"]
SaveResult = Literal["simple", "hard"]
BlockResult = Literal["shot", "pass"]
CourtZone = Literal["AT_ESQ", "AT_DIR", "DF_ESQ", "DF_DIR"]
SetPieceResult = Literal["goal", "saved", "outside", "post", "noGoal"]

PASS_RESULTS: Tuple[str, ...] = ("correct", "wrong")
SHOT_RESULTS: Tuple[str, ...] = ("inside", "outside", "post", "blocked")
FOUL_TEAMS: Tuple[str, ...] = ("for", "against")
CARD_TYPES: Tuple[str, ...] = ("yellow", "secondYellow", "red")
TACKLE_RESULTS: Tuple[str, ...] = ("withBall", "withoutBall", "counter")
SAVE_RESULTS: Tuple[str, ...] = ("simple", "hard")
BLOCK_RESULTS: Tuple[str, ...] = ("shot", "pass")
COURT_ZONES: Tuple[str, ...] = ("AT_ESQ", "AT_DIR", "DF_ESQ", "DF_DIR")
SET_PIECE_RESULTS: Tuple[str, ...] = ("goal", "saved", "outside", "post", "noGoal")
SET_PIECE_RESUMING_RESULTS: Tuple[str, ...] = ("saved", "outside", "post")


def _require(value: str, allowed: Tuple[str, ...], label: str) -> None:
    """Raise when ``value`` is outside its vocabulary.

    Parameters
    ----------
    value : str
        Value to validate.
    allowed : Tuple[str, ...]
        Accepted values.
    label : str
        Field name used in the error message.
    """
    if value not in allowed:
        raise ValueError(f"Invalid {label} '{value}'. Expected one of: {', '.join(allowed)}")


@dataclass(frozen=True)
class PassPayload:
    """Pass attempt, optionally linked to the teammate who received it.

    Parameters
    ----------
    result : {"correct", "wrong"}
        Whether the pass reached a teammate.
    receiver_id : str | None, optional
        Player who received a correct pass.
    receiver_name : str | None, optional
        Display name of the receiver.
    is_assist : bool, optional
        Set when a goal by the receiver followed inside the assist window.
    """

    result: PassResult
    receiver_id: Optional[str] = None
    receiver_name: Optional[str] = None
    is_assist: bool = False
    kind: ClassVar[str] = "pass"

    def __post_init__(self) -> None:
        """Validate the result vocabulary."""
        _require(self.result, PASS_RESULTS, "pass result")

    @property
    def subtype(self) -> str:
        """Return the key used for the display subtype."""
        return self.result


@dataclass(frozen=True)
class ShotPayload:
    """Shot attempt.

    Parameters
    ----------
    result : {"inside", "outside", "post", "blocked"}
        Where the shot ended up.
    """

    result: ShotResult
    kind: ClassVar[str] = "shot"

    def __post_init__(self) -> None:
        """Validate the result vocabulary."""
        _require(self.result, SHOT_RESULTS, "shot result")

    @property
    def subtype(self) -> str:
        """Return the key used for the display subtype."""
        return self.result


@dataclass(frozen=True)
class FoulPayload:
    """Foul committed by our team (``for``) or by the opponent (``against``).

    Parameters
    ----------
    foul_team : {"for", "against"}
        Side that committed the foul.
    zone : {"AT_ESQ", "AT_DIR", "DF_ESQ", "DF_DIR"} | None, optional
        Court zone where the foul happened.
    """

    foul_team: FoulTeam
    zone: Optional[CourtZone] = None
    kind: ClassVar[str] = "foul"

    def __post_init__(self) -> None:
        """Validate the team and zone vocabularies."""
        _require(self.foul_team, FOUL_TEAMS, "foul team")
        if self.zone is not None:
            _require(self.zone, COURT_ZONES, "court zone")

    @property
    def subtype(self) -> str:
        """Return the key used for the display subtype."""
        return self.foul_team


@dataclass(frozen=True)
class GoalPayload:
    """Goal scored by either side.

    ``result="contra"`` is an own goal by the opponent, credited to us without
    an author. ``is_opponent_goal`` marks goals conceded.

    Parameters
    ----------
    result : {"normal", "contra"}
        Regular goal or opponent own goal.
    is_opponent_goal : bool, optional
        ``True`` when the opponent scored.
    method : str | None, optional
        How the goal came about, from the scored or conceded vocabulary.
    """

    result: GoalResult = "normal"
    is_opponent_goal: bool = False
    method: Optional[str] = None
    kind: ClassVar[str] = "goal"

    def __post_init__(self) -> None:
        """Validate the result vocabulary."""
        _require(self.result, ("normal", "contra"), "goal result")

    @property
    def subtype(self) -> str:
        """Return the key used for the display subtype."""
        if self.is_opponent_goal:
            return "conceded"
        return self.result


@dataclass(frozen=True)
class CardPayload:
    """Card shown to one of our players.

    Parameters
    ----------
    card_type : {"yellow", "secondYellow", "red"}
        Effective card after escalation.
    expelled : bool, optional
        ``True`` when the card sent the player off.
    """

    card_type: CardType
    expelled: bool = False
    kind: ClassVar[str] = "card"

    def __post_init__(self) -> None:
        """Validate the card vocabulary."""
        _require(self.card_type, CARD_TYPES, "card type")

    @property
    def subtype(self) -> str:
        """Return the key used for the display subtype."""
        return self.card_type


@dataclass(frozen=True)
class TacklePayload:
    """Ball recovery attempt.

    Parameters
    ----------
    result : {"withBall", "withoutBall", "counter"}
        Whether the ball was won, lost, or won into a counter-attack.
    """

    result: TackleResult
    kind: ClassVar[str] = "tackle"

    def __post_init__(self) -> None:
        """Validate the result vocabulary."""
        _require(self.result, TACKLE_RESULTS, "tackle result")

    @property
    def subtype(self) -> str:
        """Return the key used for the display subtype."""
        return self.result


@dataclass(frozen=True)
class SavePayload:
    """Goalkeeper save.

    Parameters
    ----------
    result : {"simple", "hard"}
        Difficulty of the save.
    """

    result: SaveResult
    kind: ClassVar[str] = "save"

    def __post_init__(self) -> None:
        """Validate the result vocabulary."""
        _require(self.result, SAVE_RESULTS, "save result")

    @property
    def subtype(self) -> str:
        """Return the key used for the display subtype."""
        return self.result


@dataclass(frozen=True)
class BlockPayload:
    """Opponent shot or pass blocked by an outfield player.

    Parameters
    ----------
    result : {"shot", "pass"}
        What was blocked.
    """

    result: BlockResult
    kind: ClassVar[str] = "block"

    def __post_init__(self) -> None:
        """Validate the result vocabulary."""
        _require(self.result, BLOCK_RESULTS, "block result")

    @property
    def subtype(self) -> str:
        """Return the key used for the display subtype."""
        return self.result


@dataclass(frozen=True)
class CornerPayload:
    """Corner kick taken from one of the four court sectors.

    Parameters
    ----------
    zone : {"AT_ESQ", "AT_DIR", "DF_ESQ", "DF_DIR"}
        Attack/defence half combined with the left/right side.
    """

    zone: CourtZone
    kind: ClassVar[str] = "corner"

    def __post_init__(self) -> None:
        """Validate the zone vocabulary."""
        _require(self.zone, COURT_ZONES, "court zone")

    @property
    def subtype(self) -> str:
        """Return the key used for the display subtype."""
        return self.zone


@dataclass(frozen=True)
class LateralPayload:
    """Kick-in from the touchline.

    Parameters
    ----------
    zone : {"AT_ESQ", "AT_DIR", "DF_ESQ", "DF_DIR"}
        Attack/defence half combined with the left/right side.
    """

    zone: CourtZone
    kind: ClassVar[str] = "lateral"

    def __post_init__(self) -> None:
        """Validate the zone vocabulary."""
        _require(self.zone, COURT_ZONES, "court zone")

    @property
    def subtype(self) -> str:
        """Return the key used for the display subtype."""
        return self.zone


@dataclass(frozen=True)
class SetPiecePayload:
    """Shared shape of direct free kicks and penalties.

    Parameters
    ----------
    is_for_us : bool
        ``True`` when our team takes the kick.
    result : {"goal", "saved", "outside", "post", "noGoal"}
        Outcome of the kick.
    kicker_id : str | None, optional
        Our player taking the kick.
    kicker_name : str | None, optional
        Display name of the kicker.
    """

    is_for_us: bool
    result: SetPieceResult
    kicker_id: Optional[str] = None
    kicker_name: Optional[str] = None
    kind: ClassVar[str] = "setPiece"

    def __post_init__(self) -> None:
        """Validate the result vocabulary."""
        _require(self.result, SET_PIECE_RESULTS, "set piece result")

    @property
    def subtype(self) -> str:
        """Return the key used for the display subtype."""
        return self.result

    @property
    def resumes_play(self) -> bool:
        """Return ``True`` when the ball stays live after the kick."""
        return self.result in SET_PIECE_RESUMING_RESULTS


@dataclass(frozen=True)
class FreeKickPayload(SetPiecePayload):
    """Direct free kick awarded after accumulated fouls.

    Parameters
    ----------
    is_for_us : bool
        ``True`` when our team takes the kick.
    result : {"goal", "saved", "outside", "post", "noGoal"}
        Outcome of the kick.
    kicker_id : str | None, optional
        Our player taking the kick.
    kicker_name : str | None, optional
        Display name of the kicker.
    """

    kind: ClassVar[str] = "freeKick"


@dataclass(frozen=True)
class PenaltyPayload(SetPiecePayload):
    """Penalty kick.

    Parameters
    ----------
    is_for_us : bool
        ``True`` when our team takes the kick.
    result : {"goal", "saved", "outside", "post", "noGoal"}
        Outcome of the kick.
    kicker_id : str | None, optional
        Our player taking the kick.
    kicker_name : str | None, optional
        Display name of the kicker.
    """

    kind: ClassVar[str] = "penalty"


EventPayload = Union[
    PassPayload,
    ShotPayload,
    FoulPayload,
    GoalPayload,
    CardPayload,
    TacklePayload,
    SavePayload,
    BlockPayload,
    CornerPayload,
    LateralPayload,
    FreeKickPayload,
    PenaltyPayload,
]

_ZONE_LABELS = {"AT_ESQ": "AT ESQ", "AT_DIR": "AT DIR", "DF_ESQ": "DF ESQ", "DF_DIR": "DF DIR"}
_SET_PIECE_LABELS = {
    "goal": "Gol",
    "saved": "Defendido",
    "outside": "Pra fora",
    "post": "Trave",
    "noGoal": "Sem gol",
}

EVENT_LABELS: Dict[str, Tuple[str, Dict[str, str]]] = {
    "pass": ("Passe", {"correct": "Certo", "wrong": "Errado"}),
    "shot": ("Finalização", {"inside": "No gol", "outside": "Pra fora", "post": "Trave", "blocked": "Bloqueada"}),
    "foul": ("Falta", {"for": "Cometida", "against": "Sofrida"}),
    "goal": ("Gol", {"normal": "A favor", "contra": "Gol contra (adversário)", "conceded": "Sofrido"}),
    "card": ("Cartão", {"yellow": "Amarelo", "secondYellow": "Segundo amarelo", "red": "Vermelho"}),
    "tackle": ("Desarme", {"withBall": "Com posse", "withoutBall": "Sem posse", "counter": "Contra-ataque"}),
    "save": ("Defesa", {"simple": "Simples", "hard": "Difícil"}),
    "block": ("Bloqueio", {"shot": "Chute", "pass": "Passe"}),
    "corner": ("Escanteio", _ZONE_LABELS),
    "lateral": ("Lateral", _ZONE_LABELS),
    "freeKick": ("Tiro livre", _SET_PIECE_LABELS),
    "penalty": ("Pênalti", _SET_PIECE_LABELS),
}

# Action names understood by the post-match dashboards. Sheet-only tallies
# (assist, passTransicao, passProgressao, shotZonaChute) have no payload here.
_POST_MATCH_ACTIONS: Dict[Tuple[str, str], str] = {
    ("goal", "normal"): "goal",
    ("pass", "correct"): "passCorrect",
    ("pass", "wrong"): "passWrong",
    ("shot", "inside"): "shotOn",
    ("shot", "outside"): "shotOff",
    ("shot", "post"): "shotOff",
    ("foul", "for"): "falta",
    ("tackle", "withBall"): "tackleWithBall",
    ("tackle", "withoutBall"): "tackleWithoutBall",
    ("tackle", "counter"): "tackleCounter",
    ("save", "simple"): "save",
    ("save", "hard"): "save",
}


def describe(payload: EventPayload) -> Tuple[str, str]:
    """Return the display type and subtype labels for a payload.

    Parameters
    ----------
    payload : EventPayload
        Payload to describe.

    Returns
    -------
    tuple[str, str]
        ``(tipo, subtipo)`` labels. Set pieces prefix the subtype with the
        side that took the kick.
    """
    tipo, subtypes = EVENT_LABELS[payload.kind]
    subtipo = subtypes.get(payload.subtype, payload.subtype)
    if isinstance(payload, SetPiecePayload):
        side = "A favor" if payload.is_for_us else "Contra"
        subtipo = f"{side} - {subtipo}"
    return tipo, subtipo


def post_match_action(payload: EventPayload) -> Optional[str]:
    """Map a payload onto the post-match sheet action vocabulary.

    Parameters
    ----------
    payload : EventPayload
        Payload to classify.

    Returns
    -------
    str | None
        Action name such as ``"passCorrect"``, or ``None`` when the sheet has
        no equivalent.
    """
    return _POST_MATCH_ACTIONS.get((payload.kind, payload.subtype))


@dataclass(frozen=True)
class MatchEvent:
    """Snapshot of one captured action.

    Parameters
    ----------
    event_id : str
        Identifier unique within the session.
    time : int
        Seconds elapsed in ``period`` when the action happened.
    period : str
        Period label, for example ``"1T"``.
    payload : EventPayload
        Variant-specific data; ``payload.kind`` is the event type.
    player_id : str | None, optional
        Our player who performed the action, when there is one.
    player_name : str | None, optional
        Display name of that player.
    details : Mapping[str, Any], optional
        Free-form annotations (for example ``{"source": "sector"}``).
    """

    event_id: str
    time: int
    period: str
    payload: EventPayload
    player_id: Optional[str] = None
    player_name: Optional[str] = None
    details: Mapping[str, Any] = field(default_factory=dict)

    @property
    def type(self) -> str:
        """Return the event type discriminator."""
        return self.payload.kind

    @property
    def tipo(self) -> str:
        """Return the display type label."""
        return describe(self.payload)[0]

    @property
    def subtipo(self) -> str:
        """Return the display subtype label."""
        return describe(self.payload)[1]

    @property
    def is_goal_for(self) -> bool:
        """Return ``True`` for goals credited to our team."""
        return isinstance(self.payload, GoalPayload) and not self.payload.is_opponent_goal

    @property
    def is_goal_against(self) -> bool:
        """Return ``True`` for goals conceded."""
        return isinstance(self.payload, GoalPayload) and self.payload.is_opponent_goal

    def with_payload(self, payload: EventPayload) -> "MatchEvent":
        """Return a copy of the event carrying a different payload.

        Parameters
        ----------
        payload : EventPayload
            Replacement payload.

        Returns
        -------
        MatchEvent
            New event with the same envelope.
        """
        return replace(self, payload=payload)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the event into the normalized post-match log shape.

        Returns
        -------
        Dict[str, Any]
            Camel-cased mapping consumed by the persistence gateway.
        """
        tipo, subtipo = describe(self.payload)
        data: Dict[str, Any] = {
            "id": self.event_id,
            "type": self.type,
            "time": format_clock(self.time),
            "seconds": self.time,
            "period": self.period,
            "playerId": self.player_id,
            "playerName": self.player_name,
            "tipo": tipo,
            "subtipo": subtipo,
        }
        action = post_match_action(self.payload)
        if action:
            data["action"] = action

        payload = self.payload
        if isinstance(payload, PassPayload):
            data.update(
                result=payload.result,
                passToPlayerId=payload.receiver_id,
                passToPlayerName=payload.receiver_name,
                isAssist=payload.is_assist,
            )
        elif isinstance(payload, FoulPayload):
            data.update(foulTeam=payload.foul_team, zone=payload.zone)
        elif isinstance(payload, GoalPayload):
            data.update(result=payload.result, isOpponentGoal=payload.is_opponent_goal, goalMethod=payload.method)
        elif isinstance(payload, CardPayload):
            data.update(cardType=payload.card_type, expelled=payload.expelled)
        elif isinstance(payload, (CornerPayload, LateralPayload)):
            data.update(result=payload.zone, zone=payload.zone)
        elif isinstance(payload, SetPiecePayload):
            data.update(
                result=payload.result,
                isForUs=payload.is_for_us,
                kickerId=payload.kicker_id,
                kickerName=payload.kicker_name,
            )
        else:
            data["result"] = payload.result

        if self.details:
            data["details"] = dict(self.details)
        return data
