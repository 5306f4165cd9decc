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
"""Match metadata and recording-user models."""
from dataclasses import dataclass
from typing import Literal, Optional, Tuple

MatchType = Literal["normal", "extraTime"]
MatchStatus = Literal["nao_executado", "em_andamento", "encerrado"]

REGULATION_PERIODS: Tuple[str, ...] = ("1T", "2T")
EXTRA_TIME_PERIODS: Tuple[str, ...] = ("1P", "2P")


@dataclass(frozen=True)
class MatchInfo:
    """Scheduled match a capture session records.

    Parameters
    ----------
    match_id : str
        Identifier reused when the record is handed to the persistence gateway.
    opponent : str
        Opponent name.
    date : str
        Match date as ``YYYY-MM-DD``.
    competition : str | None, optional
        Competition name.
    match_type : {"normal", "extraTime"}, optional
        Whether two extra-time halves follow regulation.
    status : {"nao_executado", "em_andamento", "encerrado"}, optional
        Lifecycle status carried over from the stored match metadata.
    """

    match_id: str
    opponent: str
    date: str
    competition: Optional[str] = None
    match_type: MatchType = "normal"
    status: MatchStatus = "nao_executado"

    def __post_init__(self) -> None:
        """Validate the match type label."""
        if self.match_type not in ("normal", "extraTime"):
            raise ValueError(f"Unknown match type '{self.match_type}'")

    @property
    def periods(self) -> Tuple[str, ...]:
        """Return the ordered period labels the match is played over."""
        if self.match_type == "extraTime":
            return REGULATION_PERIODS + EXTRA_TIME_PERIODS
        return REGULATION_PERIODS


@dataclass(frozen=True)
class RecordingUser:
    """Operator recording the match, attached to every persisted event.

    Parameters
    ----------
    name : str
        Display name of the operator.
    user_id : str | None, optional
        Identifier from the identity provider, when known.
    """

    name: str
    user_id: Optional[str] = None
