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
"""Roster provider interface and the JSON document implementation.

The capture engine only needs a :class:`~courtside.models.team.Team` at
session start. Where the squads come from is the provider's business; the
bundled :class:`JsonRosterProvider` reads the ``data/roster.json`` schema::

    {
      "players": [{"id": "p1", "name": "...", "nickname": "...",
                   "jerseyNumber": 1, "position": "Goleiro",
                   "photoUrl": null, "isTransferred": false}],
      "teams": [{"id": "t1", "name": "...", "category": "Adulto",
                 "playerIds": ["p1", "..."]}]
    }

Teams without ``playerIds`` use every player in the document. Transferred
players never make it into a squad.
"""
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Mapping, Tuple, Union

from courtside.models.player import Player
from courtside.models.team import Team


def player_from_dict(d: Mapping) -> Player:
    """Build a ``Player`` from a roster entry.

    Parameters
    ----------
    d
        Mapping with ``id``, ``name``, ``jerseyNumber`` and ``position``, plus
        optional ``nickname`` and ``photoUrl``.

    Returns
    -------
    Player
        Validated roster entry.

    Raises
    ------
    KeyError
        When a required key is missing.
    """
    return Player(
        player_id=str(d["id"]).strip(),
        name=d["name"],
        jersey_number=int(d["jerseyNumber"]),
        position=d["position"],
        nickname=d.get("nickname") or None,
        photo_url=d.get("photoUrl") or None,
    )


def team_from_dict(d: Mapping, players: Mapping[str, Player]) -> Team:
    """Build a ``Team`` from a team entry and the parsed players.

    Parameters
    ----------
    d
        Mapping with ``id`` and ``name`` (or the Portuguese ``nome``),
        optional ``category``/``categoria`` and ``playerIds``.
    players
        Available players keyed by id.

    Returns
    -------
    Team
        Squad limited to the listed players, in listing order.
    """
    ids = d.get("playerIds")
    if ids is None:
        squad = list(players.values())
    else:
        squad = [players[str(pid).strip()] for pid in ids if str(pid).strip() in players]
    return Team(
        team_id=str(d["id"]),
        name=d.get("name") or d.get("nome") or f"Team_{d['id']}",
        players=squad,
        category=d.get("category") or d.get("categoria"),
    )


def load_roster_from_json(path: Union[str, Path]) -> Tuple[List[Player], List[Team]]:
    """Load players and teams from a roster document.

    Parameters
    ----------
    path
        Filesystem path to a document following the ``data/roster.json``
        schema.

    Returns
    -------
    tuple[List[Player], List[Team]]
        Every player listed and the teams built from them.

    Raises
    ------
    FileNotFoundError
        Raised when ``path`` does not exist.
    KeyError
        Raised when the document lacks the ``players`` or ``teams`` section.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Roster JSON not found: {path}")

    with p.open("r", encoding="utf-8") as fh:
        data = json.load(fh)

    players = [player_from_dict(entry) for entry in data["players"]]
    available: Dict[str, Player] = {
        player.player_id: player
        for player, entry in zip(players, data["players"])
        if not entry.get("isTransferred", False)
    }
    teams = [team_from_dict(entry, available) for entry in data["teams"]]
    return players, teams


class RosterProvider(ABC):
    """Source of the squads a capture session can record."""

    @abstractmethod
    def players(self) -> List[Player]:
        """List every known player.

        Returns
        -------
        List[Player]
            Players in provider order.
        """

    @abstractmethod
    def teams(self) -> List[Team]:
        """List every known team.

        Returns
        -------
        List[Team]
            Teams in provider order.
        """

    def get_team(self, team_id: str) -> Team:
        """Look up a team by id.

        Parameters
        ----------
        team_id : str
            Identifier of the team.

        Returns
        -------
        Team
            Matching team.

        Raises
        ------
        KeyError
            When no team has that id.
        """
        for team in self.teams():
            if team.team_id == team_id:
                return team
        raise KeyError(f"Unknown team '{team_id}'")


class JsonRosterProvider(RosterProvider):
    """Roster provider backed by a JSON document, read once on construction.

    Parameters
    ----------
    path : str | Path
        Location of the roster document.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        """Load the document.

        Parameters
        ----------
        path : str | Path
            Location of the roster document.
        """
        self.path = Path(path)
        self._players, self._teams = load_roster_from_json(self.path)

    def players(self) -> List[Player]:
        """List every player in the document.

        Returns
        -------
        List[Player]
            Players in document order.
        """
        return list(self._players)

    def teams(self) -> List[Team]:
        """List every team in the document.

        Returns
        -------
        List[Team]
            Teams in document order.
        """
        return list(self._teams)
