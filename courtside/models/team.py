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
"""Team and squad domain models."""
from dataclasses import dataclass
from typing import Dict, List, Optional

from courtside.engine.config import ENGINE_CONFIG
from courtside.models.player import Player


@dataclass
class Team:
    """Squad available to the recording team for one match.

    Parameters
    ----------
    team_id : str
        Unique identifier for the team.
    name : str
        Display name for the squad.
    players : List[Player]
        Complete roster available to the team.
    category : str | None, optional
        Age or competition category (for example ``"Sub-20"``).
    """

    team_id: str
    name: str
    players: List[Player]
    category: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate that the roster can field a lineup and ids are unique."""
        if len(self.players) < ENGINE_CONFIG.capture.lineup_size:
            raise ValueError(f"Team must have at least {ENGINE_CONFIG.capture.lineup_size} players")
        ids = [p.player_id for p in self.players]
        if len(set(ids)) != len(ids):
            raise ValueError("Player ids must be unique within a team")

    def get_player(self, player_id: str) -> Optional[Player]:
        """Look up a roster entry by id.

        Parameters
        ----------
        player_id : str
            Identifier of the player to find.

        Returns
        -------
        Player | None
            Matching player, or ``None`` when the id is not on the roster.
        """
        return self.players_by_id().get(player_id)

    def players_by_id(self) -> Dict[str, Player]:
        """Index the roster by player id.

        Returns
        -------
        Dict[str, Player]
            Mapping from player id to roster entry.
        """
        return {p.player_id: p for p in self.players}

    def get_players_by_position(self, position: str) -> List[Player]:
        """Get all players registered in a given position.

        Parameters
        ----------
        position : str
            Position label to filter by (for example ``"Ala"``).

        Returns
        -------
        List[Player]
            Players on the roster whose position matches ``position``.
        """
        return [p for p in self.players if p.position == position]
