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
"""Domain model representing a futsal squad member."""
from dataclasses import dataclass
from typing import Optional, Tuple

POSITIONS: Tuple[str, ...] = ("Goleiro", "Fixo", "Ala", "Pivô")
GOALKEEPER_POSITION = "Goleiro"


@dataclass(frozen=True)
class Player:
    """Roster entry supplied by the roster provider.

    Parameters
    ----------
    player_id : str
        Unique identifier for the player.
    name : str
        Full player name.
    jersey_number : int
        Shirt number shown on the capture buttons.
    position : str
        One of ``Goleiro``, ``Fixo``, ``Ala`` or ``Pivô``.
    nickname : str | None, optional
        Short name preferred on the capture screen.
    photo_url : str | None, optional
        Location of the player's photo, when the roster provides one.
    """

    player_id: str
    name: str
    jersey_number: int
    position: str  # Goleiro, Fixo, Ala, Pivô
    nickname: Optional[str] = None
    photo_url: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the position label and shirt number."""
        if self.position not in POSITIONS:
            raise ValueError(f"Unknown position '{self.position}'. Known positions: {', '.join(POSITIONS)}")
        if self.jersey_number < 0:
            raise ValueError("jersey_number must be zero or positive")

    @property
    def is_goalkeeper(self) -> bool:
        """Return ``True`` when the player is registered as a goalkeeper."""
        return self.position == GOALKEEPER_POSITION

    @property
    def display_name(self) -> str:
        """Return the nickname when present, otherwise the full name."""
        return self.nickname or self.name
