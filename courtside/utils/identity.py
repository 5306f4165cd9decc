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
"""Source of the operator credited on recorded events."""
from abc import ABC, abstractmethod
from typing import Optional

from courtside.models.match import RecordingUser


class IdentityProvider(ABC):
    """Supplies the user recording the current session."""

    @abstractmethod
    def current_user(self) -> RecordingUser:
        """Return the recording user.

        Returns
        -------
        RecordingUser
            Operator name and optional id.
        """


class StaticIdentityProvider(IdentityProvider):
    """Identity provider returning a fixed user.

    Parameters
    ----------
    name : str
        Display name of the operator.
    user_id : str | None, optional
        Operator id, when known.
    """

    def __init__(self, name: str, user_id: Optional[str] = None) -> None:
        """Store the fixed user.

        Parameters
        ----------
        name : str
            Display name of the operator.
        user_id : str | None
            Operator id.
        """
        self._user = RecordingUser(name=name, user_id=user_id)

    def current_user(self) -> RecordingUser:
        """Return the fixed user.

        Returns
        -------
        RecordingUser
            The user given on construction.
        """
        return self._user
