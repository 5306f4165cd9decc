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
"""Outcome of an operator request handled by the capture engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from courtside.engine.events import MatchEvent


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Structured answer to an operator input.

    Rejected inputs never mutate the session; the message is what the
    operator is shown.

    Parameters
    ----------
    ok : bool
        Whether the input was accepted.
    message : str, optional
        Operator-facing explanation, mostly set on rejection.
    event : MatchEvent | None, optional
        Event appended or replaced by the input, when there is one.
    """

    ok: bool
    message: str = ""
    event: Optional[MatchEvent] = None

    @property
    def rejected(self) -> bool:
        """Return ``True`` when the input was refused."""
        return not self.ok

    @classmethod
    def accept(cls, message: str = "", event: Optional[MatchEvent] = None) -> "ActionResult":
        """Build an accepted result.

        Parameters
        ----------
        message : str
            Optional confirmation text.
        event : MatchEvent | None
            Event produced by the input.

        Returns
        -------
        ActionResult
            Result flagged as accepted.
        """
        return cls(True, message, event)

    @classmethod
    def reject(cls, message: str) -> "ActionResult":
        """Build a rejected result.

        Parameters
        ----------
        message : str
            Validation message for the operator.

        Returns
        -------
        ActionResult
            Result flagged as rejected.
        """
        return cls(False, message)
