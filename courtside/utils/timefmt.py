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
"""Helpers for the operator's digit-only time input and clock display.

Post-match capture asks the operator to type the match time as bare digits
(``"0125"`` for 01:25) so the sheet can be filled quickly on a numeric
keypad. The digit count decides how the value is read:

* one digit is a number of seconds (``"7"`` is 00:07),
* two digits are whole minutes (``"12"`` is 12:00),
* three digits are ``M:SS`` (``"125"`` is 01:25),
* four digits are ``MM:SS`` (``"0100"`` is 01:00).

Anything beyond four digits is ignored, non-digits are stripped.
"""
import re
from typing import Optional

_NON_DIGITS = re.compile(r"\D")


def parse_manual_time(raw: str) -> Optional[int]:
    """Convert a digit string typed by the operator into match seconds.

    Parameters
    ----------
    raw : str
        Operator input. Non-digit characters are ignored and only the first
        four digits are considered.

    Returns
    -------
    int | None
        Elapsed seconds, or ``None`` when the input is empty or the minutes or
        seconds component falls outside ``0..59``.
    """
    digits = _NON_DIGITS.sub("", raw or "")[:4]
    if not digits:
        return None

    if len(digits) == 1:
        minutes, seconds = 0, int(digits)
    elif len(digits) == 2:
        minutes, seconds = int(digits), 0
    elif len(digits) == 3:
        minutes, seconds = int(digits[0]), int(digits[1:])
    else:
        minutes, seconds = int(digits[:2]), int(digits[2:])

    if not (0 <= minutes <= 59 and 0 <= seconds <= 59):
        return None
    return minutes * 60 + seconds


def format_clock(seconds: int) -> str:
    """Render elapsed seconds as ``MM:SS``.

    Parameters
    ----------
    seconds : int
        Non-negative number of seconds.

    Returns
    -------
    str
        Zero-padded minutes and seconds, for example ``"01:05"``.
    """
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def parse_clock(text: str) -> Optional[int]:
    """Parse an ``MM:SS`` label back into seconds.

    Parameters
    ----------
    text : str
        Clock label such as ``"12:30"``.

    Returns
    -------
    int | None
        Seconds represented by the label, or ``None`` when it is malformed.
    """
    match = re.fullmatch(r"\s*(\d{1,3}):(\d{2})\s*", text or "")
    if not match:
        return None
    minutes, seconds = int(match.group(1)), int(match.group(2))
    if seconds > 59:
        return None
    return minutes * 60 + seconds
