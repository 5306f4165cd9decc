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
"""Structured logging utilities used to trace capture sessions."""
import time
from collections import deque
from pathlib import Path
from threading import Lock
from typing import Deque, List, Optional, Sequence, TextIO, Tuple, Union


class MatchDebugger:
    """Helper object that streams capture telemetry to disk.

    Parameters
    ----------
    output_dir : str | Path, default="debug_logs"
        Directory where new session logs are created; created automatically when missing.
    """

    def __init__(self, output_dir: Union[str, Path] = "debug_logs") -> None:
        """Initialise the debugger and start the first logging session.

        Parameters
        ----------
        output_dir : str | Path
            Filesystem directory where log files are created or appended.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log_file: Optional[TextIO] = None
        self.session_start = time.strftime("%Y%m%d_%H%M%S")
        self._lock = Lock()
        self._line_number = 1
        self._recent_events: Deque[Tuple[int, str]] = deque(maxlen=200)
        self.start_new_session()

    def start_new_session(self) -> None:
        """Start a new debug logging session."""
        if self.log_file:
            self.log_file.close()

        filename = f"capture_debug_{self.session_start}.txt"
        self.log_file = open(self.output_dir / filename, "a", encoding="utf-8")
        self.log_file.write(f"=== Capture Debug Session: {time.strftime('%Y-%m-%d %H:%M:%S')} ===\n\n")

    def log_clock_state(self, period: str, seconds: int, status: str, possession: str) -> None:
        """Log a clock transition.

        Parameters
        ----------
        period : str
            Period label such as ``"1T"``.
        seconds : int
            Elapsed seconds in the period.
        status : str
            Clock status after the transition.
        possession : str
            Current possession state (``"with"`` or ``"without"``).
        """
        self._write_log(
            "CLOCK",
            f"Period: {period} | Time: {seconds // 60:02d}:{seconds % 60:02d} | "
            f"Status: {status} | Possession: {possession}",
        )

    def log_capture_event(self, period: str, seconds: int, event_type: str, description: str) -> None:
        """Log an event appended to, edited in or removed from the event log.

        Parameters
        ----------
        period : str
            Period label of the event.
        seconds : int
            Event time in seconds.
        event_type : str
            Short label identifying the event category.
        description : str
            Human-readable summary of the event.
        """
        self._write_log(
            "CAPTURE_EVENT",
            f"Period: {period} | Time: {seconds}s | Event: {event_type} | Details: {description}",
        )

    def log_lineup_change(self, seconds: int, description: str, on_court: Sequence[str]) -> None:
        """Log a lineup confirmation, substitution or expulsion.

        Parameters
        ----------
        seconds : int
            Clock seconds when the change happened.
        description : str
            Human-readable summary of the change.
        on_court : Sequence[str]
            Player ids on court after the change.
        """
        self._write_log(
            "LINEUP",
            f"Time: {seconds}s | {description} | On court: {', '.join(on_court) or '-'}",
        )

    def log_validation(self, action: str, message: str) -> None:
        """Log an operator input that was rejected.

        Parameters
        ----------
        action : str
            Operation the operator attempted.
        message : str
            Validation message shown to the operator.
        """
        self._write_log("VALIDATION", f"Action: {action} | Message: {message}")

    def log_error(self, error_type: str, description: str) -> None:
        """Log an error or warning.

        Parameters
        ----------
        error_type : str
            Label describing the error classification.
        description : str
            Human-readable explanation of the issue.
        """
        self._write_log("ERROR", f"Type: {error_type} | Details: {description}")

    def _write_log(self, event_type: str, details: str) -> None:
        """Write a log entry to the file.

        Parameters
        ----------
        event_type : str
            Category label for the log entry.
        details : str
            Formatted message body to persist.
        """
        timestamp = time.strftime("%H:%M:%S")
        log_entry = f"[{timestamp}] {event_type}: {details}"

        with self._lock:
            line_no = self._line_number
            self._line_number += 1
            self._recent_events.append((line_no, log_entry))

            if self.log_file:
                self.log_file.write(f"{log_entry}\n")
                self.log_file.flush()

    def get_recent_events(self, limit: int = 20) -> List[str]:
        """Return the latest debug entries with line numbers for live displays.

        Parameters
        ----------
        limit : int
            Maximum number of entries to return.

        Returns
        -------
        List[str]
            Up to ``limit`` most recent log lines with prefixed line numbers.
        """
        with self._lock:
            selected = list(self._recent_events)[-limit:]
        return [f"{line_no:05d} {entry}" for line_no, entry in selected]

    def close(self) -> None:
        """Close the log file."""
        if self.log_file:
            self.log_file.close()
            self.log_file = None
