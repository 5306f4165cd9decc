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
"""Persistence gateway interface and a JSON file implementation.

The capture engine hands exactly one match record to the gateway when the
operator ends collection. Retrying is the caller's decision: a failing gateway
raises :class:`PersistenceError` and the session keeps its log.
"""
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Mapping, Union


class PersistenceError(Exception):
    """Raised when a match record could not be stored."""


class PersistenceGateway(ABC):
    """Destination for finished match records."""

    @abstractmethod
    def save_match(self, record: Mapping[str, Any]) -> None:
        """Store one match record.

        Parameters
        ----------
        record : Mapping[str, Any]
            Camel-cased record built by the stats aggregator.

        Raises
        ------
        PersistenceError
            When the record could not be stored.
        """


class JsonFilePersistenceGateway(PersistenceGateway):
    """Write each record to ``<output_dir>/match_<id>.json``.

    Parameters
    ----------
    output_dir : str | Path, default="matches"
        Directory receiving the records; created when missing.
    """

    def __init__(self, output_dir: Union[str, Path] = "matches") -> None:
        """Remember the output directory.

        Parameters
        ----------
        output_dir : str | Path
            Directory receiving the records.
        """
        self.output_dir = Path(output_dir)

    def path_for(self, match_id: str) -> Path:
        """Return the file a match record is written to.

        Parameters
        ----------
        match_id : str
            Match identifier.

        Returns
        -------
        Path
            Target file path.
        """
        return self.output_dir / f"match_{match_id}.json"

    def save_match(self, record: Mapping[str, Any]) -> None:
        """Write the record as pretty-printed UTF-8 JSON.

        Parameters
        ----------
        record : Mapping[str, Any]
            Match record with an ``id`` key.

        Raises
        ------
        PersistenceError
            When the record has no id or the file cannot be written.
        """
        match_id = record.get("id")
        if not match_id:
            raise PersistenceError("Match record has no id")
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with self.path_for(str(match_id)).open("w", encoding="utf-8") as fh:
                json.dump(dict(record), fh, ensure_ascii=False, indent=2)
        except (OSError, TypeError) as exc:
            raise PersistenceError(f"Could not write match {match_id}: {exc}") from exc

    def load_match(self, match_id: str) -> Dict[str, Any]:
        """Read a stored record back.

        Parameters
        ----------
        match_id : str
            Match identifier.

        Returns
        -------
        Dict[str, Any]
            The stored record.

        Raises
        ------
        FileNotFoundError
            When no record was stored for ``match_id``.
        """
        with self.path_for(match_id).open("r", encoding="utf-8") as fh:
            return json.load(fh)
