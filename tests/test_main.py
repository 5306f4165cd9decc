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
"""Tests for the scripted session entry point."""

import json
from pathlib import Path

from courtside.engine.capture import CaptureEngine
from courtside.engine.ticker import LiveClockRunner
from courtside.main import apply_step, main, match_from_dict, run_script

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def _run_main(tmp_path: Path, script: Path) -> int:
    return main(
        [
            "--script",
            str(script),
            "--roster",
            str(DATA_DIR / "roster.json"),
            "--output",
            str(tmp_path / "matches"),
            "--debug-dir",
            str(tmp_path / "debug_logs"),
            "--operator",
            "Tester",
        ]
    )


def test_demo_session_is_saved(tmp_path: Path, capsys) -> None:
    """The bundled demo replays cleanly and writes its match record."""
    assert _run_main(tmp_path, DATA_DIR / "demo_session.json") == 0
    out = capsys.readouterr().out
    assert "Step" not in out
    assert "Vinte e Um Futsal 1 x 1 Rivais FC" in out

    record = json.loads((tmp_path / "matches" / "match_demo-001.json").read_text(encoding="utf-8"))
    assert (record["goalsFor"], record["goalsAgainst"], record["result"]) == (1, 1, "E")
    assert len(record["postMatchEventLog"]) == 10
    assert record["postMatchEventLog"][0]["isAssist"] is True
    assert record["playerStats"]["p2"]["assists"] == 1
    assert record["substitutionHistory"] == [{"playerOutId": "p5", "playerInId": "p6", "time": 537, "period": "1T"}]
    assert record["lineup"]["players"] == ["p1", "p2", "p3", "p4", "p5"]
    assert all(e["recordedByName"] == "Tester" for e in record["postMatchEventLog"])
    assert record["possessionSecondsWith"] + record["possessionSecondsWithout"] == 2400


def test_unfinished_match_is_not_saved(tmp_path: Path, capsys) -> None:
    """A realtime script that never ends the match exits non-zero."""
    script = tmp_path / "short.json"
    script.write_text(
        json.dumps(
            {
                "match": {"id": "m2", "opponent": "Rivais FC", "date": "2025-03-08"},
                "steps": [
                    {
                        "op": "confirm_lineup",
                        "args": {"player_ids": ["p1", "p2", "p3", "p4", "p5"], "possession_start": "opponent"},
                    },
                    {"op": "start_clock"},
                    {"op": "tick", "args": {"seconds": 90}},
                ],
            }
        ),
        encoding="utf-8",
    )
    assert _run_main(tmp_path, script) == 1
    assert "End the match before saving" in capsys.readouterr().out
    assert not (tmp_path / "matches" / "match_m2.json").exists()


def test_manual_script(tmp_path: Path) -> None:
    """Manual scripts type times instead of driving the clock."""
    script = tmp_path / "manual.json"
    script.write_text(
        json.dumps(
            {
                "match": {"id": "m3", "opponent": "Rivais FC", "date": "2025-03-15"},
                "mode": "manual",
                "team": "t1",
                "steps": [
                    {"op": "set_manual_time", "args": {"raw": "0100"}},
                    {"op": "select_player", "args": {"player_id": "p9"}},
                    {"op": "select_action", "args": {"action": "shot"}},
                    {"op": "choose", "args": {"value": "inside"}},
                ],
            }
        ),
        encoding="utf-8",
    )
    assert _run_main(tmp_path, script) == 0
    record = json.loads((tmp_path / "matches" / "match_m3.json").read_text(encoding="utf-8"))
    event = record["postMatchEventLog"][0]
    assert (event["seconds"], event["tipo"], event["subtipo"]) == (60, "Finalização", "No gol")
    assert "possessionSecondsWith" not in record


def test_unknown_operation_rejected(engine: CaptureEngine, capsys) -> None:
    """Scripts can only call whitelisted engine operations."""
    runner = LiveClockRunner(engine)
    assert apply_step(engine, {"op": "close"}, runner).rejected
    results = run_script(engine, [{"op": "start_clock"}, {"op": "build_record"}], runner)
    assert [r.ok for r in results] == [False, False]
    out = capsys.readouterr().out
    assert "Step 1 (start_clock): Confirm the lineup to start the match" in out
    assert "Unknown operation 'build_record'" in out


def test_match_from_dict_defaults() -> None:
    """Optional match fields fall back to a normal, unrecorded match."""
    match = match_from_dict({"id": 7, "opponent": "Rivais FC", "date": "2025-03-01"})
    assert match.match_id == "7"
    assert match.match_type == "normal"
    assert match.status == "nao_executado"
    assert match.competition is None
