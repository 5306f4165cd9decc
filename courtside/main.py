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
"""Entry point replaying a scripted capture session from JSON.

A session script lists the operator inputs of one match in order::

    {
      "match": {"id": "m1", "opponent": "Rivais FC", "date": "2025-03-01"},
      "mode": "realtime",
      "team": "t1",
      "steps": [
        {"op": "confirm_lineup", "args": {"player_ids": [...], "possession_start": "us"}},
        {"op": "start_clock"},
        {"op": "tick", "args": {"seconds": 65}},
        {"op": "select_action", "args": {"action": "goal"}}
      ]
    }

``wait`` steps hand the clock to :class:`LiveClockRunner` for a number of
wall-clock seconds, scaled by ``--speed``.
"""
import argparse
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from courtside.engine.capture import CaptureEngine
from courtside.engine.outcome import ActionResult
from courtside.engine.ticker import LiveClockRunner
from courtside.models.match import MatchInfo
from courtside.utils.debug import MatchDebugger
from courtside.utils.identity import StaticIdentityProvider
from courtside.utils.persistence import JsonFilePersistenceGateway
from courtside.utils.roster import JsonRosterProvider
from courtside.utils.timefmt import format_clock

SCRIPT_OPERATIONS = (
    "confirm_lineup",
    "start_clock",
    "pause_clock",
    "end_period",
    "toggle_possession",
    "substitute",
    "fill_expulsion",
    "assign_goalkeeper",
    "set_manual_time",
    "arm_corner_sector",
    "select_player",
    "select_action",
    "choose",
    "confirm",
    "cancel",
    "remove_event",
)


def match_from_dict(d: Mapping[str, Any]) -> MatchInfo:
    """Build match metadata from a script's ``match`` block.

    Parameters
    ----------
    d
        Mapping with ``id``, ``opponent`` and ``date``, plus optional
        ``competition``, ``matchType`` and ``status``.

    Returns
    -------
    MatchInfo
        Parsed metadata.
    """
    return MatchInfo(
        match_id=str(d["id"]),
        opponent=d["opponent"],
        date=d["date"],
        competition=d.get("competition"),
        match_type=d.get("matchType", "normal"),
        status=d.get("status", "nao_executado"),
    )


def apply_step(engine: CaptureEngine, step: Mapping[str, Any], runner: LiveClockRunner) -> ActionResult:
    """Replay one scripted operator input.

    Parameters
    ----------
    engine : CaptureEngine
        Session receiving the input.
    step : Mapping[str, Any]
        ``{"op": name, "args": {...}}``.
    runner : LiveClockRunner
        Clock driver used by ``wait`` steps.

    Returns
    -------
    ActionResult
        Engine answer, or a rejection for unknown operations.
    """
    op = step.get("op", "")
    args: Dict[str, Any] = dict(step.get("args") or {})

    if op == "tick":
        applied = engine.tick(int(args.get("seconds", 1)))
        return ActionResult.accept(f"+{applied}s")
    if op == "wait":
        applied = runner.run(float(args.get("seconds", 1.0)))
        return ActionResult.accept(f"+{applied}s")
    if op not in SCRIPT_OPERATIONS:
        return ActionResult.reject(f"Unknown operation '{op}'")
    return getattr(engine, op)(**args)


def run_script(
    engine: CaptureEngine,
    steps: Sequence[Mapping[str, Any]],
    runner: LiveClockRunner,
) -> List[ActionResult]:
    """Replay a list of steps, printing every rejection.

    Parameters
    ----------
    engine : CaptureEngine
        Session receiving the inputs.
    steps : Sequence[Mapping[str, Any]]
        Scripted inputs in order.
    runner : LiveClockRunner
        Clock driver used by ``wait`` steps.

    Returns
    -------
    List[ActionResult]
        One answer per step.
    """
    results = []
    for number, step in enumerate(steps, start=1):
        result = apply_step(engine, step, runner)
        if result.rejected:
            print(f"Step {number} ({step.get('op')}): {result.message}")
        results.append(result)
    return results


def print_session_status(engine: CaptureEngine) -> None:
    """Print the score, clock and event summary of a session.

    Parameters
    ----------
    engine : CaptureEngine
        Session to summarise.
    """
    session = engine.snapshot()
    print(f"\n{engine.team.name} {session.score} {engine.match.opponent}")
    print(f"{session.period} {format_clock(session.clock_seconds)} ({session.clock_status})")
    if not engine.is_manual:
        print(f"Possession: {session.possession_seconds_with}s with / {session.possession_seconds_without}s without")
    for event in engine.events:
        who = f" {event.player_name}" if event.player_name else ""
        print(f"  {event.period} {format_clock(event.time)} {event.tipo} - {event.subtipo}{who}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Replay a session script and persist the resulting match record.

    Parameters
    ----------
    argv : Sequence[str] | None
        Command-line arguments; ``sys.argv`` is used when omitted.

    Returns
    -------
    int
        Process exit code, non-zero when the record could not be saved.
    """
    parser = argparse.ArgumentParser(description="Replay a futsal capture session and save the match record")
    parser.add_argument("--script", type=str, default="data/demo_session.json", help="Path to the session script")
    parser.add_argument("--roster", type=str, default="data/roster.json", help="Path to the roster document")
    parser.add_argument("--team", type=str, default=None, help="Team id (defaults to the script's, then the first)")
    parser.add_argument("--output", type=str, default="matches", help="Directory for saved match records")
    parser.add_argument("--debug-dir", type=str, default="debug_logs", help="Directory for capture telemetry")
    parser.add_argument("--operator", type=str, default="Analista", help="Name credited on recorded events")
    parser.add_argument("--speed", type=float, default=1.0, help="Clock speed multiplier for wait steps")
    args = parser.parse_args(argv)

    with Path(args.script).open("r", encoding="utf-8") as fh:
        script = json.load(fh)

    provider = JsonRosterProvider(args.roster)
    team_id = args.team or script.get("team")
    team = provider.get_team(team_id) if team_id else provider.teams()[0]

    engine = CaptureEngine(
        match_from_dict(script["match"]),
        team,
        mode=script.get("mode", "realtime"),
        debugger=MatchDebugger(args.debug_dir),
    )
    runner = LiveClockRunner(engine, speed=args.speed)
    try:
        run_script(engine, script.get("steps", []), runner)
        print_session_status(engine)

        gateway = JsonFilePersistenceGateway(args.output)
        result = engine.end_collection(gateway, StaticIdentityProvider(args.operator))
        if result.rejected:
            print(f"\nMatch not saved: {result.message}")
            return 1
        print(f"\nMatch record written to {gateway.path_for(engine.match.match_id)}")
        return 0
    finally:
        engine.close()


if __name__ == "__main__":
    raise SystemExit(main())
