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
"""Tests for event payloads, display labels and serialisation."""

import pytest

from courtside.engine.events import (
    CardPayload,
    CornerPayload,
    FoulPayload,
    FreeKickPayload,
    GoalPayload,
    MatchEvent,
    PassPayload,
    PenaltyPayload,
    ShotPayload,
    TacklePayload,
    describe,
    post_match_action,
)


class TestPayloads:
    """Tests for payload validation and labels."""

    def test_invalid_result_rejected(self) -> None:
        """Payloads only accept their own vocabulary."""
        with pytest.raises(ValueError):
            ShotPayload("wide")
        with pytest.raises(ValueError):
            FoulPayload("for", zone="MIDDLE")
        with pytest.raises(ValueError):
            CardPayload("blue")

    def test_shot_labels(self) -> None:
        """Shots on target read as Finalização / No gol."""
        assert describe(ShotPayload("inside")) == ("Finalização", "No gol")
        assert describe(ShotPayload("post")) == ("Finalização", "Trave")

    def test_goal_labels(self) -> None:
        """Goal subtypes distinguish scored, own goals and conceded goals."""
        assert describe(GoalPayload()) == ("Gol", "A favor")
        assert describe(GoalPayload("contra")) == ("Gol", "Gol contra (adversário)")
        assert describe(GoalPayload(is_opponent_goal=True)) == ("Gol", "Sofrido")

    def test_set_piece_labels_carry_side(self) -> None:
        """Free kicks and penalties prefix the side that took them."""
        assert describe(FreeKickPayload(True, "goal")) == ("Tiro livre", "A favor - Gol")
        assert describe(PenaltyPayload(False, "saved")) == ("Pênalti", "Contra - Defendido")

    def test_set_piece_resume_results(self) -> None:
        """Only saved, wide and post kicks keep the ball live."""
        assert FreeKickPayload(True, "saved").resumes_play
        assert FreeKickPayload(True, "post").resumes_play
        assert not FreeKickPayload(True, "goal").resumes_play
        assert not PenaltyPayload(False, "noGoal").resumes_play

    def test_post_match_actions(self) -> None:
        """Payloads map onto the post-match sheet vocabulary."""
        assert post_match_action(PassPayload("correct")) == "passCorrect"
        assert post_match_action(ShotPayload("post")) == "shotOff"
        assert post_match_action(TacklePayload("counter")) == "tackleCounter"
        assert post_match_action(CornerPayload("AT_ESQ")) is None

    def test_assisted_pass_stays_a_pass_on_the_sheet(self) -> None:
        """Assists come from linked passes, never from a separate sheet action."""
        assisted = PassPayload("correct", "p4", "Lucas", is_assist=True)
        assert post_match_action(assisted) == "passCorrect"
        sheet_only = {"assist", "passTransicao", "passProgressao", "shotZonaChute"}
        payloads = [PassPayload("correct"), PassPayload("wrong"), assisted]
        payloads += [ShotPayload(result) for result in ("inside", "outside", "post", "blocked")]
        assert not {post_match_action(p) for p in payloads} & sheet_only


class TestMatchEvent:
    """Tests for the event envelope."""

    def test_type_and_labels(self) -> None:
        """The envelope exposes the payload discriminator and labels."""
        event = MatchEvent("shot-1", 60, "1T", ShotPayload("inside"), "p3", "Diego")
        assert event.type == "shot"
        assert event.tipo == "Finalização"
        assert event.subtipo == "No gol"
        assert not event.is_goal_for

    def test_goal_side_flags(self) -> None:
        """Goals know which side they count for."""
        ours = MatchEvent("goal-1", 10, "1T", GoalPayload())
        theirs = MatchEvent("goal-2", 20, "1T", GoalPayload(is_opponent_goal=True))
        assert ours.is_goal_for and not ours.is_goal_against
        assert theirs.is_goal_against and not theirs.is_goal_for

    def test_with_payload_keeps_envelope(self) -> None:
        """Swapping the payload leaves id, time and player untouched."""
        event = MatchEvent("pass-1", 30, "1T", PassPayload("correct"), "p2", "Bruno")
        updated = event.with_payload(PassPayload("correct", "p4", "Lucas"))
        assert updated.event_id == "pass-1"
        assert updated.time == 30
        assert updated.payload.receiver_id == "p4"
        assert event.payload.receiver_id is None

    def test_to_dict_pass(self) -> None:
        """Passes serialise their receiver and assist flag."""
        event = MatchEvent("pass-1", 65, "2T", PassPayload("correct", "p4", "Lucas", True), "p2", "Bruno")
        data = event.to_dict()
        assert data["id"] == "pass-1"
        assert data["type"] == "pass"
        assert data["time"] == "01:05"
        assert data["seconds"] == 65
        assert data["period"] == "2T"
        assert data["playerId"] == "p2"
        assert data["action"] == "passCorrect"
        assert data["passToPlayerId"] == "p4"
        assert data["passToPlayerName"] == "Lucas"
        assert data["isAssist"] is True
        assert "details" not in data

    def test_to_dict_goal_and_details(self) -> None:
        """Goals serialise side and method; details are copied when present."""
        event = MatchEvent(
            "goal-3", 5, "1T", GoalPayload("normal", True, "Contra-ataque"), None, "Adversário", {"note": "x"}
        )
        data = event.to_dict()
        assert data["isOpponentGoal"] is True
        assert data["goalMethod"] == "Contra-ataque"
        assert data["subtipo"] == "Sofrido"
        assert "action" not in data
        assert data["details"] == {"note": "x"}

    def test_to_dict_set_piece(self) -> None:
        """Set pieces serialise side and kicker."""
        event = MatchEvent("penalty-4", 100, "1T", PenaltyPayload(True, "post", "p4", "Lucas"), "p4", "Lucas")
        data = event.to_dict()
        assert data["isForUs"] is True
        assert data["kickerId"] == "p4"
        assert data["result"] == "post"
