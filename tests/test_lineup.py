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
"""Tests for lineup confirmation, substitutions, cards and expulsions."""

import pytest

from courtside.engine.lineup import LineupManager
from courtside.models.team import Team

STARTERS = ["p1", "p2", "p3", "p4", "p5"]


def _manager(team: Team) -> LineupManager:
    manager = LineupManager(team)
    assert manager.confirm_lineup(STARTERS, "us").ok
    return manager


class TestConfirmLineup:
    """Tests for starting lineup validation."""

    @pytest.mark.parametrize(
        "ids, possession, message",
        [
            (["p1", "p2", "p3", "p4"], "us", "Select exactly 5 players"),
            (["p1", "p2", "p3", "p4", "p5", "p6"], "us", "Select exactly 5 players"),
            (["p1", "p2", "p3", "p4", "p4"], "us", "A player can only be selected once"),
            (["p1", "p2", "p3", "p4", "p99"], "us", "Unknown player(s): p99"),
            (["p1", "p10", "p3", "p4", "p5"], "us", "Only one goalkeeper may start"),
            (["p1", "p2", "p3", "p4", "p5"], None, "Choose who starts with the ball"),
        ],
    )
    def test_invalid_lineups_rejected(self, team: Team, ids: list, possession: str, message: str) -> None:
        """Invalid selections are refused and leave the manager untouched."""
        manager = LineupManager(team)
        result = manager.confirm_lineup(ids, possession)
        assert result.rejected
        assert result.message == message
        assert manager.lineup == []
        assert not manager.is_confirmed

    def test_goalkeeper_moves_to_first_slot(self, team: Team) -> None:
        """The goalkeeper occupies slot 0 wherever it was picked."""
        manager = LineupManager(team)
        assert manager.confirm_lineup(["p2", "p3", "p1", "p4", "p5"], "opponent").ok
        assert manager.lineup == ["p1", "p2", "p3", "p4", "p5"]
        assert manager.goalkeeper_id == "p1"
        assert manager.starting_lineup == manager.lineup
        assert manager.possession_start == "opponent"

    def test_first_pick_keeps_goal_without_goalkeeper(self, team: Team) -> None:
        """A lineup of line players puts the first pick in goal."""
        manager = LineupManager(team)
        assert manager.confirm_lineup(["p3", "p2", "p4", "p5", "p6"], "us").ok
        assert manager.goalkeeper_id == "p3"
        assert manager.lineup[0] == "p3"

    def test_bench_is_rest_of_squad(self, team: Team) -> None:
        """The bench holds every player not on court, in roster order."""
        manager = _manager(team)
        assert [p.player_id for p in manager.bench] == ["p6", "p7", "p8", "p9", "p10"]
        assert [p.player_id for p in manager.on_court] == STARTERS


class TestSubstitutions:
    """Tests for substitutions and the goalkeeper role."""

    def test_substitution_swaps_slots(self, team: Team) -> None:
        """The incoming player takes the outgoing player's slot."""
        manager = _manager(team)
        assert manager.substitute("p3", "p6", 300, "1T").ok
        assert manager.lineup == ["p1", "p2", "p6", "p4", "p5"]
        assert manager.substitutions[-1].to_dict() == {
            "playerOutId": "p3",
            "playerInId": "p6",
            "time": 300,
            "period": "1T",
        }
        assert "p3" in [p.player_id for p in manager.bench]

    def test_substitution_requires_valid_players(self, team: Team) -> None:
        """Outgoing players must be on court and incoming ones on the bench."""
        manager = _manager(team)
        assert manager.substitute("p6", "p7", 10, "1T").rejected
        assert manager.substitute("p2", "p3", 10, "1T").rejected
        assert manager.substitutions == []

    def test_substitution_before_confirmation_rejected(self, team: Team) -> None:
        """No substitutions before the lineup exists."""
        manager = LineupManager(team)
        assert manager.substitute("p1", "p6", 0, "1T").rejected

    def test_goalkeeper_replacement_inherits_role(self, team: Team) -> None:
        """Whoever replaces the goalkeeper keeps goal (goalkeeper-in-line)."""
        manager = _manager(team)
        assert manager.substitute("p1", "p6", 900, "1T").ok
        assert manager.goalkeeper_id == "p6"
        assert manager.lineup[0] == "p6"

    def test_assign_goalkeeper(self, team: Team) -> None:
        """Any on-court player can take the goalkeeper role."""
        manager = _manager(team)
        assert manager.assign_goalkeeper("p4").ok
        assert manager.goalkeeper_id == "p4"
        assert manager.assign_goalkeeper("p9").rejected

    def test_bench_candidates_ranked_by_frequency(self, team: Team) -> None:
        """Frequently used bench players come first, then by shirt number."""
        manager = _manager(team)
        ranked = [p.player_id for p in manager.bench_candidates({"p9": 3, "p8": 1})]
        assert ranked == ["p9", "p8", "p7", "p6", "p10"]

    def test_substitution_frequency(self, team: Team) -> None:
        """Entries are counted per incoming player."""
        manager = _manager(team)
        manager.substitute("p3", "p6", 100, "1T")
        manager.substitute("p6", "p3", 200, "1T")
        manager.substitute("p3", "p6", 300, "1T")
        assert manager.substitution_frequency() == {"p6": 2, "p3": 1}


class TestCardsAndExpulsions:
    """Tests for card escalation and the expulsion slot."""

    def test_first_yellow_is_a_warning(self, team: Team) -> None:
        """A single yellow keeps the player on court."""
        manager = _manager(team)
        card = manager.record_card("p2", "yellow", 100, "1T", 0)
        assert card.card_type == "yellow"
        assert not card.expelled
        assert manager.is_on_court("p2")

    def test_second_yellow_sends_off(self, team: Team) -> None:
        """A repeated yellow becomes a second yellow and opens the slot."""
        manager = _manager(team)
        manager.record_card("p2", "yellow", 100, "1T", 0)
        card = manager.record_card("p2", "yellow", 300, "1T", 0)
        assert card.card_type == "secondYellow"
        assert card.expelled
        assert len(manager.lineup) == 4
        assert manager.is_expelled("p2")
        assert "p2" not in [p.player_id for p in manager.bench]
        slot = manager.expulsion_slot
        assert (slot.expelled_player_id, slot.expelled_at, slot.period) == ("p2", 300, "1T")

    def test_red_card_on_bench_player(self, team: Team) -> None:
        """A bench player sent off leaves no vacancy on court."""
        manager = _manager(team)
        card = manager.record_card("p8", "red", 100, "1T", 0)
        assert card.expelled
        assert manager.expulsion_slot is None
        assert "p8" not in [p.player_id for p in manager.bench]

    def test_card_for_expelled_player_raises(self, team: Team) -> None:
        """Expelled players cannot receive further cards."""
        manager = _manager(team)
        manager.record_card("p3", "red", 50, "1T", 0)
        with pytest.raises(ValueError):
            manager.record_card("p3", "yellow", 60, "1T", 0)

    def test_unknown_card_raises(self, team: Team) -> None:
        """Only known card types are recorded."""
        manager = _manager(team)
        with pytest.raises(ValueError):
            manager.record_card("p3", "blue", 60, "1T", 0)

    def test_card_history_expels(self) -> None:
        """Two yellows, a second yellow or a red amount to a sending off."""
        assert LineupManager.card_history_expels(["yellow", "yellow"])
        assert LineupManager.card_history_expels(["secondYellow"])
        assert LineupManager.card_history_expels(["red"])
        assert not LineupManager.card_history_expels(["yellow"])

    def test_unlock_after_wait(self, team: Team) -> None:
        """The slot unlocks 120 seconds after the sending off."""
        manager = _manager(team)
        manager.record_card("p2", "red", 300, "1T", 0)
        assert not manager.expulsion_unlocked(419, 0, [])
        assert manager.expulsion_unlocked(420, 0, [])

    def test_wait_does_not_carry_into_next_period(self, team: Team) -> None:
        """Clock seconds of a later period do not count towards the wait."""
        manager = _manager(team)
        manager.record_card("p2", "red", 1150, "1T", 0)
        assert not manager.expulsion_unlocked(1190, 0, [])
        assert not manager.expulsion_unlocked(500, 1, [])

    def test_unlock_on_opponent_goal(self, team: Team) -> None:
        """A goal conceded at or after the sending off unlocks the slot."""
        manager = _manager(team)
        manager.record_card("p2", "red", 300, "1T", 0)
        assert not manager.expulsion_unlocked(330, 0, [(0, 200)])
        assert manager.expulsion_unlocked(330, 0, [(0, 320)])
        assert manager.expulsion_unlocked(10, 1, [(1, 5)])

    def test_fill_expulsion(self, team: Team) -> None:
        """A bench player fills the unlocked slot and the change is recorded."""
        manager = _manager(team)
        manager.record_card("p2", "red", 300, "1T", 0)
        assert manager.fill_expulsion("p7", 310, "1T", unlocked=False).message == "The replacement is not allowed yet"
        assert manager.fill_expulsion("p2", 420, "1T", unlocked=True).rejected
        assert manager.fill_expulsion("p7", 420, "1T", unlocked=True).ok
        assert len(manager.lineup) == 5
        assert manager.expulsion_slot is None
        record = manager.substitutions[-1]
        assert (record.player_out_id, record.player_in_id, record.time) == ("p2", "p7", 420)
        assert manager.fill_expulsion("p8", 430, "1T", unlocked=True).message == "No expulsion to replace"

    def test_expelled_goalkeeper_replacement_keeps_goal(self, team: Team) -> None:
        """Filling a goalkeeper's vacancy hands the role to the newcomer."""
        manager = _manager(team)
        manager.record_card("p1", "red", 100, "1T", 0)
        assert manager.goalkeeper_id is None
        assert manager.expulsion_slot.was_goalkeeper
        assert manager.fill_expulsion("p10", 220, "1T", unlocked=True).ok
        assert manager.goalkeeper_id == "p10"
