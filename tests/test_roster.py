"""
Tests for roster, settings and reset operations.
"""
import copy
import random

import pytest

from americano.exceptions import EmptyName, DuplicateName, PlayerInActiveMatch
from americano.functions import generate_next_round, submit_match_score, player_name
from americano.models import ScoreRow, Settings, Tournament
from americano.roster import (
    add_player, remove_player, shuffle_order, update_settings, reset_tournament,
)


class TestAddPlayer:

    def test_adds_trimmed_player_at_back(self, make_tournament):
        t = make_tournament(["A", "B"])
        p = add_player(t, "  Carla ")

        assert p.name == "Carla"
        assert t.players[-1] == p
        assert t.order == ["A", "B", p.id]
        assert t.scores[p.id] == ScoreRow(points=0, matches_played=0)

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_empty_name(self, name):
        t = Tournament()
        with pytest.raises(EmptyName):
            add_player(t, name)
        assert t == Tournament()

    def test_duplicate_name_is_case_insensitive(self):
        t = Tournament()
        add_player(t, "Alice")
        before = copy.deepcopy(t)
        with pytest.raises(DuplicateName):
            add_player(t, " alice ")
        assert t == before

    def test_ids_are_unique(self):
        t = Tournament()
        ids = {add_player(t, f"player {i}").id for i in range(20)}
        assert len(ids) == 20


class TestRemovePlayer:

    def test_unknown_id_is_noop(self, make_tournament):
        t = make_tournament(["A", "B", "C", "D"])
        before = copy.deepcopy(t)
        assert remove_player(t, "nobody") is None
        assert t == before

    def test_cascades_to_order_and_scores(self, make_tournament):
        t = make_tournament(["A", "B", "C", "D"])
        t.ensure_score_row("B").points = 12
        removed = remove_player(t, "B")

        assert removed.id == "B"
        assert t.player_ids() == ["A", "C", "D"]
        assert t.order == ["A", "C", "D"]
        assert "B" not in t.scores

    def test_player_in_live_match_is_protected(self, make_tournament):
        t = make_tournament(["A", "B", "C", "D"])
        generate_next_round(t)
        before = copy.deepcopy(t)
        with pytest.raises(PlayerInActiveMatch):
            remove_player(t, "A")
        assert t == before

    def test_sitting_out_player_can_leave(self, make_tournament):
        t = make_tournament(["A", "B", "C", "D", "E"])
        generate_next_round(t)
        assert t.current_round.sitting_out == ["A"]
        remove_player(t, "A")
        assert "A" not in t.player_ids()

    def test_history_keeps_removed_ids(self, make_tournament):
        t = make_tournament(["A", "B", "C", "D", "E"])
        generate_next_round(t)
        submit_match_score(t, t.current_round.matches[0].id, 21, 9)
        remove_player(t, "B")

        assert t.history[0].team_a == ["B", "C"]
        assert player_name(t, "B") == "Unknown"
        assert player_name(t, "C") == "C"


class TestShuffleOrder:

    def test_is_permutation_of_roster(self, make_tournament):
        names = [f"p{i}" for i in range(12)]
        t = make_tournament(names)
        t.order = names[:3]
        shuffle_order(t, rng=random.Random(7))
        assert sorted(t.order) == sorted(names)

    def test_uses_given_rng(self, make_tournament):
        names = [f"p{i}" for i in range(12)]
        expected = list(names)
        random.Random(42).shuffle(expected)

        t = make_tournament(names)
        shuffle_order(t, rng=random.Random(42))
        assert t.order == expected


class TestSettings:

    def test_valid_values(self):
        t = Tournament()
        assert update_settings(t, "3", "11") == Settings(courts=3, max_points=11)

    def test_out_of_range_is_clamped(self):
        t = Tournament()
        update_settings(t, 0, 200)
        assert t.settings == Settings(courts=1, max_points=99)
        update_settings(t, 12, 2)
        assert t.settings == Settings(courts=8, max_points=5)

    def test_garbage_falls_back_to_minimum(self):
        t = Tournament()
        update_settings(t, "abc", None)
        assert t.settings == Settings(courts=1, max_points=5)

    def test_current_round_is_not_resized(self, make_tournament):
        t = make_tournament([f"p{i}" for i in range(8)])
        generate_next_round(t)
        update_settings(t, 2, 21)
        assert len(t.current_round.matches) == 1
        generate_next_round(t)
        assert len(t.current_round.matches) == 2


class TestReset:

    def test_returns_defaults(self, make_tournament):
        t = reset_tournament()
        assert t == Tournament()
        assert t.settings == Settings(courts=1, max_points=21)
