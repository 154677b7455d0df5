import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from roster import Roster, next_in_rotation
from question_holder import QuestionHolder, normalize_answer
from errors import InvalidName, NameTaken, RoomFull, PlayerNotFound
import config


def make_roster(*names, max_players=10):
    roster = Roster(max_players=max_players)
    for name in names:
        roster.join(name)
    return roster


# ---------------------------------------------------------------------------
# Roster.join / leave
# ---------------------------------------------------------------------------

class TestJoin:
    def test_join_appends_in_order(self):
        roster = make_roster("Alice", "Bob", "Carol")
        assert roster.snapshot_players() == ["Alice", "Bob", "Carol"]

    def test_new_player_starts_at_zero(self):
        roster = Roster()
        player = roster.join("Alice")
        assert player.score == 0
        assert player.attempts == 0

    def test_empty_name_rejected(self):
        roster = Roster()
        with pytest.raises(InvalidName):
            roster.join("")
        assert roster.size() == 0

    def test_whitespace_name_rejected(self):
        roster = Roster()
        with pytest.raises(InvalidName):
            roster.join("   ")

    def test_name_is_trimmed(self):
        roster = Roster()
        player = roster.join("  Alice ")
        assert player.name == "Alice"
        assert roster.contains("Alice")

    def test_long_name_rejected(self):
        roster = Roster()
        with pytest.raises(InvalidName):
            roster.join("x" * (config.MAX_NAME_LENGTH + 1))

    def test_duplicate_name_rejected(self):
        roster = make_roster("Alice", "Bob")
        with pytest.raises(NameTaken):
            roster.join("Alice")
        assert roster.size() == 2

    def test_names_are_case_sensitive(self):
        roster = make_roster("alice")
        roster.join("Alice")
        assert roster.size() == 2

    def test_room_full(self):
        roster = make_roster(*[f"P{i}" for i in range(10)])
        with pytest.raises(RoomFull):
            roster.join("Late")
        assert roster.size() == 10

    def test_configured_maximum(self):
        roster = make_roster("A", "B", max_players=2)
        with pytest.raises(RoomFull):
            roster.join("C")

    def test_size_matches_successful_joins(self):
        roster = Roster()
        attempts = ["A", "B", "A", "", "C", "B", "D"]
        joined = 0
        for name in attempts:
            try:
                roster.join(name)
                joined += 1
            except (InvalidName, NameTaken):
                pass
        assert roster.size() == joined == 4


class TestLeave:
    def test_leave_removes_player(self):
        roster = make_roster("Alice", "Bob")
        roster.leave("Alice")
        assert roster.snapshot_players() == ["Bob"]
        assert "Alice" not in roster.snapshot_scores()

    def test_leave_unknown_player(self):
        roster = make_roster("Alice")
        with pytest.raises(PlayerNotFound):
            roster.leave("Bob")

    def test_rejoin_starts_fresh(self):
        roster = make_roster("Alice", "Bob")
        roster.award("Alice", 30)
        roster.leave("Alice")
        roster.join("Alice")
        assert roster.snapshot_scores()["Alice"] == 0
        assert roster.snapshot_players() == ["Bob", "Alice"]


# ---------------------------------------------------------------------------
# Master rotation
# ---------------------------------------------------------------------------

class TestRotation:
    def test_next_after_current(self):
        roster = make_roster("A", "B", "C")
        assert roster.next_master("A") == "B"
        assert roster.next_master("B") == "C"

    def test_wraps_to_front(self):
        roster = make_roster("A", "B", "C")
        assert roster.next_master("C") == "A"

    def test_empty_roster(self):
        assert Roster().next_master("A") is None

    def test_none_resets_to_head(self):
        roster = make_roster("A", "B")
        assert roster.next_master(None) == "A"

    def test_unknown_master_resets_to_head(self):
        roster = make_roster("A", "B")
        assert roster.next_master("Ghost") == "A"

    def test_single_player_rotates_to_self(self):
        roster = make_roster("A")
        assert roster.next_master("A") == "A"

    @pytest.mark.parametrize("size", [1, 2, 3, 7, 10])
    def test_full_cycle_visits_everyone_once(self, size):
        names = [f"P{i}" for i in range(size)]
        for start in names:
            seen = []
            current = start
            for _ in range(size):
                current = next_in_rotation(names, current)
                seen.append(current)
            assert current == start
            assert sorted(seen) == sorted(names)

    def test_rotation_ignores_scores(self):
        roster = make_roster("A", "B", "C")
        roster.award("C", 50)
        assert roster.next_master("A") == "B"


# ---------------------------------------------------------------------------
# Scores and attempts
# ---------------------------------------------------------------------------

class TestScoring:
    def test_award_default_points(self):
        roster = make_roster("Alice")
        assert roster.award("Alice") == config.POINTS_PER_WIN

    def test_award_accumulates(self):
        roster = make_roster("Alice")
        roster.award("Alice", 10)
        assert roster.award("Alice", 10) == 20

    def test_award_unknown_player(self):
        roster = make_roster("Alice")
        with pytest.raises(PlayerNotFound):
            roster.award("Bob")


class TestAttempts:
    def test_consume_counts_up(self):
        roster = make_roster("Alice")
        assert roster.consume_attempt("Alice") == 1
        assert roster.consume_attempt("Alice") == 2
        assert roster.attempts("Alice") == 2

    def test_reset_attempts(self):
        roster = make_roster("Alice", "Bob")
        roster.consume_attempt("Alice")
        roster.exhaust_attempts("Bob", 3)
        roster.reset_attempts()
        assert roster.attempts("Alice") == 0
        assert roster.attempts("Bob") == 0

    def test_attempts_unknown_player(self):
        roster = Roster()
        with pytest.raises(PlayerNotFound):
            roster.attempts("Ghost")


class TestSnapshots:
    def test_player_list_is_a_copy(self):
        roster = make_roster("Alice")
        players = roster.snapshot_players()
        players.append("Mallory")
        assert roster.snapshot_players() == ["Alice"]

    def test_scores_are_a_copy(self):
        roster = make_roster("Alice")
        scores = roster.snapshot_scores()
        scores["Alice"] = 999
        assert roster.snapshot_scores()["Alice"] == 0

    def test_player_record_is_a_copy(self):
        roster = make_roster("Alice")
        player = roster.get("Alice")
        player.score = 999
        assert roster.get("Alice").score == 0


# ---------------------------------------------------------------------------
# QuestionHolder
# ---------------------------------------------------------------------------

class TestQuestionHolder:
    @pytest.mark.parametrize("guess", ["Paris", " paris ", "PARIS", "pArIs\n"])
    def test_case_and_whitespace_insensitive(self, guess):
        holder = QuestionHolder()
        holder.set("Capital of France?", "Paris")
        assert holder.check(guess)

    @pytest.mark.parametrize("guess", ["Par", "Pariss", "London", "", "P aris"])
    def test_no_partial_matches(self, guess):
        holder = QuestionHolder()
        holder.set("Capital of France?", "Paris")
        assert not holder.check(guess)

    def test_prompt_stored_verbatim(self):
        holder = QuestionHolder()
        holder.set("  Capital of FRANCE?", "Paris")
        assert holder.prompt == "  Capital of FRANCE?"

    def test_answer_normalized(self):
        holder = QuestionHolder()
        holder.set("Q", "  New York ")
        assert holder.answer == "new york"
        assert holder.display_answer == "New York"

    def test_clear_drops_answer(self):
        holder = QuestionHolder()
        holder.set("Q", "Paris")
        holder.clear()
        assert holder.prompt is None
        assert not holder.is_set()
        assert not holder.check("Paris")

    def test_normalize_answer(self):
        assert normalize_answer("  MiXeD Case  ") == "mixed case"
