"""
Tests for move rules and win detection.
"""

import pytest

from color_sort.exceptions import InvalidMoveError
from color_sort.game.colors import Color
from color_sort.game.container import Container
from color_sort.game.moves import (
    apply_move,
    can_move,
    has_any_valid_move,
    is_won,
    iter_successors,
    move_count,
    valid_destinations,
    valid_moves,
)
from color_sort.game.state import PuzzleState

R, B, G = Color.RED, Color.BLUE, Color.GREEN


@pytest.fixture
def scenario():
    """A=[R,B,R], B=[B,R,B], C=[], D=[] all with capacity 4."""
    return PuzzleState.from_colors(
        [[R, B, R], [B, R, B], [], []], capacity=4, ids=["A", "B", "C", "D"]
    )


class TestCanMove:
    """Test move legality."""

    def test_asymmetric_full_target(self):
        """A full target blocks the pour in one direction only."""
        partial = Container.with_colors("a", [R])
        full = Container.with_colors("b", [R, R, R, R])

        assert not can_move(partial, full)
        assert can_move(full, partial)

    def test_asymmetric_empty_source(self):
        """An empty container can receive but never pour."""
        mixed = Container.with_colors("a", [B, R])
        empty = Container.empty("b")

        assert can_move(mixed, empty)
        assert not can_move(empty, mixed)

    def test_top_colors_must_match(self):
        """Pouring onto a different top color is illegal."""
        red_top = Container.with_colors("a", [B, R])
        blue_top = Container.with_colors("b", [R, B])

        assert not can_move(red_top, blue_top)
        assert not can_move(blue_top, red_top)

    def test_matching_colors_full_target(self):
        """Matching colors do not override the capacity check."""
        source = Container.with_colors("a", [G])
        target = Container.with_colors("b", [G, G], capacity=2)
        assert not can_move(source, target)


class TestMoveCount:
    """Test units transferred per pour."""

    def test_whole_top_run(self):
        """The full top run moves when space allows."""
        source = Container.with_colors("a", [B, R, R])
        target = Container.with_colors("b", [R])
        assert move_count(source, target) == 2

    def test_capped_by_free_space(self):
        """Free space in the target caps the pour."""
        source = Container.with_colors("a", [R, R, R])
        target = Container.with_colors("b", [B, R, R])
        assert move_count(source, target) == 1

    def test_scenario_single_unit(self, scenario):
        """Top of A is a run of one red."""
        assert can_move(scenario[0], scenario[2])
        assert move_count(scenario[0], scenario[2]) == 1


class TestApplyMove:
    """Test applying moves to a state."""

    def test_moves_units(self, scenario):
        """The poured unit leaves the source and lands on the target."""
        new_state = apply_move(scenario, 0, 2)

        assert new_state[0].units == (R, B)
        assert new_state[2].units == (R,)
        assert scenario[0].units == (R, B, R)

    def test_other_containers_unchanged_by_identity(self, scenario):
        """Untouched containers are the same objects."""
        new_state = apply_move(scenario, 0, 2)

        assert new_state[1] is scenario[1]
        assert new_state[3] is scenario[3]

    def test_conservation(self, scenario):
        """Every legal move preserves per-color unit counts."""
        states = [scenario]
        for move, state in iter_successors(scenario):
            states.append(state)
            states.extend(s for _, s in iter_successors(state))

        expected = scenario.color_counts()
        assert len(states) > 1
        for state in states:
            assert state.color_counts() == expected

    def test_same_index(self, scenario):
        """Pouring a container into itself is rejected."""
        with pytest.raises(InvalidMoveError) as exc_info:
            apply_move(scenario, 1, 1)
        assert exc_info.value.from_index == 1
        assert exc_info.value.to_index == 1

    def test_out_of_range(self, scenario):
        """Indices outside the state are rejected."""
        with pytest.raises(InvalidMoveError):
            apply_move(scenario, 0, 4)
        with pytest.raises(InvalidMoveError):
            apply_move(scenario, -1, 2)

    def test_illegal_pour(self, scenario):
        """A pair failing can_move is rejected with a reason."""
        with pytest.raises(InvalidMoveError) as exc_info:
            apply_move(scenario, 2, 0)
        assert "empty" in exc_info.value.reason

        with pytest.raises(InvalidMoveError) as exc_info:
            apply_move(scenario, 0, 1)
        assert "differ" in exc_info.value.reason

    def test_invalid_move_is_value_error(self, scenario):
        """InvalidMoveError is a ValueError."""
        with pytest.raises(ValueError):
            apply_move(scenario, 3, 3)


class TestWinDetection:
    """Test the win predicate and move enumeration."""

    def test_uniform_or_empty_is_won(self):
        """Uniform containers win even when not full."""
        state = PuzzleState.from_colors([[R, R], [B, B, B], []])
        assert is_won(state)

    def test_mixed_is_not_won(self):
        """A mixed container prevents the win."""
        state = PuzzleState.from_colors([[R, B], [], []])
        assert not is_won(state)

    def test_has_any_valid_move(self, scenario):
        """Dead states have no valid moves."""
        assert has_any_valid_move(scenario)

        dead = PuzzleState.from_colors([[R, B], [B, R]], capacity=2)
        assert not has_any_valid_move(dead)

    def test_valid_destinations(self, scenario):
        """A can pour into either empty container."""
        assert valid_destinations(scenario, 0) == [2, 3]
        assert valid_destinations(scenario, 2) == []

    def test_valid_moves(self, scenario):
        """Moves are listed in (from, to) order with ids and color."""
        moves = valid_moves(scenario)

        assert [(m.from_index, m.to_index) for m in moves] == [(0, 2), (0, 3), (1, 2), (1, 3)]
        assert moves[0].from_id == "A"
        assert moves[0].to_id == "C"
        assert moves[0].color == R
        assert moves[2].color == B
        assert all(m.count == 1 for m in moves)
