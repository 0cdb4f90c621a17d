from __future__ import annotations

import random

import numpy as np
import pytest

from tetrion import (
    EngineConfig,
    GameAction,
    GameOver,
    GameState,
    HardDropped,
    Held,
    LevelUp,
    LinesCleared,
    Locked,
    Moved,
    Paused,
    Phase,
    Reset,
    Resumed,
    Rotated,
    Spawned,
)
from tetrion.board import PIECE_VALUES
from tetrion.scoring import ClearKind
from tetrion.tetromino import Rotation, Tetromino, TetrominoType


def _state(**overrides) -> GameState:
    options = {"deterministic_bag": True, "line_clear_ticks": 0}
    options.update(overrides)
    return GameState(EngineConfig(**options))


def test_new_game_spawns_first_piece() -> None:
    state = _state()
    snap = state.snapshot()
    assert snap.phase is Phase.FALLING
    assert snap.active is TetrominoType.I
    assert snap.active_cells == {(2, 3), (2, 4), (2, 5), (2, 6)}
    assert snap.ghost_cells == {(21, 3), (21, 4), (21, 5), (21, 6)}
    assert snap.preview == (
        TetrominoType.O,
        TetrominoType.T,
        TetrominoType.S,
        TetrominoType.Z,
        TetrominoType.J,
    )
    assert snap.hold is None
    assert snap.hold_available


def test_every_spawn_reaches_the_visible_field() -> None:
    state = _state()
    hidden = state.config.hidden_rows
    for _ in range(7):
        snap = state.snapshot()
        assert max(row for row, _ in snap.active_cells) == hidden
        state.tick([GameAction.HARD_DROP])


def test_spawn_stays_in_buffer_when_row_below_is_blocked() -> None:
    state = _state()
    state.set_active(Tetromino(TetrominoType.I, Rotation.SPAWN, (10, 3)))
    state.board.set_cell(2, 4, 1)

    result = state.tick([GameAction.HARD_DROP])

    assert result.of_type(Spawned) == (Spawned(TetrominoType.O),)
    assert result.snapshot.phase is Phase.FALLING
    assert state.active.position == (0, 4)


def test_blocked_spawn_is_game_over() -> None:
    state = _state()
    state.set_active(Tetromino(TetrominoType.I, Rotation.SPAWN, (10, 3)))
    # The next piece is an O which spawns over columns 4-5.
    state.board.set_cell(0, 4, 1)

    result = state.tick([GameAction.HARD_DROP])

    assert result.snapshot.phase is Phase.GAME_OVER
    assert result.snapshot.active is None
    assert result.of_type(GameOver)
    assert not result.of_type(Spawned)

    frozen_tick = result.snapshot.tick
    after = state.tick([GameAction.LEFT, GameAction.PAUSE])
    assert after.events == ()
    assert after.snapshot.tick == frozen_tick
    assert after.snapshot.phase is Phase.GAME_OVER


def test_reset_leaves_game_over() -> None:
    state = _state()
    state.set_active(Tetromino(TetrominoType.I, Rotation.SPAWN, (10, 3)))
    state.board.set_cell(0, 4, 1)
    state.tick([GameAction.HARD_DROP])
    assert state.game_over

    result = state.tick([GameAction.RESET])

    assert isinstance(result.events[0], Reset)
    assert result.snapshot.phase is Phase.FALLING
    assert result.snapshot.score == 0
    assert not result.snapshot.board.any()
    assert result.snapshot.active is TetrominoType.I


def test_reset_game_does_not_leak_events_into_next_tick() -> None:
    state = _state()
    state.tick([GameAction.HARD_DROP])
    state.reset_game(seed=1)

    result = state.tick()

    assert not result.of_type(Spawned)
    assert not result.of_type(Reset)


def test_reset_action_reports_reset_then_spawn() -> None:
    state = _state()
    result = state.tick([GameAction.RESET])
    assert isinstance(result.events[0], Reset)
    assert result.of_type(Spawned) == (Spawned(TetrominoType.I),)


def test_gravity_moves_piece_once_per_interval() -> None:
    state = _state()
    assert state.gravity_interval() == 60
    for _ in range(59):
        state.tick()
    assert state.active.position == (1, 3)
    state.tick()
    assert state.active.position == (2, 3)


def test_soft_drop_speeds_up_gravity_and_scores() -> None:
    state = _state()
    state.tick([GameAction.SOFT_DROP_START])
    assert state.gravity_interval() == 3
    state.tick()
    state.tick()
    assert state.active.position == (2, 3)
    assert state.score == 1
    state.tick([GameAction.SOFT_DROP_STOP])
    assert state.gravity_interval() == 60


def test_hard_drop_locks_immediately() -> None:
    state = _state()
    result = state.tick([GameAction.HARD_DROP])

    assert HardDropped(19) in result.events
    locked = result.of_type(Locked)
    assert locked and locked[0].cells == {(21, 3), (21, 4), (21, 5), (21, 6)}
    assert result.snapshot.score == 38
    assert result.snapshot.active is TetrominoType.O
    assert state.pieces == 1
    value = PIECE_VALUES[TetrominoType.I]
    assert list(state.board.grid[21, 3:7]) == [value] * 4


def test_completing_a_row_clears_and_scores() -> None:
    state = _state()
    for col in range(10):
        if col not in (3, 4, 5, 6):
            state.board.set_cell(21, col, 1)
    state.board.set_cell(20, 0, 2)

    result = state.tick([GameAction.HARD_DROP])

    cleared = result.of_type(LinesCleared)
    assert len(cleared) == 1
    assert cleared[0].count == 1
    assert cleared[0].rows == (21,)
    assert cleared[0].kind is ClearKind.SINGLE
    assert not cleared[0].all_clear
    assert result.snapshot.lines == 1
    assert result.snapshot.score == 38 + 100
    assert state.board.get_cell(21, 0) == 2
    assert list(state.board.grid[21, 1:]) == [0] * 9


def test_all_clear_bonus() -> None:
    state = _state()
    for col in range(10):
        if col not in (3, 4, 5, 6):
            state.board.set_cell(21, col, 1)

    result = state.tick([GameAction.HARD_DROP])

    cleared = result.of_type(LinesCleared)[0]
    assert cleared.all_clear
    assert result.snapshot.score == 38 + 100 + 800
    assert state.board.is_empty()


def test_line_clear_delay_holds_next_spawn() -> None:
    state = _state(line_clear_ticks=3)
    for col in range(10):
        if col not in (3, 4, 5, 6):
            state.board.set_cell(21, col, 1)
    state.board.set_cell(20, 0, 2)

    result = state.tick([GameAction.HARD_DROP])
    assert result.snapshot.phase is Phase.LINE_CLEAR
    assert result.snapshot.active is None

    result = state.tick([GameAction.LEFT])
    assert result.snapshot.phase is Phase.LINE_CLEAR
    assert not result.of_type(Moved)

    result = state.tick()
    assert result.snapshot.phase is Phase.FALLING
    assert result.of_type(Spawned) == (Spawned(TetrominoType.O),)


def test_level_up_event() -> None:
    state = _state()
    state.scorer.lines = 9
    for col in range(10):
        if col not in (3, 4, 5, 6):
            state.board.set_cell(21, col, 1)
    state.board.set_cell(20, 0, 2)

    result = state.tick([GameAction.HARD_DROP])

    assert LevelUp(2) in result.events
    assert result.snapshot.level == 2


def test_lock_delay_expires_without_input() -> None:
    state = _state(lock_delay_ticks=5)
    state.set_active(Tetromino(TetrominoType.O, Rotation.SPAWN, (20, 0)))

    state.tick()
    assert state.phase is Phase.LOCKING
    for _ in range(4):
        assert not state.tick().of_type(Locked)
    assert state.tick().of_type(Locked)


def test_lock_delay_resets_are_capped() -> None:
    state = _state(lock_delay_ticks=5, max_lock_resets=3)
    state.set_active(Tetromino(TetrominoType.O, Rotation.SPAWN, (20, 0)))

    state.tick()
    assert state.phase is Phase.LOCKING

    for _ in range(3):
        result = state.tick([GameAction.RIGHT])
        assert not result.of_type(Locked)
        assert state.lock_timer == 4
    assert state.lock_resets == 3

    # Resets are used up: the countdown keeps running despite further moves.
    for expected_timer in (3, 2, 1):
        result = state.tick([GameAction.RIGHT])
        assert not result.of_type(Locked)
        assert state.lock_timer == expected_timer

    result = state.tick([GameAction.RIGHT])
    locked = result.of_type(Locked)
    assert locked
    assert locked[0].cells == {(20, 7), (20, 8), (21, 7), (21, 8)}


def test_moving_off_a_ledge_returns_to_falling() -> None:
    state = _state()
    for col in range(4):
        state.board.set_cell(21, col, 1)
    state.set_active(Tetromino(TetrominoType.O, Rotation.SPAWN, (19, 2)))

    state.tick()
    assert state.phase is Phase.LOCKING

    state.tick([GameAction.RIGHT])
    assert state.phase is Phase.LOCKING
    state.tick([GameAction.RIGHT])
    assert state.phase is Phase.FALLING


def test_new_lowest_row_clears_lock_resets() -> None:
    state = _state(lock_delay_ticks=10, max_lock_resets=5)
    for col in range(4):
        state.board.set_cell(21, col, 1)
    state.set_active(Tetromino(TetrominoType.O, Rotation.SPAWN, (19, 2)))

    state.tick()
    state.tick([GameAction.RIGHT])
    assert state.lock_resets == 1
    assert state.lock_timer == 9

    # Sliding off the ledge uses another reset and starts the fall.
    state.tick([GameAction.RIGHT])
    assert state.phase is Phase.FALLING
    assert state.lock_resets == 2

    state.tick([GameAction.SOFT_DROP_START])
    state.tick()

    assert state.active.position == (20, 4)
    assert state.phase is Phase.LOCKING
    assert state.lock_resets == 0
    assert state.lock_timer == 10


def test_rotation_resets_lock_delay() -> None:
    state = _state(lock_delay_ticks=5)
    state.set_active(Tetromino(TetrominoType.T, Rotation.SPAWN, (20, 3)))

    state.tick()
    state.tick()
    state.tick()
    assert state.phase is Phase.LOCKING
    assert state.lock_timer == 3

    result = state.tick([GameAction.ROTATE_CW])

    assert Rotated(Rotation.RIGHT, 2) in result.events
    assert state.active.position == (19, 2)
    assert state.phase is Phase.LOCKING
    assert state.lock_resets == 1
    assert state.lock_timer == 4


def test_hold_swaps_once_per_piece() -> None:
    state = _state()

    result = state.tick([GameAction.HOLD])
    assert Held(TetrominoType.I, None) in result.events
    assert result.snapshot.active is TetrominoType.O
    assert result.snapshot.hold is TetrominoType.I
    assert not result.snapshot.hold_available

    result = state.tick([GameAction.HOLD])
    assert not result.of_type(Held)
    assert state.apply_action(GameAction.HOLD) is False

    result = state.tick([GameAction.HARD_DROP])
    assert result.snapshot.active is TetrominoType.T
    assert result.snapshot.hold_available

    result = state.tick([GameAction.HOLD])
    assert Held(TetrominoType.T, TetrominoType.I) in result.events
    assert result.snapshot.active is TetrominoType.I
    assert result.snapshot.active_cells == {(2, 3), (2, 4), (2, 5), (2, 6)}
    assert result.snapshot.hold is TetrominoType.T


def test_hold_can_be_disabled() -> None:
    state = _state(hold_enabled=False)
    assert state.apply_action(GameAction.HOLD) is False
    assert not state.snapshot().hold_available


def test_pause_freezes_ticks() -> None:
    state = _state()
    result = state.tick([GameAction.PAUSE])
    assert result.of_type(Paused)
    assert result.snapshot.paused
    tick = result.snapshot.tick

    for _ in range(200):
        result = state.tick([GameAction.LEFT])
    assert result.snapshot.tick == tick
    assert state.active.position == (1, 3)
    assert not result.of_type(Moved)

    result = state.tick([GameAction.RESUME])
    assert result.of_type(Resumed)
    assert not result.snapshot.paused
    assert result.snapshot.tick == tick + 1


def test_rotation_and_movement_events() -> None:
    state = _state()
    result = state.tick([GameAction.ROTATE_CW, GameAction.LEFT])
    assert Rotated(Rotation.RIGHT, 0) in result.events
    assert Moved(0, -1) in result.events
    assert result.snapshot.active_rotation is Rotation.RIGHT


def test_rejected_moves_are_no_ops() -> None:
    state = _state()
    results = [state.apply_action(GameAction.LEFT) for _ in range(6)]
    assert results == [True, True, True, False, False, False]
    assert state.active.position == (1, 0)


def test_unknown_action_raises() -> None:
    state = _state()
    with pytest.raises(ValueError):
        state.apply_action("teleport")


def test_t_spin_double() -> None:
    state = _state()
    board = state.board
    for col in range(10):
        if col != 4:
            board.set_cell(21, col, 1)
        if col not in (3, 4, 5):
            board.set_cell(20, col, 1)
    board.set_cell(19, 3, 1)
    state.set_active(Tetromino(TetrominoType.T, Rotation.RIGHT, (19, 3)))

    result = state.tick([GameAction.ROTATE_CW, GameAction.HARD_DROP])

    cleared = result.of_type(LinesCleared)
    assert len(cleared) == 1
    assert cleared[0].t_spin
    assert cleared[0].count == 2
    assert cleared[0].points == 1200
    assert result.snapshot.score == 1200
    assert board.get_cell(21, 3) == 1


def test_snapshot_is_read_only() -> None:
    snap = _state().snapshot()
    assert not snap.board.flags.writeable
    with pytest.raises(ValueError):
        snap.board[0, 0] = 1


def test_same_seed_and_inputs_replay_identically() -> None:
    actions = list(GameAction)
    actions.remove(GameAction.RESET)
    actions.remove(GameAction.PAUSE)

    def play() -> tuple:
        state = GameState(EngineConfig(seed=11))
        rng = random.Random(3)
        history = []
        for _ in range(1500):
            chosen = [rng.choice(actions)] if rng.random() < 0.2 else []
            snap = state.tick(chosen).snapshot
            history.append((snap.phase, snap.score, snap.active_cells))
        return history, state.board.grid.copy()

    first_history, first_board = play()
    second_history, second_board = play()
    assert first_history == second_history
    assert np.array_equal(first_board, second_board)
