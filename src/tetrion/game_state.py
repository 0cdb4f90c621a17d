"""Game state machine.

:class:`GameState` owns the board, the active piece, the piece queue, the
hold slot and the score for one session.  It advances one fixed logic tick
per :meth:`GameState.tick` call:

1. the tick's actions are applied in order (illegal ones are ignored);
2. unless paused or over, the current phase advances by one tick;
3. the events raised during the tick are returned with a fresh snapshot.

Lock delay uses the move-reset ("extended placement") policy.  A grounded
piece locks after ``lock_delay_ticks``; each successful move or rotation
while the delay runs restarts it, at most ``max_lock_resets`` times per
piece.  Reaching a new lowest row clears the reset count and the countdown.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional
import logging

from .board import Board, PIECE_VALUES
from .config import EngineConfig
from .events import (
    Event,
    GameAction,
    GameOver,
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
    Snapshot,
    Spawned,
    TickResult,
)
from .randomizer import BagRandomizer
from .scoring import ScoreKeeper
from .srs import resolve_rotation, t_spin_corners
from .tetromino import Tetromino, TetrominoType
from .utils import can_move, drop_distance, gravity_interval_ticks


LOGGER = logging.getLogger(__name__)

_ACTIVE_PHASES = (Phase.FALLING, Phase.LOCKING)


@dataclass
class GameState:
    """Mutable state for a game session."""

    config: EngineConfig = field(default_factory=EngineConfig)
    board: Board = field(init=False)
    randomizer: BagRandomizer = field(init=False)
    scorer: ScoreKeeper = field(init=False)
    active: Optional[Tetromino] = field(default=None, init=False)
    held: Optional[TetrominoType] = field(default=None, init=False)
    hold_used: bool = field(default=False, init=False)
    phase: Phase = field(default=Phase.SPAWNING, init=False)
    paused: bool = field(default=False, init=False)
    soft_drop: bool = field(default=False, init=False)
    ticks: int = field(default=0, init=False)
    pieces: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        self._events: List[Event] = []
        self._fall_counter = 0
        self._lock_timer = 0
        self._lock_resets = 0
        self._lowest_row = 0
        self._line_clear_timer = 0
        self._last_rotated = False
        self.reset_game()

    # ------------------------------------------------------------------
    # Public accessors
    # ------------------------------------------------------------------
    @property
    def score(self) -> int:
        return self.scorer.score

    @property
    def level(self) -> int:
        return self.scorer.level

    @property
    def lines(self) -> int:
        return self.scorer.lines

    @property
    def lock_resets(self) -> int:
        return self._lock_resets

    @property
    def lock_timer(self) -> int:
        return self._lock_timer

    @property
    def game_over(self) -> bool:
        return self.phase is Phase.GAME_OVER

    def gravity_interval(self) -> int:
        """Return the current number of ticks between gravity steps."""

        interval = gravity_interval_ticks(self.level, self.config.tick_rate)
        if self.soft_drop:
            interval = max(1, interval // self.config.soft_drop_factor)
        return interval

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------
    def reset_game(self, seed: Optional[int] = None) -> None:
        """Reset the entire game state for a new game and spawn the first piece.

        Events raised by the restart are discarded; use the ``RESET`` action
        to have them reported by the next :meth:`tick`.
        """

        self._restart(seed)
        self._events.clear()

    def _restart(self, seed: Optional[int] = None) -> None:
        cfg = self.config
        self.board = Board(cfg.width, cfg.height, cfg.hidden_rows)
        self.randomizer = BagRandomizer(
            seed=cfg.seed if seed is None else seed,
            deterministic=cfg.deterministic_bag,
        )
        self.scorer = ScoreKeeper(start_level=cfg.start_level, back_to_back=cfg.back_to_back)
        self.active = None
        self.held = None
        self.hold_used = False
        self.paused = False
        self.soft_drop = False
        self.ticks = 0
        self.pieces = 0
        self._line_clear_timer = 0
        self.phase = Phase.SPAWNING
        LOGGER.info("New game (seed=%s)", cfg.seed if seed is None else seed)
        self._spawn(self.randomizer.next())

    def tick(self, actions: Iterable[GameAction | str] = ()) -> TickResult:
        """Apply ``actions`` then advance the game by one logic tick."""

        for action in actions:
            self.apply_action(action)
        if not self.paused and self.phase is not Phase.GAME_OVER:
            self._advance()
            self.ticks += 1
        events = tuple(self._events)
        self._events.clear()
        return TickResult(events=events, snapshot=self.snapshot())

    def apply_action(self, action: GameAction | str) -> bool:
        """Apply a single action and return ``True`` if it had an effect.

        Raises:
            ValueError: If ``action`` is not a :class:`GameAction` value.
        """

        action = GameAction(action)
        if action is GameAction.RESET:
            self._emit(Reset())
            self._restart()
            return True
        if action is GameAction.PAUSE:
            if self.paused or self.phase is Phase.GAME_OVER:
                return False
            self.paused = True
            self._emit(Paused())
            return True
        if action is GameAction.RESUME:
            if not self.paused:
                return False
            self.paused = False
            self._emit(Resumed())
            return True
        if self.paused or self.phase is Phase.GAME_OVER:
            return False

        if action is GameAction.SOFT_DROP_START:
            self.soft_drop = True
            return True
        if action is GameAction.SOFT_DROP_STOP:
            self.soft_drop = False
            return True
        if action is GameAction.LEFT:
            return self.move(-1)
        if action is GameAction.RIGHT:
            return self.move(1)
        if action is GameAction.ROTATE_CW:
            return self.rotate(1)
        if action is GameAction.ROTATE_CCW:
            return self.rotate(-1)
        if action is GameAction.HARD_DROP:
            return self.hard_drop()
        return self.hold()

    # ------------------------------------------------------------------
    # Piece control
    # ------------------------------------------------------------------
    def move(self, dcol: int) -> bool:
        """Shift the active piece sideways by ``dcol`` columns."""

        if not self._controllable():
            return False
        candidate = self.active.moved(0, dcol)
        if not self.board.can_place(candidate.cells()):
            return False
        self._accept(candidate, rotated=False)
        self._emit(Moved(0, dcol))
        return True

    def rotate(self, direction: int) -> bool:
        """Rotate the active piece using SRS wall kicks."""

        if not self._controllable():
            return False
        resolved = resolve_rotation(self.board, self.active, direction)
        if resolved is None:
            return False
        piece, kick_index = resolved
        self._accept(piece, rotated=True)
        self._emit(Rotated(piece.rotation, kick_index))
        return True

    def hard_drop(self) -> bool:
        """Drop the active piece as far as it goes and lock it immediately."""

        if not self._controllable():
            return False
        distance = drop_distance(self.board, self.active)
        if distance:
            self.active = self.active.moved(distance, 0)
            self._last_rotated = False
        self.scorer.add_drop(distance, hard=True)
        self._emit(HardDropped(distance))
        self._lock_active()
        return True

    def hold(self) -> bool:
        """Swap the active piece with the hold slot.

        Only one swap is allowed per spawned piece.  An empty slot takes the
        active piece and the next queued piece spawns instead.
        """

        if not self._controllable() or not self.config.hold_enabled or self.hold_used:
            return False
        current = self.active.shape
        swapped_in = self.held
        self.held = current
        self._emit(Held(current, swapped_in))
        LOGGER.debug("Held %s, swapped in %s", current.value, swapped_in)
        self._spawn(swapped_in if swapped_in is not None else self.randomizer.next())
        self.hold_used = True
        return True

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------
    def snapshot(self) -> Snapshot:
        """Return an immutable view of the current state."""

        grid = self.board.grid.copy()
        grid.setflags(write=False)
        piece = self.active
        if piece is not None:
            active_cells = piece.cells()
            ghost_cells = piece.moved(drop_distance(self.board, piece), 0).cells()
        else:
            active_cells = ghost_cells = frozenset()
        return Snapshot(
            tick=self.ticks,
            phase=self.phase,
            paused=self.paused,
            board=grid,
            hidden_rows=self.board.hidden_rows,
            active=piece.shape if piece is not None else None,
            active_rotation=piece.rotation if piece is not None else None,
            active_cells=active_cells,
            ghost_cells=ghost_cells,
            preview=self.randomizer.peek(self.config.preview_size),
            hold=self.held,
            hold_available=self.config.hold_enabled and not self.hold_used,
            score=self.score,
            level=self.level,
            lines=self.lines,
            combo=max(self.scorer.combo, 0),
            back_to_back=self.scorer.back_to_back,
            lock_resets=self._lock_resets,
        )

    # ------------------------------------------------------------------
    # Testing conveniences
    # ------------------------------------------------------------------
    def set_active(self, piece: Tetromino) -> None:
        """Replace the active piece and restart its per-piece timers.

        Exists for tests and puzzle setups that need a piece at a specific
        spot.

        Raises:
            ValueError: If the piece overlaps the board or leaves it.
        """

        if not self.board.can_place(piece.cells()):
            raise ValueError("Piece does not fit on the board")
        self._begin_piece(piece)
        self.phase = Phase.FALLING

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _emit(self, event: Event) -> None:
        self._events.append(event)

    def _controllable(self) -> bool:
        return (
            not self.paused
            and self.phase in _ACTIVE_PHASES
            and self.active is not None
        )

    def _grounded(self) -> bool:
        return self.active is not None and not can_move(self.board, self.active, 1, 0)

    def _begin_piece(self, piece: Tetromino) -> None:
        self.active = piece
        self._fall_counter = 0
        self._lock_timer = self.config.lock_delay_ticks
        self._lock_resets = 0
        self._lowest_row = piece.position[0]
        self._last_rotated = False

    def _accept(self, piece: Tetromino, *, rotated: bool) -> None:
        """Make ``piece`` the active piece after a successful player action."""

        self.active = piece
        self._last_rotated = rotated
        if self._reached_new_low():
            return
        if self.phase is Phase.LOCKING:
            if self._lock_resets < self.config.max_lock_resets:
                self._lock_resets += 1
                self._lock_timer = self.config.lock_delay_ticks
            if not self._grounded():
                self.phase = Phase.FALLING
                self._fall_counter = 0

    def _reached_new_low(self) -> bool:
        row = self.active.position[0]
        if row <= self._lowest_row:
            return False
        self._lowest_row = row
        self._lock_resets = 0
        self._lock_timer = self.config.lock_delay_ticks
        if self.phase is Phase.LOCKING and not self._grounded():
            self.phase = Phase.FALLING
            self._fall_counter = 0
        return True

    def _spawn(self, shape: TetrominoType) -> None:
        self.phase = Phase.SPAWNING
        piece = Tetromino.spawn(shape, self.board.width)
        self.soft_drop = False
        if not self.board.can_place(piece.cells()):
            self.active = None
            self.phase = Phase.GAME_OVER
            self._emit(GameOver(self.score, self.level, self.lines))
            LOGGER.info(
                "Game over: score=%d level=%d lines=%d", self.score, self.level, self.lines
            )
            return
        # Drop straight into view when the row below the spawn rows is free.
        if can_move(self.board, piece, 1, 0):
            piece = piece.moved(1, 0)
        self._begin_piece(piece)
        self.phase = Phase.FALLING
        self._emit(Spawned(shape))
        LOGGER.debug("Spawned %s", shape.value)

    def _lock_active(self) -> None:
        piece = self.active
        assert piece is not None
        t_spin = (
            piece.shape is TetrominoType.T
            and self._last_rotated
            and t_spin_corners(self.board, piece) >= 3
        )
        cells = piece.cells()
        self.board.lock(cells, PIECE_VALUES[piece.shape])
        self.active = None
        self.pieces += 1
        self.hold_used = False
        self._emit(Locked(piece.shape, cells))
        LOGGER.debug("Locked %s at %s", piece.shape.value, sorted(cells))

        self.phase = Phase.LINE_CLEAR
        rows = self.board.find_completed_rows()
        cleared = self.board.clear_rows(rows)
        all_clear = cleared > 0 and self.board.is_empty()
        result = self.scorer.award_clear(cleared, t_spin=t_spin, all_clear=all_clear)
        if cleared:
            self._emit(
                LinesCleared(
                    count=cleared,
                    rows=rows,
                    kind=result.kind,
                    points=result.points,
                    t_spin=result.t_spin,
                    back_to_back=result.back_to_back,
                    all_clear=result.all_clear,
                    combo=max(result.combo, 0),
                )
            )
            LOGGER.debug("Cleared %d row(s) for %d points", cleared, result.points)
        if result.leveled_up:
            self._emit(LevelUp(result.level_after))
            LOGGER.debug("Level %d", result.level_after)

        if cleared and self.config.line_clear_ticks > 0:
            self._line_clear_timer = self.config.line_clear_ticks
            return
        self._spawn(self.randomizer.next())

    def _step_down(self) -> bool:
        if not can_move(self.board, self.active, 1, 0):
            return False
        self.active = self.active.moved(1, 0)
        self._last_rotated = False
        self._reached_new_low()
        if self.soft_drop:
            self.scorer.add_drop(1, hard=False)
        return True

    def _advance(self) -> None:
        if self.phase is Phase.LINE_CLEAR:
            self._line_clear_timer -= 1
            if self._line_clear_timer <= 0:
                self._spawn(self.randomizer.next())
            return

        if self.phase is Phase.FALLING:
            self._fall_counter += 1
            if self._fall_counter >= self.gravity_interval():
                self._fall_counter = 0
                self._step_down()
            if self._grounded():
                self.phase = Phase.LOCKING
            return

        if self.phase is Phase.LOCKING:
            if not self._grounded():
                self.phase = Phase.FALLING
                self._fall_counter = 0
                return
            self._lock_timer -= 1
            if self._lock_timer <= 0:
                self._lock_active()
