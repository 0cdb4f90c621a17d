"""Simple pygame front-end for the engine.

This module provides a playable window on top of :class:`GameState`.  It only
maps keyboard events to :class:`GameAction` values, runs the engine on a fixed
timestep and draws the resulting :class:`Snapshot`; all game rules live in the
engine.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from typing import Dict, List, Optional

import pygame

from .board import PIECE_VALUES
from .config import EngineConfig
from .events import GameAction, GameOver, LinesCleared, Snapshot
from .game_state import GameState
from .tetromino import Rotation, TetrominoType, shape_blocks
from .timestep import FixedTimestep

LOGGER = logging.getLogger(__name__)

# Size of a single board cell in pixels
CELL_SIZE = 30
# Width of the side panel showing hold, preview and score
PANEL_CELLS = 6
# Frames per second to run the render loop at
FPS = 60

# Colours for each tetromino type
SHAPE_COLORS = {
    TetrominoType.I: (0, 255, 255),
    TetrominoType.O: (255, 255, 0),
    TetrominoType.T: (128, 0, 128),
    TetrominoType.S: (0, 255, 0),
    TetrominoType.Z: (255, 0, 0),
    TetrominoType.J: (0, 0, 255),
    TetrominoType.L: (255, 165, 0),
}

# Mapping from the integer stored in the board grid to a colour
CELL_COLORS = {0: (0, 0, 0)}
for shape, value in PIECE_VALUES.items():
    CELL_COLORS[value] = SHAPE_COLORS[shape]

GRID_COLOR = (50, 50, 50)
GHOST_COLOR = (90, 90, 90)
TEXT_COLOR = (230, 230, 230)

KEY_DOWN_ACTIONS: Dict[int, GameAction] = {
    pygame.K_LEFT: GameAction.LEFT,
    pygame.K_RIGHT: GameAction.RIGHT,
    pygame.K_UP: GameAction.ROTATE_CW,
    pygame.K_x: GameAction.ROTATE_CW,
    pygame.K_z: GameAction.ROTATE_CCW,
    pygame.K_LCTRL: GameAction.ROTATE_CCW,
    pygame.K_DOWN: GameAction.SOFT_DROP_START,
    pygame.K_SPACE: GameAction.HARD_DROP,
    pygame.K_c: GameAction.HOLD,
    pygame.K_LSHIFT: GameAction.HOLD,
    pygame.K_r: GameAction.RESET,
}

KEY_UP_ACTIONS: Dict[int, GameAction] = {
    pygame.K_DOWN: GameAction.SOFT_DROP_STOP,
}


def map_event(event: pygame.event.Event, paused: bool) -> Optional[GameAction]:
    """Translate a pygame event into an engine action."""

    if event.type == pygame.KEYDOWN:
        if event.key in (pygame.K_p, pygame.K_ESCAPE):
            return GameAction.RESUME if paused else GameAction.PAUSE
        return KEY_DOWN_ACTIONS.get(event.key)
    if event.type == pygame.KEYUP:
        return KEY_UP_ACTIONS.get(event.key)
    return None


def _draw_cell(screen: pygame.Surface, row: int, col: int, color, x0: int = 0) -> None:
    rect = pygame.Rect(x0 + col * CELL_SIZE, row * CELL_SIZE, CELL_SIZE, CELL_SIZE)
    pygame.draw.rect(screen, color, rect)
    pygame.draw.rect(screen, GRID_COLOR, rect, 1)


def draw_board(screen: pygame.Surface, snap: Snapshot) -> None:
    """Render the locked cells, ghost and active piece of ``snap``."""

    hidden = snap.hidden_rows
    visible = snap.board[hidden:]
    for r, row in enumerate(visible):
        for c, value in enumerate(row):
            _draw_cell(screen, r, c, CELL_COLORS[int(value)])
    for r, c in snap.ghost_cells:
        if r >= hidden and (r, c) not in snap.active_cells:
            _draw_cell(screen, r - hidden, c, GHOST_COLOR)
    if snap.active is not None:
        color = SHAPE_COLORS[snap.active]
        for r, c in snap.active_cells:
            if r >= hidden:
                _draw_cell(screen, r - hidden, c, color)


def draw_panel(screen: pygame.Surface, font: pygame.font.Font, snap: Snapshot, x0: int) -> None:
    """Render hold, preview and score information to the right of the board."""

    y = 0
    lines: List[str] = [
        f"Score {snap.score}",
        f"Level {snap.level}",
        f"Lines {snap.lines}",
    ]
    if snap.paused:
        lines.append("PAUSED")
    if snap.game_over:
        lines.append("GAME OVER - R")
    for text in lines:
        screen.blit(font.render(text, True, TEXT_COLOR), (x0 + 8, y + 4))
        y += font.get_linesize()

    y_row = y // CELL_SIZE + 1
    screen.blit(font.render("Hold", True, TEXT_COLOR), (x0 + 8, y_row * CELL_SIZE))
    if snap.hold is not None:
        _draw_mini(screen, snap.hold, x0, y_row + 1)
    y_row += 4
    screen.blit(font.render("Next", True, TEXT_COLOR), (x0 + 8, y_row * CELL_SIZE))
    for shape in snap.preview:
        _draw_mini(screen, shape, x0, y_row + 1)
        y_row += 3


def _draw_mini(screen: pygame.Surface, shape: TetrominoType, x0: int, row: int) -> None:
    for dr, dc in shape_blocks(shape, Rotation.SPAWN):
        _draw_cell(screen, row + dr, dc + 1, SHAPE_COLORS[shape], x0)


class GameRunner:
    """Run the engine in a pygame window until it is closed."""

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()
        self._running = False
        self._task: asyncio.Task | None = None
        self._screen: pygame.Surface | None = None
        self._state: GameState | None = None
        self._clock: pygame.time.Clock | None = None
        self._timestep = FixedTimestep(self.config.tick_rate)
        self._pending: List[GameAction] = []

    def _run_ticks(self, count: int) -> Optional[Snapshot]:
        assert self._state is not None
        snapshot = None
        for _ in range(count):
            result = self._state.tick(self._pending)
            self._pending = []
            snapshot = result.snapshot
            for event in result.events:
                if isinstance(event, LinesCleared):
                    LOGGER.info("Cleared %d row(s). Score: %d", event.count, snapshot.score)
                elif isinstance(event, GameOver):
                    LOGGER.info("Game over. Score: %d", event.score)
        return snapshot

    async def _run_loop(self) -> None:
        os.environ.setdefault("SDL_HINT_EMSCRIPTEN_CANVAS_ELEMENT_ID", "#canvas")
        os.environ.setdefault("SDL_HINT_EMSCRIPTEN_KEYBOARD_ELEMENT", "#canvas")
        pygame.init()
        board_px = self.config.width * CELL_SIZE
        board_py = self.config.height * CELL_SIZE
        self._screen = pygame.display.set_mode((board_px + PANEL_CELLS * CELL_SIZE, board_py))
        pygame.display.set_caption("Tetrion")
        pygame.key.set_repeat(170, 50)
        font = pygame.font.Font(None, 28)
        self._clock = pygame.time.Clock()

        self._state = GameState(self.config)
        self._timestep.reset()
        snapshot = self._state.snapshot()
        LOGGER.info("Game started")

        self._running = True
        while self._running:
            dt = self._clock.tick(FPS) if self._clock else 0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self._running = False
                    continue
                action = map_event(event, self._state.paused)
                if action is not None:
                    self._pending.append(action)

            latest = self._run_ticks(self._timestep.advance(dt))
            if latest is not None:
                snapshot = latest

            if self._screen:
                self._screen.fill((0, 0, 0))
                draw_board(self._screen, snapshot)
                draw_panel(self._screen, font, snapshot, board_px)
                pygame.display.flip()

            # Yield to the host event loop to keep the UI responsive
            await asyncio.sleep(0)

        pygame.quit()
        LOGGER.info("Game stopped")

    def start(self) -> None:
        if self._task and not self._task.done():
            LOGGER.warning("Game already running")
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running loop (e.g., plain Python); run synchronously
            asyncio.run(self._run_loop())
            return
        self._task = loop.create_task(self._run_loop())


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play Tetrion in a pygame window.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the piece generator.")
    parser.add_argument("--level", type=int, default=1, help="Starting level.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(message)s"
    )
    runner = GameRunner(EngineConfig(seed=args.seed, start_level=args.level))
    runner.start()


if __name__ == "__main__":  # pragma: no cover - manual execution only
    main()
