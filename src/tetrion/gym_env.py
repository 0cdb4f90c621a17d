"""Gymnasium-compatible wrapper around the tick-level engine.

Each step feeds one action into :meth:`GameState.tick`.  Observation is a flat
vector suitable for SB3 MlpPolicy:
  - visible board occupancy (20x10=200)
  - active piece cells overlaid as a second plane (200)
  - active piece one-hot (7)
  - hold piece one-hot (7)
  - preview one-hots (7 per previewed piece)

Reward is the score gained during the step; the episode terminates on game
over.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from .config import EngineConfig
from .events import GameAction, Snapshot
from .game_state import GameState
from .tetromino import TetrominoType
from .utils import format_grid, piece_index


# Discrete actions exposed to agents.  Action 0 advances a tick without input;
# soft drop is pressed for a single tick.
ACTIONS: Tuple[Tuple[GameAction, ...], ...] = (
    (),
    (GameAction.LEFT,),
    (GameAction.RIGHT,),
    (GameAction.ROTATE_CW,),
    (GameAction.ROTATE_CCW,),
    (GameAction.SOFT_DROP_START,),
    (GameAction.HARD_DROP,),
    (GameAction.HOLD,),
)

NUM_TYPES = len(TetrominoType)


class TetrionEnv(gym.Env):
    metadata = {
        "render_modes": ["ansi"],
        "render_fps": 60,
    }

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        max_steps: Optional[int] = None,
        top_out_penalty: float = 0.0,
        render_mode: Optional[str] = None,
    ) -> None:
        super().__init__()
        self.config = config or EngineConfig()
        self.state = GameState(self.config)
        self.render_mode = render_mode
        self.top_out_penalty = top_out_penalty
        self.action_space = spaces.Discrete(len(ACTIONS))
        cells = self.config.width * self.config.height
        self._obs_size = 2 * cells + NUM_TYPES * (2 + self.config.preview_size)
        self.observation_space = spaces.Box(
            low=0.0, high=1.0, shape=(self._obs_size,), dtype=np.float32
        )
        self._steps = 0
        self._max_steps = max_steps
        self._snapshot: Snapshot = self.state.snapshot()

    # ----------------------- Env API -----------------------
    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict] = None):
        super().reset(seed=seed)
        if seed is None:
            seed = int(self.np_random.integers(0, 2**31 - 1))
        self.state.reset_game(seed=seed)
        self._steps = 0
        self._snapshot = self.state.snapshot()
        return self._convert_obs(self._snapshot), self._info(self._snapshot)

    def step(self, action: int):
        if not self.action_space.contains(action):
            raise ValueError(f"Invalid action {action!r}")
        actions = list(ACTIONS[int(action)])
        if self.state.soft_drop and GameAction.SOFT_DROP_START not in actions:
            actions.insert(0, GameAction.SOFT_DROP_STOP)
        before = self.state.score
        result = self.state.tick(actions)
        self._snapshot = result.snapshot
        self._steps += 1

        reward = float(self._snapshot.score - before)
        terminated = self._snapshot.game_over
        if terminated:
            reward += self.top_out_penalty
        truncated = self._max_steps is not None and self._steps >= self._max_steps
        info = self._info(self._snapshot)
        info["events"] = result.events
        return self._convert_obs(self._snapshot), reward, terminated, truncated, info

    def render(self):
        snap = self._snapshot
        grid = np.array(snap.board, dtype=np.int64)
        for row, col in snap.active_cells:
            grid[row, col] = piece_index(snap.active) + 1
        return format_grid(
            grid[snap.hidden_rows :], ghost=snap.ghost_cells, row_offset=snap.hidden_rows
        )

    def close(self):
        return None

    # -------------------- Helpers -------------------------
    def _convert_obs(self, snap: Snapshot) -> np.ndarray:
        visible = snap.board[snap.hidden_rows :]
        board = (visible != 0).astype(np.float32).reshape(-1)
        piece = np.zeros(visible.shape, dtype=np.float32)
        for row, col in snap.active_cells:
            if row >= snap.hidden_rows:
                piece[row - snap.hidden_rows, col] = 1.0
        kinds = [snap.active, snap.hold, *snap.preview]
        one_hots = np.zeros((len(kinds), NUM_TYPES), dtype=np.float32)
        for i, kind in enumerate(kinds):
            idx = piece_index(kind)
            if idx >= 0:
                one_hots[i, idx] = 1.0
        return np.concatenate([board, piece.reshape(-1), one_hots.reshape(-1)], dtype=np.float32)

    def _info(self, snap: Snapshot) -> Dict:
        return {
            "score": snap.score,
            "level": snap.level,
            "lines": snap.lines,
            "phase": snap.phase.value,
        }
