"""Headless ASCII demo for the engine.

Run with: `python -m tetrion`

Plays a session with random actions for a fixed number of ticks and prints
the final frame, useful as a smoke test that the engine runs end to end
without any front-end.
"""

from __future__ import annotations

import argparse
import logging
import random

from . import EngineConfig, GameAction, GameState
from .utils import format_grid, render_grid

LOGGER = logging.getLogger(__name__)

RANDOM_ACTIONS = (
    GameAction.LEFT,
    GameAction.RIGHT,
    GameAction.ROTATE_CW,
    GameAction.ROTATE_CCW,
    GameAction.HARD_DROP,
    GameAction.HOLD,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--ticks", type=int, default=3600, help="Logic ticks to simulate.")
    parser.add_argument("--seed", type=int, default=0, help="Seed for pieces and actions.")
    parser.add_argument(
        "--action-rate",
        type=float,
        default=0.1,
        help="Probability of issuing a random action on each tick.",
    )
    parser.add_argument("--level", type=int, default=1, help="Starting level.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING).",
    )
    return parser.parse_args()


def run(state: GameState, ticks: int, rng: random.Random, action_rate: float) -> None:
    for _ in range(ticks):
        actions = []
        if rng.random() < action_rate:
            actions.append(rng.choice(RANDOM_ACTIONS))
        result = state.tick(actions)
        if result.snapshot.game_over:
            LOGGER.info("Stopped after %d ticks", result.snapshot.tick)
            break


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(message)s"
    )
    state = GameState(EngineConfig(seed=args.seed, start_level=args.level))
    run(state, args.ticks, random.Random(args.seed), args.action_rate)
    print(format_grid(render_grid(state.board, state.active)))
    print(f"score={state.score} level={state.level} lines={state.lines} pieces={state.pieces}")


if __name__ == "__main__":
    main()
