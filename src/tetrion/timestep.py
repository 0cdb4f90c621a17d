"""Fixed logic timestep driven by variable frame times."""

from __future__ import annotations


class FixedTimestep:
    """Accumulate real elapsed time and release it as whole logic ticks.

    Front-ends call :meth:`advance` once per rendered frame with the frame's
    duration and run the returned number of engine ticks.  Backlog beyond
    ``max_ticks_per_frame`` is discarded so a long stall (window drag,
    debugger) does not make the game fast-forward.
    """

    def __init__(self, tick_rate: int = 60, *, max_ticks_per_frame: int = 5) -> None:
        if tick_rate <= 0:
            raise ValueError("tick_rate must be positive")
        if max_ticks_per_frame < 1:
            raise ValueError("max_ticks_per_frame must be at least 1")
        self.tick_ms = 1000.0 / tick_rate
        self.max_ticks_per_frame = max_ticks_per_frame
        self.accumulator = 0.0

    def advance(self, elapsed_ms: float) -> int:
        """Add ``elapsed_ms`` and return how many ticks are now due."""

        if elapsed_ms < 0:
            raise ValueError("elapsed time cannot be negative")
        self.accumulator += elapsed_ms
        ticks = int(self.accumulator // self.tick_ms)
        if ticks > self.max_ticks_per_frame:
            ticks = self.max_ticks_per_frame
            self.accumulator = 0.0
        else:
            self.accumulator -= ticks * self.tick_ms
        return ticks

    @property
    def alpha(self) -> float:
        """Fraction of the next tick already accumulated, for interpolation."""

        return self.accumulator / self.tick_ms

    def reset(self) -> None:
        self.accumulator = 0.0
