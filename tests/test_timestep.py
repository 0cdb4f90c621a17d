from __future__ import annotations

import pytest

from tetrion.timestep import FixedTimestep


def test_ticks_are_released_as_time_accumulates() -> None:
    # 50 Hz keeps the tick length an exact 20 ms.
    clock = FixedTimestep(50)
    assert clock.advance(10) == 0
    assert clock.advance(10) == 1
    assert clock.advance(45) == 2
    assert clock.alpha == pytest.approx(0.25)


def test_backlog_is_capped_and_discarded() -> None:
    clock = FixedTimestep(50, max_ticks_per_frame=5)
    assert clock.advance(1000) == 5
    assert clock.accumulator == 0.0
    assert clock.advance(20) == 1


def test_reset_drops_partial_tick() -> None:
    clock = FixedTimestep(50)
    clock.advance(15)
    clock.reset()
    assert clock.advance(10) == 0


def test_invalid_arguments() -> None:
    with pytest.raises(ValueError):
        FixedTimestep(0)
    with pytest.raises(ValueError):
        FixedTimestep(60, max_ticks_per_frame=0)
    with pytest.raises(ValueError):
        FixedTimestep().advance(-1)
