#!/usr/bin/env python3
"""
  ∞  L I F E  ∞  in a plain terminal.

  Draws each generation with ANSI cursor-positioning escapes and loops
  forever with a fixed delay. Cell (x, y) lands on terminal row y + origin
  and column 2 * (x + origin); anything outside the window is clipped, the
  engine itself never learns where the screen ends.

  Usage:
    python3 life_term.py                     # glider, forever
    python3 life_term.py pulsar              # another preset
    python3 life_term.py spaceship -n 200    # stop after 200 generations
    python3 life_term.py --delay 0.05        # faster
    python3 life_term.py --log life_stats.csv

  Ctrl-C quits; the cursor is restored on the way out.
"""

from __future__ import annotations

import argparse
import atexit
import itertools
import shutil
import sys
import time
from collections import deque
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import IO, ClassVar

import numpy as np
from numpy.typing import NDArray

import life
from life import Cell, Generation

# ── Defaults ────────────────────────────────────────────────────────────
ORIGIN: int = 25        # screen offset applied to both axes
DELAY: float = 0.1      # seconds between generations
GLYPH: str = "*"
DEFAULT_PATTERN: str = "glider"

# ── ANSI control sequences ──────────────────────────────────────────────
CLEAR_SCREEN = "\x1b[2J"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"


def move_cursor(row: int, col: int) -> str:
    return f"\x1b[{row};{col}H"


def screen_position(cell: Cell, origin: int = ORIGIN) -> tuple[int, int]:
    """Terminal (row, col), one-based, for a world cell."""
    x, y = cell
    return y + origin, 2 * (x + origin)


# ═══════════════════════════════════════════════════════════════════════
#  Rendering
# ═══════════════════════════════════════════════════════════════════════

class TerminalRenderer:
    """Writes generations to a text stream as cursor moves plus a glyph."""

    def __init__(
        self,
        stream: IO[str] | None = None,
        rows: int | None = None,
        cols: int | None = None,
        origin: int = ORIGIN,
        glyph: str = GLYPH,
    ) -> None:
        self.stream: IO[str] = stream if stream is not None else sys.stdout
        if rows is None or cols is None:
            size = shutil.get_terminal_size()
            rows = size.lines if rows is None else rows
            cols = size.columns if cols is None else cols
        self.rows = rows
        self.cols = cols
        self.origin = origin
        self.glyph = glyph

    def visible_positions(self, generation: Iterable[Cell]) -> list[tuple[int, int]]:
        """Screen positions of the cells that fall inside the window.

        Clipping happens on Python ints in world coordinates, so cells far
        beyond int64 range are dropped rather than wrapped. Sorted row-major
        so redraws are stable between runs.
        """
        min_y, max_y = 1 - self.origin, self.rows - self.origin
        visible = [
            (x, y) for x, y in generation
            if min_y <= y <= max_y and 1 <= 2 * (x + self.origin) <= self.cols
        ]
        if not visible:
            return []
        cells: NDArray[np.int64] = np.array(visible, dtype=np.int64)
        rows = cells[:, 1] + self.origin
        cols = 2 * (cells[:, 0] + self.origin)
        order = np.lexsort((cols, rows))
        return list(zip(rows[order].tolist(), cols[order].tolist()))

    def draw(self, generation: Iterable[Cell]) -> None:
        """Clear the screen and draw one generation."""
        out: list[str] = [CLEAR_SCREEN]
        for row, col in self.visible_positions(generation):
            out.append(move_cursor(row, col))
            out.append(self.glyph)
        self.stream.write("".join(out))
        self.stream.flush()

    def hide_cursor(self) -> None:
        self.stream.write(HIDE_CURSOR)
        self.stream.flush()

    def show_cursor(self) -> None:
        self.stream.write(SHOW_CURSOR)
        self.stream.flush()


# ═══════════════════════════════════════════════════════════════════════
#  Telemetry
# ═══════════════════════════════════════════════════════════════════════

def step_stats(previous: Generation, current: Generation) -> tuple[int, int, int]:
    """(population, births, deaths) for one transition."""
    return len(current), len(current - previous), len(previous - current)


class CycleDetector:
    """Spots a generation repeating one it saw within the last few steps."""

    def __init__(self, window: int = 60) -> None:
        self.history: deque[frozenset[Cell]] = deque(maxlen=window)

    def observe(self, generation: Iterable[Cell]) -> int:
        """Record a generation and return its period, or 0 if none seen."""
        snapshot = frozenset(generation)
        period = 0
        for back, seen in enumerate(reversed(self.history), start=1):
            if seen == snapshot:
                period = back
                break
        self.history.append(snapshot)
        return period


class StatsLogger:
    """Writes run telemetry to CSV."""

    HEADER: ClassVar[str] = "gen,time_s,population,births,deaths,cycle_period,event\n"

    def __init__(self, path: Path) -> None:
        self._path = path
        self._fh: IO[str] | None = None
        self._t0: float = time.monotonic()

    def open(self) -> None:
        try:
            self._fh = open(self._path, "w")
            self._fh.write(self.HEADER)
            self._fh.flush()
        except OSError:
            self._fh = None

    @property
    def enabled(self) -> bool:
        return self._fh is not None

    def log(
        self,
        gen: int,
        pop: int,
        births: int,
        deaths: int,
        cycle: int,
        event: str = "",
    ) -> None:
        if self._fh is None:
            return
        t = time.monotonic() - self._t0
        try:
            self._fh.write(f"{gen},{t:.1f},{pop},{births},{deaths},{cycle},{event}\n")
            # Flush on events or periodically
            if event or gen % 50 == 0:
                self._fh.flush()
        except OSError:
            pass

    def close(self) -> None:
        if self._fh is not None:
            try:
                self._fh.close()
            except OSError:
                pass
            self._fh = None


class RunMonitor:
    """on_step hook that feeds a StatsLogger with per-generation telemetry."""

    def __init__(self, logger: StatsLogger, window: int = 60) -> None:
        self.logger = logger
        self.cycles = CycleDetector(window)
        self.cycle_period: int = 0
        self._extinct: bool = False

    def __call__(self, gen: int, previous: Generation, current: Generation) -> str:
        pop, births, deaths = step_stats(previous, current)
        period = self.cycles.observe(current)

        event = ""
        if pop == 0:
            if not self._extinct:
                event = "extinct"
                self._extinct = True
        elif period and period != self.cycle_period:
            event = f"cycle(period={period})"
        self.cycle_period = period

        self.logger.log(gen, pop, births, deaths, period, event)
        return event


# ═══════════════════════════════════════════════════════════════════════
#  Main loop
# ═══════════════════════════════════════════════════════════════════════

StepHook = Callable[[int, Generation, Generation], object]


def run(
    seed: Iterable[Cell],
    render: Callable[[Generation], object],
    delay: float = DELAY,
    generations: int | None = None,
    on_step: StepHook | None = None,
) -> int:
    """Render ``seed`` and its successors, ``delay`` seconds apart.

    Loops forever unless ``generations`` caps the number rendered. Returns
    how many generations were drawn.
    """
    drawn = 0
    previous: Generation = set()
    for gen, current in enumerate(itertools.islice(life.generations(seed), generations)):
        render(current)
        drawn += 1
        if on_step is not None:
            on_step(gen, previous, current)
        previous = current
        time.sleep(delay)
    return drawn


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Conway's Game of Life on an unbounded plane, in the terminal"
    )
    parser.add_argument("pattern", nargs="?", default=DEFAULT_PATTERN,
                        choices=sorted(life.PATTERNS),
                        help=f"Preset to start from (default: {DEFAULT_PATTERN})")
    parser.add_argument("--delay", type=float, default=DELAY,
                        help=f"Seconds between generations (default: {DELAY})")
    parser.add_argument("-n", "--generations", type=int, default=None,
                        help="Stop after this many generations (default: never)")
    parser.add_argument("--origin", type=int, default=ORIGIN,
                        help=f"Screen offset for cell (0, 0) (default: {ORIGIN})")
    parser.add_argument("--glyph", type=str, default=GLYPH,
                        help=f"Character drawn for a live cell (default: {GLYPH!r})")
    parser.add_argument("--log", type=Path, default=None,
                        help="Write per-generation stats to this CSV file")
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.delay < 0:
        parser.error("--delay must not be negative")
    if args.generations is not None and args.generations <= 0:
        parser.error("--generations must be positive")
    if len(args.glyph) != 1:
        parser.error("--glyph must be a single character")
    return args


def main(argv: list[str] | None = None, stream: IO[str] | None = None) -> int:
    args = parse_args(argv)
    renderer = TerminalRenderer(stream=stream, origin=args.origin, glyph=args.glyph)

    logger: StatsLogger | None = None
    monitor: RunMonitor | None = None
    if args.log is not None:
        logger = StatsLogger(args.log)
        logger.open()
        monitor = RunMonitor(logger)

    renderer.hide_cursor()
    atexit.register(renderer.show_cursor)
    try:
        run(
            life.pattern(args.pattern),
            renderer.draw,
            delay=args.delay,
            generations=args.generations,
            on_step=monitor,
        )
    except KeyboardInterrupt:
        pass
    finally:
        if logger is not None:
            logger.close()
        atexit.unregister(renderer.show_cursor)
        renderer.show_cursor()
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
