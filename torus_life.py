#!/usr/bin/env python3
"""
  T O R U S   L I F E
  Conway's Game of Life on a wrap-around grid, drawn straight to the terminal.

  Nine classic shapes are stamped at fixed spots on an 80x40 torus: glider,
  blinker, toad, beacon, lightweight spaceship, a small tee, pulsar, diehard
  and acorn. The grid is redrawn ten times a second, forever. Ctrl-C to quit.

  Every cell is two characters wide so the board looks square:
    "██"  alive
    "  "  dead

  Population stats are logged to life_stats.csv in the working directory.
"""

from __future__ import annotations

import sys
import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import IO, ClassVar, TextIO

import numpy as np
from numpy.typing import NDArray
from scipy.ndimage import convolve


# ═══════════════════════════════════════════════════════════════════════
#  Colors
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Color:
    """An 8-bit RGB triple."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise ValueError(f"color channel out of range: {channel}")

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)

# ── Terminal output ─────────────────────────────────────────────────────
CLEAR_HOME = "\x1b[2J\x1b[1;1H"  # clear screen, cursor to 1;1
FULL_BLOCK = "██"
EMPTY_CELL = "  "

# ── Sparkline characters ────────────────────────────────────────────────
SPARKS = "▁▂▃▄▅▆▇█"

# ── Defaults ────────────────────────────────────────────────────────────
WIDTH: int = 80
HEIGHT: int = 40
INTERVAL_MS: int = 100

# ── Convolution kernel (reused every step) ────────────────────────────
NEIGHBOR_KERNEL: NDArray = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=np.int16)

NEIGHBOR_OFFSETS: list[tuple[int, int]] = [
    (dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dy, dx) != (0, 0)
]

# ── Pattern library ─────────────────────────────────────────────────────
# Offsets are (row, col) from the pattern's top-left anchor.
PATTERNS: dict[str, list[tuple[int, int]]] = {
    "glider": [(0, 1), (1, 2), (2, 0), (2, 1), (2, 2)],
    "blinker": [(1, 0), (1, 1), (1, 2)],
    "toad": [(0, 1), (0, 2), (0, 3), (1, 0), (1, 1), (1, 2)],
    "beacon": [(0, 0), (0, 1), (1, 0), (2, 3), (3, 2), (3, 3)],
    "lwss": [
        (0, 0), (0, 3), (1, 4), (2, 0), (2, 4),
        (3, 1), (3, 2), (3, 3), (3, 4),
    ],
    # Not a named Life object; its evolution is whatever the rule makes of it.
    "tee": [(0, 0), (0, 1), (0, 2), (1, 1), (2, 1)],
    "pulsar": [
        (0, 2), (0, 3), (0, 4), (0, 8), (0, 9), (0, 10),
        (2, 0), (2, 5), (2, 7), (2, 12),
        (3, 0), (3, 5), (3, 7), (3, 12),
        (4, 0), (4, 5), (4, 7), (4, 12),
        (5, 2), (5, 3), (5, 4), (5, 8), (5, 9), (5, 10),
        (7, 2), (7, 3), (7, 4), (7, 8), (7, 9), (7, 10),
        (8, 0), (8, 5), (8, 7), (8, 12),
        (9, 0), (9, 5), (9, 7), (9, 12),
        (10, 0), (10, 5), (10, 7), (10, 12),
        (12, 2), (12, 3), (12, 4), (12, 8), (12, 9), (12, 10),
    ],
    "diehard": [(0, 7), (1, 1), (1, 2), (2, 2), (2, 6), (2, 7), (2, 8)],
    "acorn": [(0, 1), (1, 3), (2, 0), (2, 1), (2, 4), (2, 5), (2, 6)],
}

# (pattern, anchor row, anchor col) stamped by load_multiple_patterns()
SEED_LAYOUT: list[tuple[str, int, int]] = [
    ("glider", 1, 1),
    ("blinker", 10, 10),
    ("toad", 20, 20),
    ("beacon", 30, 5),
    ("lwss", 5, 50),
    ("tee", 35, 45),
    ("pulsar", 2, 65),
    ("diehard", 25, 10),
    ("acorn", 15, 35),
]

LOG_NAME = "life_stats.csv"


class PatternBoundsError(IndexError):
    """A pattern was stamped where part of it falls off the grid."""


def pattern_extent(name: str) -> tuple[int, int]:
    """Bounding box of a pattern as (rows, cols)."""
    cells = PATTERNS[name]
    return (
        max(r for r, _ in cells) + 1,
        max(c for _, c in cells) + 1,
    )


# ═══════════════════════════════════════════════════════════════════════
#  Configuration
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LifeConfig:
    """Board size, frame pacing and palette for one simulation."""

    width: int = WIDTH
    height: int = HEIGHT
    interval_ms: int = INTERVAL_MS
    alive_color: Color = WHITE
    dead_color: Color = BLACK
    stats_path: Path | None = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"grid dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.interval_ms < 0:
            raise ValueError(f"frame interval must be >= 0 ms, got {self.interval_ms}")

    @property
    def interval(self) -> float:
        """Frame interval in seconds."""
        return self.interval_ms / 1000.0


# ═══════════════════════════════════════════════════════════════════════
#  Stats logger
# ═══════════════════════════════════════════════════════════════════════

class StatsLogger:
    """Writes population telemetry to CSV for post-hoc inspection."""

    HEADER: ClassVar[str] = "gen,time_s,population,delta,event\n"

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

    def log(self, gen: int, pop: int, delta: int = 0, event: str = "") -> None:
        if self._fh is None:
            return
        t = time.monotonic() - self._t0
        try:
            self._fh.write(f"{gen},{t:.1f},{pop},{delta},{event}\n")
            # Flush on events or periodically
            if event or gen % 50 == 0:
                self._fh.flush()
        except OSError:
            self.close()

    def close(self) -> None:
        if self._fh is not None:
            try:
                self._fh.close()
            except OSError:
                pass
            self._fh = None


# ═══════════════════════════════════════════════════════════════════════
#  Framebuffer
# ═══════════════════════════════════════════════════════════════════════

class Framebuffer:
    """
    A width x height block of colors, flushed to the terminal as text.

    Coordinates outside the buffer are tolerated: writes are dropped and
    reads come back BLACK.
    """

    def __init__(self, width: int, height: int, lit: Color = WHITE) -> None:
        self.width: int = width
        self.height: int = height
        self.lit: Color = lit
        # One RGB row per pixel, indexed by y * width + x; all zeros is BLACK
        self.buffer: NDArray[np.uint8] = np.zeros((width * height, 3), dtype=np.uint8)

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def point(self, x: int, y: int, color: Color) -> None:
        if self._in_bounds(x, y):
            self.buffer[y * self.width + x] = color.as_tuple()

    def get_color(self, x: int, y: int) -> Color:
        if not self._in_bounds(x, y):
            return BLACK
        r, g, b = self.buffer[y * self.width + x].tolist()
        return Color(r, g, b)

    def frame(self) -> str:
        """Render the buffer as newline-terminated rows of two-char cells."""
        lit = np.all(self.buffer == np.array(self.lit.as_tuple(), dtype=np.uint8), axis=1)
        lit = lit.reshape(self.height, self.width)
        glyphs = np.where(lit, FULL_BLOCK, EMPTY_CELL)
        return "".join("".join(row) + "\n" for row in glyphs.tolist())

    def display(self, stream: TextIO | None = None) -> None:
        """Clear the screen, home the cursor and draw one frame."""
        out = stream if stream is not None else sys.stdout
        try:
            out.write(CLEAR_HOME + self.frame())
            out.flush()
        except OSError:
            pass


# ═══════════════════════════════════════════════════════════════════════
#  The universe
# ═══════════════════════════════════════════════════════════════════════

class GameOfLife:
    """
    Conway's Game of Life on a fixed-size torus.

    Two boolean grids of identical shape take turns: `grid` holds the
    current generation and `next` receives the one being computed. At the
    end of a step they trade places, so no cell ever sees a neighbour that
    was already updated this generation.
    """

    def __init__(
        self,
        width: int | None = None,
        height: int | None = None,
        config: LifeConfig | None = None,
    ) -> None:
        if config is None:
            config = LifeConfig(
                width=WIDTH if width is None else width,
                height=HEIGHT if height is None else height,
            )
        elif width is not None or height is not None:
            raise ValueError("pass either width/height or config, not both")
        self.config: LifeConfig = config
        self.width: int = config.width
        self.height: int = config.height

        self.grid: NDArray[np.bool_] = np.zeros((self.height, self.width), dtype=np.bool_)
        self.next: NDArray[np.bool_] = np.zeros((self.height, self.width), dtype=np.bool_)
        self.framebuffer: Framebuffer = Framebuffer(
            self.width, self.height, lit=config.alive_color
        )

        self.generation: int = 0
        self.pop_history: deque[int] = deque(maxlen=500)

        # Pre-allocated buffers for update() hot path
        self._grid_i16: NDArray[np.int16] = np.empty(
            (self.height, self.width), dtype=np.int16
        )
        self._neighbor_buf: NDArray[np.int16] = np.empty(
            (self.height, self.width), dtype=np.int16
        )

        self.load_multiple_patterns()

    @classmethod
    def from_config(cls, config: LifeConfig) -> GameOfLife:
        return cls(config=config)

    # ── Seeding ─────────────────────────────────────────────────────

    def load_multiple_patterns(self) -> None:
        """Wipe the board and stamp every pattern in SEED_LAYOUT."""
        self.grid[:] = False
        for name, row, col in SEED_LAYOUT:
            self.place(name, row, col)
        self.pop_history.clear()
        self.pop_history.append(self.population())

    def place(self, name: str, row: int, col: int) -> None:
        """
        Stamp pattern `name` with its top-left offset at (row, col).

        Raises KeyError for an unknown pattern and PatternBoundsError if any
        cell would land outside the grid; nothing is written in either case.
        """
        cells = PATTERNS[name]
        for dr, dc in cells:
            y, x = row + dr, col + dc
            if not (0 <= y < self.height and 0 <= x < self.width):
                rows, cols = pattern_extent(name)
                raise PatternBoundsError(
                    f"{name} ({rows}x{cols}) at row {row}, col {col} puts a cell at "
                    f"({y}, {x}), outside the {self.height}x{self.width} grid"
                )
        for dr, dc in cells:
            self.grid[row + dr, col + dc] = True

    # ── Simulation ──────────────────────────────────────────────────

    def count_neighbors(self, x: int, y: int) -> int:
        """Live cells among the 8 around (x, y), wrapping at every edge."""
        count = 0
        for dy, dx in NEIGHBOR_OFFSETS:
            if self.grid[(y + dy) % self.height, (x + dx) % self.width]:
                count += 1
        return count

    def update(self) -> None:
        """Advance one generation."""
        g = self.grid

        # Neighbour count via convolution (toroidal wrap-around)
        np.copyto(self._grid_i16, g)
        convolve(self._grid_i16, NEIGHBOR_KERNEL, output=self._neighbor_buf, mode="wrap")
        n = self._neighbor_buf

        # Born on 3, or alive with 2 (alive with 3 is covered by n == 3)
        np.logical_or(n == 3, g & (n == 2), out=self.next)

        self.grid, self.next = self.next, self.grid
        self.generation += 1
        self.pop_history.append(self.population())

    def population(self) -> int:
        return int(np.count_nonzero(self.grid))

    def population_delta(self, span: int = 1) -> int:
        """Change in population over the last `span` generations."""
        ph_len = len(self.pop_history)
        if ph_len < 2:
            return 0
        back = min(span, ph_len - 1)
        return self.pop_history[-1] - self.pop_history[-1 - back]

    def sparkline(self, width: int = 24) -> str:
        ph_len = len(self.pop_history)
        if ph_len < 2:
            return ""
        start = max(0, ph_len - width)
        recent = [self.pop_history[i] for i in range(start, ph_len)]
        lo, hi = min(recent), max(recent)
        if hi == lo:
            return SPARKS[len(SPARKS) // 2] * len(recent)
        n_sparks = len(SPARKS) - 1
        return "".join(SPARKS[int((v - lo) / (hi - lo) * n_sparks)] for v in recent)

    # ── Drawing ─────────────────────────────────────────────────────

    def render(self) -> None:
        """Copy the current generation into the framebuffer."""
        alive = self.config.alive_color
        dead = self.config.dead_color
        fb = self.framebuffer
        for y, row in enumerate(self.grid.tolist()):
            for x, cell in enumerate(row):
                fb.point(x, y, alive if cell else dead)

    def display(self, stream: TextIO | None = None) -> None:
        self.framebuffer.display(stream)


# ═══════════════════════════════════════════════════════════════════════
#  Main loop
# ═══════════════════════════════════════════════════════════════════════

def run(
    life: GameOfLife,
    logger: StatsLogger | None = None,
    frames: int | None = None,
    stream: TextIO | None = None,
) -> None:
    """Render, display, step and pause `frames` times (forever when None)."""
    interval = life.config.interval
    if logger is not None:
        logger.log(gen=life.generation, pop=life.population(), event="seed")
    shown = 0
    while frames is None or shown < frames:
        life.render()
        life.display(stream)
        life.update()
        shown += 1

        if logger is not None and life.generation % 10 == 0:
            logger.log(
                gen=life.generation,
                pop=life.population(),
                delta=life.population_delta(10),
            )

        time.sleep(interval)


def main() -> None:
    config = LifeConfig(stats_path=Path.cwd() / LOG_NAME)
    life = GameOfLife.from_config(config)

    logger: StatsLogger | None = None
    if config.stats_path is not None:
        logger = StatsLogger(config.stats_path)
        logger.open()

    try:
        run(life, logger)
    finally:
        if logger is not None:
            logger.close()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
