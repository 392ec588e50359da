"""
  ∞  L I F E  ∞
  Conway's Game of Life on an unbounded plane.

  A generation is nothing more than the set of live (x, y) cells. There is
  no grid: the universe is exactly as large as the live cells need it to be,
  in every direction, negative coordinates included.

  One step works in two folds over the live set:

    live cells → neighbor count per cell → cells per neighbor count

  and the next generation is read straight off the second map:

    everything with 3 live neighbors,
    plus everything with 2 live neighbors that is already alive.

  This module does no I/O. Drawing lives in life_term.py.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator

# ── Types ───────────────────────────────────────────────────────────────
Cell = tuple[int, int]
Generation = set[Cell]

# ── Neighborhood ────────────────────────────────────────────────────────
# Row-major: dx outer, dy inner, centre skipped
NEIGHBOR_OFFSETS: tuple[Cell, ...] = tuple(
    (dx, dy)
    for dx in (-1, 0, 1)
    for dy in (-1, 0, 1)
    if (dx, dy) != (0, 0)
)

# ── Pattern library ─────────────────────────────────────────────────────
# Coordinates are placed so the shapes start on screen with the default
# renderer origin and travel into view.
PULSAR_QUADRANT: list[Cell] = [
    (2, 1), (3, 1), (4, 1),
    (1, 2), (1, 3), (1, 4),
    (2, 6), (3, 6), (4, 6),
    (6, 2), (6, 3), (6, 4),
]


def _mirror4(cells: Iterable[Cell]) -> list[Cell]:
    """Reflect a quadrant pattern into full 4-fold symmetry around (0,0)."""
    full: set[Cell] = set()
    for x, y in cells:
        full.update([(x, y), (-x, y), (x, -y), (-x, -y)])
    return sorted(full)


PATTERNS: dict[str, list[Cell]] = {
    # moves down and to the right
    "glider": [(-24, -22), (-23, -22), (-22, -22), (-22, -23), (-23, -24)],
    # lightweight spaceship, moves right
    "spaceship": [
        (-24, 0), (-23, 0), (-22, 0), (-21, 0),
        (-21, -1), (-21, -2), (-22, -3),
        (-25, -1), (-25, -3),
    ],
    # period 3, stays put
    "pulsar": _mirror4(PULSAR_QUADRANT),
}


def pattern(name: str) -> Generation:
    """Return a fresh copy of a named preset."""
    try:
        return set(PATTERNS[name])
    except KeyError:
        known = ", ".join(sorted(PATTERNS))
        raise KeyError(f"unknown pattern {name!r} (known: {known})") from None


# ═══════════════════════════════════════════════════════════════════════
#  Engine
# ═══════════════════════════════════════════════════════════════════════

def neighbors(cell: Cell) -> Iterator[Cell]:
    """The 8 cells surrounding ``cell``. No bounds: the plane is unbounded."""
    x, y = cell
    return ((x + dx, y + dy) for dx, dy in NEIGHBOR_OFFSETS)


def neighbor_counts(generation: Iterable[Cell]) -> Counter[Cell]:
    """Map each cell adjacent to the live set to its number of live neighbors.

    Only cells next to at least one live cell get an entry, so a live cell
    whose neighbors are all dead is absent. Counter reads absent keys as 0.
    """
    counts: Counter[Cell] = Counter()
    for live_cell in generation:
        counts.update(neighbors(live_cell))
    return counts


def count_cells(counts: Counter[Cell] | dict[Cell, int]) -> dict[int, set[Cell]]:
    """Invert ``cell -> count`` into ``count -> {cells}``.

    Keys are only the counts that occur. Callers treat a missing key as an
    empty set.
    """
    by_count: dict[int, set[Cell]] = {}
    for cell, count in counts.items():
        by_count.setdefault(count, set()).add(cell)
    return by_count


def generation_stats(generation: Iterable[Cell]) -> dict[int, set[Cell]]:
    """Live-neighbor count → set of cells having that many live neighbors."""
    return count_cells(neighbor_counts(generation))


def evolve(generation: Iterable[Cell]) -> Generation:
    """Advance one generation.

    The next generation is every cell with exactly 3 live neighbors (birth or
    survival) plus every currently live cell with exactly 2. Accepts any
    finite collection of (x, y) pairs; duplicates are dropped first.
    """
    if not isinstance(generation, (set, frozenset)):
        generation = set(generation)
    stats = generation_stats(generation)
    born_or_surviving = stats.get(3, set())
    surviving = stats.get(2, set()) & generation
    return born_or_surviving | surviving


def generations(seed: Iterable[Cell]) -> Iterator[Generation]:
    """Yield ``seed``, then each successor, forever."""
    current = set(seed)
    while True:
        yield current
        current = evolve(current)


def translate(generation: Iterable[Cell], dx: int, dy: int) -> Generation:
    return {(x + dx, y + dy) for x, y in generation}
