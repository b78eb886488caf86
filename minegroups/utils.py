"""Utility functions shared by the mine field, the solver and the analysis tools."""

from typing import Dict, List, Tuple

Coord = Tuple[int, int]

# Row-major 8-neighbourhood offsets (dx, dy), top-left first.
_OFFSETS: Tuple[Coord, ...] = tuple(
    (dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dx, dy) != (0, 0)
)

# Module-level cache: (width, height) -> {(x,y): ((nx,ny), ...), ...}
_NEIGHBORHOODS_CACHE: Dict[Tuple[int, int], Dict[Coord, Tuple[Coord, ...]]] = {}

_DURATION_UNITS: Tuple[str, ...] = ("d", "h", "m", "s", "ms", "µs", "ns")
_DURATION_FACTORS: Tuple[int, ...] = (24, 60, 60, 1000, 1000, 1000)


def get_neighborhoods(width: int, height: int) -> Dict[Coord, Tuple[Coord, ...]]:
    """
    Precompute and cache 8-connected neighbor coordinates for every cell in a grid.

    Neighbors are listed in row-major order so that every walk over a
    neighborhood visits cells in the same, stable order.

    Args:
        width: Grid width (number of columns). Must be positive.
        height: Grid height (number of rows). Must be positive.

    Returns:
        Mapping from each cell (x, y) to a tuple of valid neighboring
        coordinates (nx, ny).

    Raises:
        ValueError: If width or height is non-positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive.")

    key = (width, height)
    cached = _NEIGHBORHOODS_CACHE.get(key)
    if cached is not None:
        return cached

    neighborhoods: Dict[Coord, Tuple[Coord, ...]] = {}
    for y in range(height):
        for x in range(width):
            neighborhoods[(x, y)] = tuple(
                (x + dx, y + dy)
                for dx, dy in _OFFSETS
                if 0 <= x + dx < width and 0 <= y + dy < height
            )

    _NEIGHBORHOODS_CACHE[key] = neighborhoods
    return neighborhoods


def format_ns(nanoseconds: int) -> str:
    """
    Format a duration in nanoseconds as e.g. ``"1s 250ms 3µs 12ns"``.

    Zero-valued trailing units are kept once a larger unit has been emitted;
    a zero duration formats as an empty string.
    """
    if nanoseconds < 0:
        raise ValueError("nanoseconds must be non-negative.")

    parts: List[str] = []
    amount = nanoseconds
    for i in range(len(_DURATION_FACTORS) - 1, -1, -1):
        if amount <= 0:
            break
        amount, mod = divmod(amount, _DURATION_FACTORS[i])
        parts.append(f"{mod}{_DURATION_UNITS[i + 1]}")

    if amount > 0:
        parts.append(f"{amount}{_DURATION_UNITS[0]}")

    return " ".join(reversed(parts))
