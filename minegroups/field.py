"""Mine field abstraction consumed by the solver, and an in-memory grid implementation."""

import random
from typing import (
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Protocol,
    Sequence,
    Set,
    Tuple,
)

from .errors import ContractViolation, PuzzleTruthViolation
from .utils import Coord, get_neighborhoods

MINES_GENERATION_ALGORITHMS: Tuple[str, ...] = (
    "safe_first_action_rule",
    "safe_neighborhood_rule",
)


class Cell(Protocol):
    """A single cell of a mine field, as seen by the solver."""

    def is_explored(self) -> bool:
        ...

    def is_flagged(self) -> bool:
        ...

    def explore(self) -> None:
        """Mark the cell explored; fails if the cell holds a mine."""
        ...

    def flag(self) -> None:
        """Mark the cell as a mine; fails if the cell is safe."""
        ...

    def surrounding_mine_count(self) -> int:
        """Number of mines around the cell; defined only once explored."""
        ...

    def __lt__(self, other: "Cell") -> bool:
        """Display order, e.g. row-major on a grid."""
        ...


class MineField(Protocol):
    """Neighbor enumeration over the cells of a field."""

    def for_each_neighbor(self, cell: Cell, visit: Callable[[Cell], None]) -> None:
        ...


class GridCell:
    """A cell of a :class:`GridMineField`, hashed by its position."""

    def __init__(self, field: "GridMineField", x: int, y: int) -> None:
        self.field = field
        self.x = x
        self.y = y
        self.mined: bool = False
        self.explored: bool = False
        self.flagged: bool = False
        self._surrounding_mines: Optional[int] = None

    def __hash__(self) -> int:
        return hash((self.x, self.y))

    def __repr__(self) -> str:
        if self.flagged:
            state = "F"
        elif self.explored:
            state = "E"
        else:
            state = "U"
        return f"Cell({state})[{self.x}, {self.y}]"

    def __lt__(self, other: "GridCell") -> bool:
        return (self.y, self.x) < (other.y, other.x)

    @property
    def coord(self) -> Coord:
        return (self.x, self.y)

    def is_explored(self) -> bool:
        return self.explored

    def is_flagged(self) -> bool:
        return self.flagged

    def explore(self) -> None:
        if self.flagged:
            raise ContractViolation(f"Cannot explore flagged cell {self!r}.")
        if self.mined:
            raise PuzzleTruthViolation(f"Explored mined cell {self!r}.", self)
        if not self.explored:
            self.explored = True
            self.field.explored_count += 1

    def flag(self) -> None:
        if self.explored:
            raise ContractViolation(f"Cannot flag explored cell {self!r}.")
        if not self.mined:
            raise PuzzleTruthViolation(f"Tried to flag non-mined cell {self!r}.", self)
        if not self.flagged:
            self.flagged = True
            self.field.flagged_count += 1

    def surrounding_mine_count(self) -> int:
        if not self.explored:
            raise ContractViolation(f"Cell {self!r} is not explored.")
        if self._surrounding_mines is None:
            self._surrounding_mines = sum(
                1 for n in self.field.neighbors(self) if n.mined
            )
        return self._surrounding_mines


class GridMineField:
    """
    In-memory rectangular mine field with 8-connected neighborhoods.

    Mines are placed once, at construction, around a guaranteed-safe point
    (the centre of the grid unless ``safe_x``/``safe_y`` are given).
    """

    def __init__(
        self,
        width: int,
        height: int,
        mines_count: int,
        mines_generation_algorithm: str = "safe_neighborhood_rule",
        *,
        safe_x: Optional[int] = None,
        safe_y: Optional[int] = None,
        seed: Optional[int] = None,
        mine_positions: Optional[Iterable[Coord]] = None,
    ) -> None:
        """
        Build a mine field.

        Args:
            width: Field width (number of columns), must be > 0.
            height: Field height (number of rows), must be > 0.
            mines_count: Total number of mines to place, must be >= 0.
            mines_generation_algorithm: Mine placement rule; one of
                {"safe_first_action_rule", "safe_neighborhood_rule"}.
            safe_x: X-coordinate of the guaranteed-safe point (default width // 2).
            safe_y: Y-coordinate of the guaranteed-safe point (default height // 2).
            seed: Seed for the placement RNG; None draws from system entropy.
            mine_positions: Explicit mine coordinates. When given, random
                placement is skipped and its length must equal mines_count.

        Raises:
            ValueError: If dimensions are invalid, the algorithm is
                unrecognized, or the mines cannot be placed.
        """
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive.")
        if mines_count < 0:
            raise ValueError("mines_count must be non-negative.")
        if mines_generation_algorithm not in MINES_GENERATION_ALGORITHMS:
            raise ValueError(
                'mines_generation_algorithm must be "safe_first_action_rule" '
                'or "safe_neighborhood_rule".'
            )

        self.width: int = width
        self.height: int = height
        self.mines_count: int = mines_count
        self.mines_generation_algorithm: str = mines_generation_algorithm
        self.safe_x: int = width // 2 if safe_x is None else safe_x
        self.safe_y: int = height // 2 if safe_y is None else safe_y
        if not self.in_bounds(self.safe_x, self.safe_y):
            raise ValueError("Safe point is outside the field.")

        self.explored_count: int = 0
        self.flagged_count: int = 0

        self._neighborhoods: Dict[Coord, Tuple[Coord, ...]] = get_neighborhoods(
            width, height
        )
        self._grid: List[List[GridCell]] = [
            [GridCell(self, x, y) for x in range(width)] for y in range(height)
        ]

        if mine_positions is not None:
            mines = set(mine_positions)
            if len(mines) != mines_count:
                raise ValueError("mine_positions must hold exactly mines_count cells.")
            for mx, my in mines:
                if not self.in_bounds(mx, my):
                    raise ValueError(f"Mine ({mx}, {my}) is outside the field.")
        else:
            mines = self._draw_mines(random.Random(seed))

        for mx, my in mines:
            self._grid[my][mx].mined = True

    @classmethod
    def from_layout(
        cls, rows: Sequence[str], *, safe_x: int = 0, safe_y: int = 0
    ) -> "GridMineField":
        """
        Build a field from text rows where ``*`` marks a mine.

        >>> field = GridMineField.from_layout(["..*", "...", "..."])
        >>> field.mines_count
        1
        """
        if not rows or any(len(row) != len(rows[0]) for row in rows):
            raise ValueError("Layout rows must be non-empty and of equal length.")

        mines = [
            (x, y) for y, row in enumerate(rows) for x, ch in enumerate(row) if ch == "*"
        ]
        return cls(
            len(rows[0]),
            len(rows),
            len(mines),
            "safe_first_action_rule",
            safe_x=safe_x,
            safe_y=safe_y,
            mine_positions=mines,
        )

    def _draw_mines(self, rng: random.Random) -> Set[Coord]:
        safe: Set[Coord] = {(self.safe_x, self.safe_y)}
        if self.mines_generation_algorithm == "safe_neighborhood_rule":
            safe.update(self._neighborhoods[(self.safe_x, self.safe_y)])

        eligible: List[Coord] = [
            (x, y)
            for y in range(self.height)
            for x in range(self.width)
            if (x, y) not in safe
        ]
        if self.mines_count > len(eligible):
            raise ValueError(
                f"Cannot place {self.mines_count} mines while satisfying "
                f"{self.mines_generation_algorithm}."
            )

        # Sample mines uniformly without replacement.
        return set(rng.sample(eligible, self.mines_count))

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> GridCell:
        if not self.in_bounds(x, y):
            raise ValueError("Cell coordinates are outside the field.")
        return self._grid[y][x]

    def safe_cell(self) -> GridCell:
        """Return the cell guaranteed to hold no mine."""
        return self._grid[self.safe_y][self.safe_x]

    def cells(self) -> Iterator[GridCell]:
        """Iterate over every cell in row-major order."""
        for row in self._grid:
            yield from row

    def neighbors(self, cell: GridCell) -> Tuple[GridCell, ...]:
        return tuple(self._grid[ny][nx] for nx, ny in self._neighborhoods[cell.coord])

    def for_each_neighbor(
        self, cell: GridCell, visit: Callable[[GridCell], None]
    ) -> None:
        for neighbor in self.neighbors(cell):
            visit(neighbor)

    def is_cleared(self) -> bool:
        """True once every safe cell has been explored."""
        return self.explored_count == self.width * self.height - self.mines_count

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    _ANSI_RESET = "\033[0m"
    _ANSI_COORD = "\033[96m"
    _ANSI_MINE = "\033[91m"
    _ANSI_FLAG = "\033[93m"

    def _c(self, s: str) -> str:
        """Wrap string in coordinate color."""
        return f"{self._ANSI_COORD}{s}{self._ANSI_RESET}"

    def cell_char(self, cell: GridCell, reveal_all: bool = False) -> str:
        """Single-character view: count (blank for 0), ``!`` flag, ``*`` mine, ``#`` unknown."""
        if cell.explored:
            return " 12345678"[cell.surrounding_mine_count()]
        if cell.flagged:
            return "!"
        if reveal_all and cell.mined:
            return "*"
        return "#"

    def format_board(self, reveal_all: bool = False, color: bool = True) -> str:
        """
        Render the field as a multi-line string for terminal display.

        Args:
            reveal_all: If True, show mines that have not been flagged.
            color: If False, omit ANSI escape sequences.

        Returns:
            A formatted multi-line string with coordinate labels and the grid.
        """
        coord = self._c if color else (lambda s: s)

        def cell_str(cell: GridCell) -> str:
            ch = self.cell_char(cell, reveal_all)
            if not color:
                return ch
            if ch == "!":
                return f"{self._ANSI_FLAG}{ch}{self._ANSI_RESET}"
            if ch == "*":
                return f"{self._ANSI_MINE}{ch}{self._ANSI_RESET}"
            return ch

        header_cells = " ".join(f"{x:2d}" for x in range(self.width))
        out = [coord("   ") + coord(header_cells)]
        out.append(coord("   " + "-" * (3 * self.width - 1)))

        for y, row in enumerate(self._grid):
            row_cells = " ".join(f" {cell_str(cell)}" for cell in row)
            out.append(coord(f"{y:2d} ") + coord("|") + row_cells)

        return "\n".join(out)

    def print_board(self, reveal_all: bool = False) -> None:
        """Print the field to stdout."""
        print(self.format_board(reveal_all=reveal_all))
