"""Mines board rules.

The board is a 5x5 grid with 3 mines. Mines are placed with a partial
Fisher-Yates shuffle over the cell indices, one fair draw per mine, so the
layout is verifiable from the bet's seeds and sequence number like any other draw.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Set, Tuple

from hexabets.domain.fairness import SeededStream
from hexabets.domain.games import floor_cents
from hexabets.errors import InvalidParameters, StaleBoard

GRID_SIZE = 5
MINE_COUNT = 3
STEP_MULTIPLIER = 0.2

Cell = Tuple[int, int]


def place_mines(
    stream: SeededStream, sequence_number: int, grid_size: int = GRID_SIZE, mine_count: int = MINE_COUNT
) -> FrozenSet[Cell]:
    cells = [(x, y) for y in range(grid_size) for x in range(grid_size)]
    if not 0 < mine_count < len(cells):
        raise InvalidParameters("mine count must leave at least one safe cell")
    for i in range(mine_count):
        j = i + stream.integer(sequence_number + i, len(cells) - i)
        cells[i], cells[j] = cells[j], cells[i]
    return frozenset(cells[:mine_count])


def mines_multiplier(revealed: int) -> float:
    return 1 + revealed * STEP_MULTIPLIER


@dataclass
class MinesBoard:
    bet_amount: float
    mined_cells: FrozenSet[Cell]
    sequence_number: int = 0
    commit_hash: str = ""
    grid_size: int = GRID_SIZE
    revealed_cells: Set[Cell] = field(default_factory=set)
    forfeited: bool = False

    @property
    def multiplier(self) -> float:
        return mines_multiplier(len(self.revealed_cells))

    @property
    def payout(self) -> float:
        return floor_cents(self.bet_amount * self.multiplier)

    def reveal(self, x: int, y: int) -> bool:
        """Reveal one cell. Returns False on a mine, which forfeits the board.

        Revealing an already revealed cell changes nothing.

        Raises:
            StaleBoard: The board was already forfeited
            InvalidParameters: The cell is outside the grid
        """
        if self.forfeited:
            raise StaleBoard("board was forfeited")
        if not (0 <= x < self.grid_size and 0 <= y < self.grid_size):
            raise InvalidParameters(f"cell must be inside the {self.grid_size}x{self.grid_size} grid")
        if (x, y) in self.mined_cells:
            self.forfeited = True
            return False
        self.revealed_cells.add((x, y))
        return True

    @property
    def cleared(self) -> bool:
        return len(self.revealed_cells) == self.grid_size**2 - len(self.mined_cells)
