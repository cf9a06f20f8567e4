from typing import List, Optional, Sequence

from ..environment import Environment
from ..types import Action, State, StepResult
from .grid_world import MOVES

DEFAULT_MAP = [
    "SFFF",
    "FHFH",
    "FFFH",
    "HFFG",
]


class FrozenLake(Environment):
    """
    Deterministic frozen lake.

    Cells are `S` (start), `F` (frozen), `H` (hole) and `G` (goal). Falling in a
    hole costs -10 and reaching the goal pays +10, both ending the episode; any
    other move costs -0.1. All four moves are always available and moves into
    the border leave the agent in place.
    """

    def __init__(self, grid: Optional[Sequence[Sequence[str]]] = None):
        """
        :param grid: Rows of the map, as strings or lists of single-character cells
        """
        self.grid = [list(row) for row in (grid or DEFAULT_MAP)]
        self.n_rows = len(self.grid)
        self.n_cols = len(self.grid[0])
        self._start = self._find_start()
        self._state = self._start

    def _find_start(self) -> State:
        for i, row in enumerate(self.grid):
            for j, cell in enumerate(row):
                if cell == "S":
                    return State((i, j))
        return State((0, 0))

    def _cell(self, state: State) -> str:
        row, col = state.value
        return self.grid[row][col]

    def reset(self) -> State:
        self._state = self._start
        return self._state

    def current_state(self) -> State:
        return self._state

    def actions_for(self, state: State) -> List[Action]:
        return self.all_actions()

    def step(self, action: Action) -> StepResult:
        if action.value not in MOVES:
            raise ValueError(f"Unknown action: {action.value}")
        row, col = self._state.value
        d_row, d_col = MOVES[action.value]
        row = min(max(row + d_row, 0), self.n_rows - 1)
        col = min(max(col + d_col, 0), self.n_cols - 1)
        self._state = State((row, col))

        cell = self._cell(self._state)
        if cell == "H":
            return StepResult(self._state, -10.0, True)
        if cell == "G":
            return StepResult(self._state, 10.0, True)
        return StepResult(self._state, -0.1, False)

    def is_terminal(self) -> bool:
        return self.is_state_terminal(self._state)

    def is_state_terminal(self, state: State) -> bool:
        return self._cell(state) in ("H", "G")

    def all_states(self) -> List[State]:
        return [State((i, j)) for i in range(self.n_rows) for j in range(self.n_cols)]

    def all_actions(self) -> List[Action]:
        return [Action(name) for name in MOVES]

    def render(self) -> str:
        """Text view of the lake with the agent drawn as `A`."""
        lines = []
        for i, row in enumerate(self.grid):
            cells = ["A" if (i, j) == self._state.value else c for j, c in enumerate(row)]
            lines.append(" ".join(cells))
        return "\n".join(lines)
