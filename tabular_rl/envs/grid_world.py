from typing import List, Optional, Tuple

from ..environment import Environment
from ..types import Action, State, StepResult

Position = Tuple[int, int]

MOVES = {
    "up": (-1, 0),
    "down": (1, 0),
    "left": (0, -1),
    "right": (0, 1),
}


class GridWorld(Environment):
    """
    Deterministic square grid.

    The agent starts at (0, 0) and the episode ends on the goal cell. Every
    move costs `step_reward`; entering the goal pays `goal_reward` instead.
    Only moves that stay inside the grid are available.
    """

    def __init__(
        self,
        grid_size: int = 4,
        goal: Optional[Position] = None,
        step_reward: float = -1.0,
        goal_reward: float = 10.0,
    ):
        """
        :param grid_size: Number of rows and columns
        :param goal: Goal cell, bottom-right corner by default
        :param step_reward: Reward of every non-goal move
        :param goal_reward: Reward for reaching the goal
        """
        if grid_size < 2:
            raise ValueError(f"grid_size must be at least 2, got {grid_size}")
        self.grid_size = grid_size
        self.goal = tuple(goal) if goal is not None else (grid_size - 1, grid_size - 1)
        if not all(0 <= c < grid_size for c in self.goal):
            raise ValueError(f"goal {self.goal} is outside the {grid_size}x{grid_size} grid")
        self.step_reward = step_reward
        self.goal_reward = goal_reward
        self._state = State((0, 0))

    def reset(self) -> State:
        self._state = State((0, 0))
        return self._state

    def current_state(self) -> State:
        return self._state

    def actions_for(self, state: State) -> List[Action]:
        row, col = state.value
        actions = []
        if row > 0:
            actions.append(Action("up"))
        if row < self.grid_size - 1:
            actions.append(Action("down"))
        if col > 0:
            actions.append(Action("left"))
        if col < self.grid_size - 1:
            actions.append(Action("right"))
        return actions

    def step(self, action: Action) -> StepResult:
        if action.value not in MOVES:
            raise ValueError(f"Unknown action: {action.value}")
        row, col = self._state.value
        d_row, d_col = MOVES[action.value]
        row = min(max(row + d_row, 0), self.grid_size - 1)
        col = min(max(col + d_col, 0), self.grid_size - 1)

        self._state = State((row, col))
        done = self._state.value == self.goal
        reward = self.goal_reward if done else self.step_reward
        return StepResult(self._state, reward, done)

    def is_terminal(self) -> bool:
        return self.is_state_terminal(self._state)

    def is_state_terminal(self, state: State) -> bool:
        return state.value == self.goal

    def all_states(self) -> List[State]:
        return [
            State((row, col))
            for row in range(self.grid_size)
            for col in range(self.grid_size)
        ]

    def all_actions(self) -> List[Action]:
        return [Action(name) for name in MOVES]
