"""Shared fixtures.

Matplotlib is forced onto the Agg backend before anything imports pyplot so
the experiment tests can write plots on headless CI runners.
"""

import os

os.environ.setdefault("MPLBACKEND", "Agg")

from typing import Dict, List  # noqa: E402

import pytest  # noqa: E402

from tabular_rl.environment import Environment  # noqa: E402
from tabular_rl.envs import GridWorld  # noqa: E402
from tabular_rl.types import Action, State, StepResult  # noqa: E402


class ScriptedEnvironment(Environment):
    """Environment with a fixed action set per state and no dynamics of its own."""

    def __init__(self, actions: Dict[object, List[str]]):
        self.actions = {State(k): [Action(a) for a in v] for k, v in actions.items()}
        self._state = State(next(iter(actions)))

    def reset(self) -> State:
        return self._state

    def current_state(self) -> State:
        return self._state

    def actions_for(self, state: State) -> List[Action]:
        return list(self.actions.get(state, []))

    def step(self, action: Action) -> StepResult:
        return StepResult(self._state, 0.0, True)

    def is_terminal(self) -> bool:
        return False


@pytest.fixture
def scripted_env():
    return ScriptedEnvironment({1: ["left", "right"], 2: ["left", "right"], 3: []})


@pytest.fixture
def grid_env():
    return GridWorld(grid_size=4)
