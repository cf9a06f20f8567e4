from typing import List, Optional

import gymnasium as gym

from ..environment import Environment
from ..types import Action, State, StepResult


class GymEnvironment(Environment):
    """
    Adapter exposing a Gymnasium environment through the `Environment` interface.

    Both the observation and the action space must be `Discrete`; states wrap
    the integer observation and actions wrap the integer action index.
    Truncation ends the episode (`done`) without marking the state terminal,
    so agents still bootstrap from it.
    """

    def __init__(self, env: gym.Env, seed: Optional[int] = None):
        """
        :param env: Gymnasium environment with discrete spaces
        :param seed: Seed used on the first reset
        """
        if not isinstance(env.observation_space, gym.spaces.Discrete):
            raise ValueError(
                f"Only Discrete observation spaces are supported, got {env.observation_space}"
            )
        if not isinstance(env.action_space, gym.spaces.Discrete):
            raise ValueError(
                f"Only Discrete action spaces are supported, got {env.action_space}"
            )
        self.env = env
        self._seed = seed
        self._state: Optional[State] = None
        self._terminated = False
        self._done = False

    def reset(self) -> State:
        observation, info = self.env.reset(seed=self._seed)
        self._seed = None  # Only the first reset is seeded
        self._state = State(int(observation))
        self._terminated = False
        self._done = False
        return self._state

    def current_state(self) -> State:
        if self._state is None:
            raise RuntimeError("Environment must be reset before use")
        return self._state

    def actions_for(self, state: State) -> List[Action]:
        return self.all_actions()

    def step(self, action: Action) -> StepResult:
        observation, reward, terminated, truncated, info = self.env.step(action.value)
        self._state = State(int(observation))
        self._terminated = bool(terminated)
        self._done = bool(terminated or truncated)
        return StepResult(self._state, float(reward), self._done)

    def is_terminal(self) -> bool:
        return self._done

    def is_state_terminal(self, state: State) -> bool:
        # Only the state reached by a terminating step is known to be terminal
        return self._terminated and state == self._state

    def all_states(self) -> List[State]:
        return [State(i) for i in range(int(self.env.observation_space.n))]

    def all_actions(self) -> List[Action]:
        return [Action(i) for i in range(int(self.env.action_space.n))]

    def close(self) -> None:
        self.env.close()
