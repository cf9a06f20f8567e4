from abc import ABC, abstractmethod
from typing import List

from .types import Action, State, StepResult


class Environment(ABC):
    """
    Interface consumed by the agents.

    Implementations supply states, actions and rewards; the agents never
    inspect the wrapped state/action values.
    """

    @abstractmethod
    def reset(self) -> State:
        """
        Reset the environment to its initial state.

        :return: The initial state
        """
        pass

    @abstractmethod
    def current_state(self) -> State:
        """Returns the current state of the environment."""
        pass

    @abstractmethod
    def actions_for(self, state: State) -> List[Action]:
        """
        Actions available in a given state.

        Must be non-empty for any non-terminal state, otherwise action
        selection fails with `InvalidStateError`.

        :param state: State to query
        :return: List of available actions
        """
        pass

    @abstractmethod
    def step(self, action: Action) -> StepResult:
        """
        Apply an action to the current state.

        :param action: Action to take
        :return: `StepResult` with (next_state, reward, done)
        """
        pass

    @abstractmethod
    def is_terminal(self) -> bool:
        """Whether the current state is terminal."""
        pass

    def is_state_terminal(self, state: State) -> bool:
        """Whether a given state is terminal. Environments that cannot tell return False."""
        return False

    def available_actions(self) -> List[Action]:
        """Actions available in the current state."""
        return self.actions_for(self.current_state())

    def all_states(self) -> List[State]:
        """Enumerates every state of the environment, if the environment supports it."""
        raise NotImplementedError(
            f"{self.__class__.__name__} does not enumerate its states"
        )

    def all_actions(self) -> List[Action]:
        """Enumerates every action of the environment, if the environment supports it."""
        raise NotImplementedError(
            f"{self.__class__.__name__} does not enumerate its actions"
        )
