from dataclasses import dataclass
from typing import Generic, Hashable, NamedTuple, TypeVar

S = TypeVar("S", bound=Hashable)
A = TypeVar("A", bound=Hashable)


class InvalidStateError(ValueError):
    """Raised when an action is requested for a state with no available actions."""


@dataclass(frozen=True)
class State(Generic[S]):
    """
    A discrete state of an environment.

    Wraps an opaque hashable identifier (coordinates, an index, a label...).
    Two states are equal iff their wrapped values are equal.
    """

    value: S

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Action(Generic[A]):
    """A discrete action, wrapping an opaque hashable identifier."""

    value: A

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StateAction(Generic[S, A]):
    """Ordered (state, action) pair used as the Q-table key."""

    state: State[S]
    action: Action[A]


class StepResult(NamedTuple):
    """Outcome of `Environment.step`."""

    next_state: State
    reward: float
    done: bool
