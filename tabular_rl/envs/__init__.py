"""
Reference environments.

`GridWorld` and `FrozenLake` are small deterministic grids implemented
natively; any other name is looked up in the Gymnasium registry and wrapped in
`GymEnvironment` (e.g. `FrozenLake-v1`, `Taxi-v3`, `CliffWalking-v1`).
"""

from typing import Optional

import gymnasium as gym

from ..environment import Environment
from .frozen_lake import FrozenLake
from .grid_world import GridWorld
from .gym_env import GymEnvironment

ENV_REGISTRY = {
    "GridWorld": GridWorld,
    "FrozenLake": FrozenLake,
}


def make_environment(name: str, seed: Optional[int] = None, **kwargs) -> Environment:
    """
    Creates an environment by name.

    :param name: Name in `ENV_REGISTRY` or a Gymnasium environment id
    :param seed: Seed for the first reset of a Gymnasium environment; the native grids are deterministic and ignore it
    :param kwargs: Keyword arguments passed to the environment constructor
    :return: Environment instance
    """
    if name in ENV_REGISTRY:
        return ENV_REGISTRY[name](**kwargs)
    return GymEnvironment(gym.make(name, **kwargs), seed=seed)


__all__ = [
    "ENV_REGISTRY",
    "FrozenLake",
    "GridWorld",
    "GymEnvironment",
    "make_environment",
]
