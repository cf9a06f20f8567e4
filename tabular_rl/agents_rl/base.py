import itertools
import json
from abc import ABC, abstractmethod
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np
import yaml
from tqdm import tqdm

from ..decay_schedules import DecaySchedule
from ..environment import Environment
from ..serialization import PayloadDeserializer, QTableSerializer, parse_literal
from ..types import Action, InvalidStateError, State, StateAction


class BaseRLAgent(ABC):
    """
    Base class for tabular RL agents.

    Holds the Q-table and the epsilon-greedy policy shared by Q-Learning, SARSA
    and Expected-SARSA. The Q-table maps `StateAction` keys to values and grows
    lazily: unseen pairs read as `default_q_value` and only `update_q_value`
    writes entries.
    """

    def __init__(
        self,
        learning_rate: float = 0.1,
        gamma: float = 0.9,
        epsilon: float = 0.1,
        default_q_value: float = 0.0,
        random_seed: Optional[int] = None,
    ):
        """
        Initialize the base RL agent.

        :param learning_rate: Learning rate (alpha) for value updates, in [0, 1]
        :param gamma: Discount factor for future rewards, in [0, 1]
        :param epsilon: Initial exploration probability
        :param default_q_value: Value returned for state-action pairs never written
        :param random_seed: Seed for exploration and tie-breaking
        """
        if not 0.0 <= learning_rate <= 1.0:
            raise ValueError(f"learning_rate must be in [0, 1], got {learning_rate}")
        if not 0.0 <= gamma <= 1.0:
            raise ValueError(f"gamma must be in [0, 1], got {gamma}")

        self.learning_rate = learning_rate
        self.gamma = gamma
        self.epsilon = epsilon
        self.default_q_value = default_q_value
        self.rng = np.random.default_rng(random_seed)

        self._q_table: Dict[StateAction, float] = {}

    # Q-table access

    def get_q_value(self, state: State, action: Action) -> float:
        """
        Read a Q-value without modifying the table.

        :param state: State
        :param action: Action
        :return: Stored Q-value, or the default value for unseen pairs
        """
        return self._q_table.get(StateAction(state, action), self.default_q_value)

    def update_q_value(self, state: State, action: Action, value: float) -> None:
        """
        Write a Q-value, creating the entry if needed.

        :param state: State
        :param action: Action
        :param value: New Q-value
        """
        self._q_table[StateAction(state, action)] = float(value)

    def get_q_values_for_state(self, state: State) -> Dict[Action, float]:
        """
        Stored Q-values for a state.

        Only pairs already written appear in the result.

        :param state: State to look up
        :return: Dictionary mapping actions to Q-values
        """
        return {
            key.action: value
            for key, value in self._q_table.items()
            if key.state == state
        }

    @property
    def q_table(self) -> Mapping[StateAction, float]:
        """Read-only view of the Q-table."""
        return MappingProxyType(self._q_table)

    @property
    def q_table_size(self) -> int:
        return len(self._q_table)

    def load_q_table(self, q_table: Mapping[StateAction, float]) -> None:
        """
        Write every entry of `q_table` into the agent's table.

        :param q_table: Mapping from state-action pairs to Q-values
        """
        for key, value in q_table.items():
            self.update_q_value(key.state, key.action, value)

    def q_table_statistics(self) -> Tuple[float, float, int]:
        """
        Summary of the Q-table.

        :return: Tuple of (mean Q-value, max Q-value, number of entries), zeros when empty
        """
        if not self._q_table:
            return 0.0, 0.0, 0
        values = np.fromiter(self._q_table.values(), dtype=float)
        return float(np.mean(values)), float(np.max(values)), len(values)

    # Policy

    def _actions_for(self, environment: Environment, state: State) -> List[Action]:
        actions = list(environment.actions_for(state))
        if not actions:
            raise InvalidStateError(f"No available actions for state {state}")
        return actions

    def _best_action(self, state: State, actions: List[Action]) -> Action:
        q_values = [self.get_q_value(state, action) for action in actions]
        max_q = max(q_values)
        # Ties are broken at random so insertion order does not bias the policy
        best_actions = [a for a, q in zip(actions, q_values) if q == max_q]
        return best_actions[self.rng.integers(len(best_actions))]

    def select_action_greedy(self, environment: Environment, state: State) -> Action:
        """
        Select action using greedy policy (exploitation only).

        :param environment: Environment providing the available actions
        :param state: Current state
        :return: One of the actions with the highest Q-value, chosen at random
        """
        return self._best_action(state, self._actions_for(environment, state))

    def select_action(self, environment: Environment, state: State) -> Action:
        """
        Select action using epsilon-greedy policy.

        :param environment: Environment providing the available actions
        :param state: Current state
        :return: Selected action
        """
        actions = self._actions_for(environment, state)
        if self.rng.random() < self.epsilon:
            return actions[self.rng.integers(len(actions))]  # Exploration
        return self._best_action(state, actions)  # Exploitation

    def decay_epsilon(self, decay_rate: float) -> None:
        """
        Multiplicative epsilon decay, floored at 0.

        :param decay_rate: Factor applied to epsilon
        """
        self.epsilon = max(0.0, self.epsilon * decay_rate)

    def set_epsilon(self, value: float) -> None:
        """
        Set epsilon, clamped to [0, 1].

        :param value: New exploration probability
        """
        self.epsilon = min(max(value, 0.0), 1.0)

    # Training

    @staticmethod
    def _step_range(max_steps: Optional[int]) -> Iterable[int]:
        return itertools.count() if max_steps is None else range(max_steps)

    @abstractmethod
    def train_episode(
        self, environment: Environment, max_steps: Optional[int] = None
    ) -> Tuple[float, int]:
        """
        Train the agent for one episode.

        :param environment: Environment to train on
        :param max_steps: Optional step cap for the episode
        :return: Tuple of (total reward, steps taken)
        """
        pass

    def train(
        self,
        environment: Environment,
        n_episodes: int,
        max_steps: Optional[int] = None,
        decay_schedule: Optional[DecaySchedule] = None,
        epsilon_floor: float = 0.0,
        verbose: bool = False,
    ) -> np.ndarray:
        """
        Train the agent for several independent episodes.

        The Q-table persists across episodes (and across calls).

        :param environment: Environment to train on
        :param n_episodes: Number of training episodes
        :param max_steps: Optional step cap per episode
        :param decay_schedule: If given, epsilon is set from it before each episode
        :param epsilon_floor: Floor passed to the decay schedule
        :param verbose: Whether to show progress bar
        :return: Array of episode rewards
        """
        initial_epsilon = self.epsilon
        episode_rewards = []

        iterator = (
            tqdm(range(n_episodes), desc=f"Training {self.__class__.__name__}")
            if verbose
            else range(n_episodes)
        )

        for episode in iterator:
            if decay_schedule is not None:
                self.epsilon = decay_schedule.value(
                    episode, initial_epsilon, epsilon_floor
                )

            episode_reward, _ = self.train_episode(environment, max_steps)
            episode_rewards.append(episode_reward)

            if verbose and episode > 0 and episode % 100 == 0:
                recent_avg = np.mean(episode_rewards[-100:])
                iterator.set_postfix(
                    {"avg_reward_100": f"{recent_avg:.2f}", "epsilon": f"{self.epsilon:.3f}"}
                )

        return np.array(episode_rewards)

    def evaluate(
        self,
        environment: Environment,
        n_episodes: int = 100,
        max_steps: int = 99,
        verbose: bool = False,
    ) -> Tuple[float, float, np.ndarray]:
        """
        Evaluate the trained agent with the greedy policy.

        :param environment: Environment to evaluate on
        :param n_episodes: Number of evaluation episodes
        :param max_steps: Maximum steps per episode
        :param verbose: Whether to show progress bar
        :return: Tuple of (mean_reward, std_reward, episode_rewards)
        """
        episode_rewards = []

        iterator = (
            tqdm(range(n_episodes), desc="Evaluating") if verbose else range(n_episodes)
        )

        for _ in iterator:
            state = environment.reset()
            episode_reward = 0.0

            for _ in range(max_steps):
                if environment.is_terminal():
                    break
                action = self.select_action_greedy(environment, state)
                state, reward, done = environment.step(action)
                episode_reward += reward
                if done:
                    break

            episode_rewards.append(episode_reward)

        episode_rewards = np.array(episode_rewards)
        return float(np.mean(episode_rewards)), float(np.std(episode_rewards)), episode_rewards

    def get_policy(self, environment: Environment) -> Dict[State, Action]:
        """
        Extract the greedy policy for every non-terminal state of the environment.

        :param environment: Environment able to enumerate its states
        :return: Dictionary mapping states to their greedy action
        """
        return {
            state: self.select_action_greedy(environment, state)
            for state in environment.all_states()
            if not environment.is_state_terminal(state)
        }

    # Persistence

    def save(self, filepath: Union[str, Path]) -> Path:
        """
        Save the Q-table to a JSON file.

        :param filepath: Path to save the Q-table
        :return: Path of the written file
        """
        filepath = QTableSerializer.save_to_file(filepath, self._q_table)
        print(f"Q-table saved to {filepath}")
        return filepath

    @classmethod
    def load(
        cls,
        filepath: Union[str, Path],
        state_deserializer: PayloadDeserializer = parse_literal,
        action_deserializer: PayloadDeserializer = parse_literal,
    ) -> "BaseRLAgent":
        """
        Load a trained agent from a file or experiment directory.

        If `filepath` is a directory, it must contain a `q_table.json` file and at
        least one config file (`config.yaml`, or `config.json`).
        If `filepath` is a file, it is treated as the Q-table and the config is
        searched in the same directory.

        Payloads are restored with `parse_literal` by default, so any text that is
        a Python literal changes type: `3` and `(0, 1)` as intended, but also
        labels spelled `None`, `True` or `1e3`. Pass `str` as a deserializer to
        keep such labels as strings.

        :param filepath: Path to an experiment directory or to `q_table.json`
        :param state_deserializer: Maps state text back to its value
        :param action_deserializer: Maps action text back to its value
        :return: Reconstructed agent instance with loaded Q-table
        """
        filepath = Path(filepath)

        if filepath.is_dir():
            experiment_dir = filepath
            q_table_path = experiment_dir / "q_table.json"
        else:
            q_table_path = filepath
            experiment_dir = q_table_path.parent

        if not q_table_path.exists():
            raise FileNotFoundError(f"Q-table file not found: {q_table_path}")

        config_path = None
        for candidate_name in ("config.yaml", "config.json"):
            candidate = experiment_dir / candidate_name
            if candidate.exists():
                config_path = candidate
                break

        if config_path is None:
            raise FileNotFoundError(
                "Configuration file not found. Expected one of: config.yaml, config.json"
            )

        if config_path.suffix.lower() in {".yaml", ".yml"}:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        else:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = json.load(f)

        if not isinstance(config_data, dict):
            raise ValueError(f"Invalid config format in {config_path}")

        algorithm_cfg = config_data.get("algorithm", config_data)
        if not isinstance(algorithm_cfg, dict):
            raise ValueError(
                "Invalid 'algorithm' section in configuration. Expected a dictionary"
            )

        instance = cls(
            learning_rate=algorithm_cfg.get("learning_rate", 0.1),
            gamma=algorithm_cfg.get("gamma", 0.9),
            epsilon=algorithm_cfg.get("epsilon_end", 0.0),
            default_q_value=algorithm_cfg.get("default_q_value", 0.0),
            random_seed=algorithm_cfg.get("random_seed"),
        )
        instance.load_q_table(
            QTableSerializer.load_from_file(
                q_table_path,
                state_deserializer=state_deserializer,
                action_deserializer=action_deserializer,
            )
        )

        print(f"Q-table loaded from {q_table_path}")
        print(f"Configuration loaded from {config_path}")

        return instance

    def print_statistics(self) -> None:
        """Print statistics about the Q-table."""
        values = np.fromiter(self._q_table.values(), dtype=float)
        n_states = len({key.state for key in self._q_table})

        print("\n" + "=" * 50)
        print(f"{self.__class__.__name__} Q-TABLE STATISTICS")
        print("=" * 50)
        print(f"Visited states: {n_states}")
        print(f"State-action entries: {len(values)}")
        print(f"Epsilon: {self.epsilon:.4f}")
        if len(values):
            print(f"Q-table mean: {np.mean(values):.4f}")
            print(f"Q-table std: {np.std(values):.4f}")
            print(f"Q-table min: {np.min(values):.4f}")
            print(f"Q-table max: {np.max(values):.4f}")
            print(f"Non-zero entries: {np.count_nonzero(values)} / {len(values)}")
        print("=" * 50 + "\n")
