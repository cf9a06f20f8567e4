import json
from copy import deepcopy
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Type, Union

import yaml

from .agents_rl import (
    BaseRLAgent,
    ExpectedSARSAAgent,
    QLearningAgent,
    SARSAAgent,
)
from .decay_schedules import (
    CosineAnnealingSchedule,
    DecaySchedule,
    ExponentialDecaySchedule,
    LinearDecaySchedule,
    PolynomialDecaySchedule,
    StepDecaySchedule,
)


class RLAlgMethod(Enum):
    """Tabular RL algorithms supported in this project."""

    Q_LEARNING = "q_learning"
    SARSA = "sarsa"
    EXPECTED_SARSA = "expected_sarsa"


class DecayMethod(Enum):
    """Exploration-rate decay schedules."""

    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    POLYNOMIAL = "polynomial"
    STEP = "step"
    COSINE = "cosine"  # Rises from the floor towards the initial value over total_steps


# Mapping of enums to implementations
AGENT_CLASSES: Dict[RLAlgMethod, Type[BaseRLAgent]] = {
    RLAlgMethod.Q_LEARNING: QLearningAgent,
    RLAlgMethod.SARSA: SARSAAgent,
    RLAlgMethod.EXPECTED_SARSA: ExpectedSARSAAgent,
}

DECAY_SCHEDULES: Dict[DecayMethod, Type[DecaySchedule]] = {
    DecayMethod.LINEAR: LinearDecaySchedule,
    DecayMethod.EXPONENTIAL: ExponentialDecaySchedule,
    DecayMethod.POLYNOMIAL: PolynomialDecaySchedule,
    DecayMethod.STEP: StepDecaySchedule,
    DecayMethod.COSINE: CosineAnnealingSchedule,
}


def create_agent(algorithm: Union[RLAlgMethod, str], **kwargs) -> BaseRLAgent:
    """
    Creates an agent for the given algorithm.

    :param algorithm: `RLAlgMethod` or its string value
    :param kwargs: Keyword arguments passed to the agent constructor
    :return: Agent instance
    """
    try:
        method = RLAlgMethod(algorithm)
    except ValueError:
        valid = [m.value for m in RLAlgMethod]
        raise ValueError(
            f"Unsupported algorithm '{algorithm}'. Supported values are: {valid}"
        ) from None
    return AGENT_CLASSES[method](**kwargs)


def _or_default(value: Any, default: Any) -> Any:
    # Only None falls back; zeros reach the schedule constructor and its validation
    return default if value is None else value


@dataclass
class DecayConfig:
    """
    Configuration for the exploration-rate decay schedule.

    Unset parameters take the defaults of `get_params`. `DecayMethod.COSINE` raises
    epsilon from `min_value` towards its start value, unlike the other methods.
    """

    method: DecayMethod = DecayMethod.EXPONENTIAL
    min_value: float = 0.0

    # Specific parameters for certain schedules
    total_steps: Optional[int] = None  # For linear, polynomial and cosine
    decay_rate: Optional[float] = None  # For exponential
    power: Optional[float] = None  # For polynomial
    step_size: Optional[int] = None  # For step
    decay_factor: Optional[float] = None  # For step

    def get_params(self) -> Dict[str, Any]:
        """Returns the specific parameters for the selected schedule."""
        params: Dict[str, Any] = {"min_value": self.min_value}
        if self.method in {DecayMethod.LINEAR, DecayMethod.COSINE}:
            params["total_steps"] = _or_default(self.total_steps, 1000)
        elif self.method == DecayMethod.EXPONENTIAL:
            params["decay_rate"] = _or_default(self.decay_rate, 0.995)
        elif self.method == DecayMethod.POLYNOMIAL:
            params["total_steps"] = _or_default(self.total_steps, 1000)
            params["power"] = _or_default(self.power, 2.0)
        elif self.method == DecayMethod.STEP:
            params["step_size"] = _or_default(self.step_size, 100)
            params["decay_factor"] = _or_default(self.decay_factor, 0.5)
        return params

    def build(self) -> DecaySchedule:
        """Instantiates the configured schedule."""
        return DECAY_SCHEDULES[self.method](**self.get_params())

    def to_dict(self) -> Dict[str, Any]:
        config_dict = asdict(self)
        config_dict["method"] = self.method.value
        return config_dict

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "DecayConfig":
        config_dict = dict(config_dict)
        if "method" in config_dict:
            config_dict["method"] = DecayMethod(config_dict["method"])
        return cls(**config_dict)


@dataclass
class RLConfig:
    """Configuration for tabular RL training runs."""

    algorithm: RLAlgMethod = RLAlgMethod.Q_LEARNING
    n_training_episodes: int = 1000
    max_steps: Optional[int] = 100
    learning_rate: float = 0.1
    gamma: float = 0.9
    epsilon_start: float = 0.1
    epsilon_end: float = 0.0  # Floor passed to the decay schedule
    decay: Optional[DecayConfig] = None  # Constant epsilon when None
    default_q_value: float = 0.0
    n_eval_episodes: int = 100
    report_interval: int = 1
    random_seed: Optional[int] = None

    def _to_serializable_dict(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Converts enum fields to serializable values."""
        config_dict["algorithm"] = self.algorithm.value
        config_dict["decay"] = self.decay.to_dict() if self.decay is not None else None
        return config_dict

    @classmethod
    def _from_serializable_dict(cls, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Converts serializable values to enum/dataclass fields."""
        if "algorithm" in config_dict:
            config_dict["algorithm"] = RLAlgMethod(config_dict["algorithm"])
        if config_dict.get("decay") is not None:
            config_dict["decay"] = DecayConfig.from_dict(config_dict["decay"])
        return config_dict

    def to_dict(self) -> Dict[str, Any]:
        """Converts the algorithm configuration to a dictionary."""
        return self._to_serializable_dict(asdict(self))

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "RLConfig":
        """Creates an instance of the algorithm configuration from a dictionary."""
        normalized_config = cls._from_serializable_dict(deepcopy(config_dict))
        return cls(**normalized_config)

    def build_agent(self) -> BaseRLAgent:
        """Creates an untrained agent with this configuration's hyper-parameters."""
        return create_agent(
            self.algorithm,
            learning_rate=self.learning_rate,
            gamma=self.gamma,
            epsilon=self.epsilon_start,
            default_q_value=self.default_q_value,
            random_seed=self.random_seed,
        )

    def build_decay_schedule(self) -> Optional[DecaySchedule]:
        return self.decay.build() if self.decay is not None else None

    def save_json(self, filepath: Path | str) -> None:
        """Saves the configuration to a JSON file."""
        filepath = Path(filepath)
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    def save_yaml(self, filepath: Path | str) -> None:
        """Saves the configuration to a YAML file."""
        filepath = Path(filepath)
        with open(filepath, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

    @classmethod
    def load_json(cls, filepath: Path | str) -> "RLConfig":
        """Loads the configuration from a JSON file."""
        filepath = Path(filepath)
        with open(filepath, "r", encoding="utf-8") as f:
            config_dict = json.load(f)
        return cls.from_dict(config_dict)

    @classmethod
    def load_yaml(cls, filepath: Path | str) -> "RLConfig":
        """Loads the configuration from a YAML file."""
        filepath = Path(filepath)
        with open(filepath, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
        return cls.from_dict(config_dict)


@dataclass
class ExperimentConfig:
    """Full configuration for a training experiment, including algorithm parameters and environment settings."""

    environment_name: str
    env_kwargs: Dict[str, Any] = field(default_factory=dict)
    algorithm: RLConfig = field(default_factory=RLConfig)
    experiments_dir: Path = Path("results")

    def to_dict(self) -> Dict[str, Any]:
        """Converts the full configuration to a dictionary."""
        return {
            "environment_name": self.environment_name,
            "env_kwargs": self.env_kwargs,
            "algorithm": self.algorithm.to_dict(),
            "experiments_dir": str(self.experiments_dir),
        }

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "ExperimentConfig":
        """
        Creates an instance from a dictionary.

        :param config_dict: A dictionary containing the configuration parameters. It should have the same structure as the one produced by `to_dict()`.
        :return: An instance of `ExperimentConfig` with the parameters set according to the provided dictionary.
        """
        config_dict = dict(config_dict)
        if "algorithm" in config_dict:
            algorithm_config = config_dict["algorithm"]
            if not isinstance(algorithm_config, dict):
                raise ValueError("'algorithm' configuration must be a dictionary")

            algorithm_name = algorithm_config.get("algorithm", RLAlgMethod.Q_LEARNING.value)
            rl_algorithms = {method.value for method in RLAlgMethod}
            if algorithm_name not in rl_algorithms:
                raise ValueError(
                    f"Unsupported algorithm '{algorithm_name}'. Supported values are: {sorted(rl_algorithms)}"
                )
            config_dict["algorithm"] = RLConfig.from_dict(algorithm_config)
        if "experiments_dir" in config_dict:
            config_dict["experiments_dir"] = Path(config_dict["experiments_dir"])
        if config_dict.get("env_kwargs") is None:
            config_dict["env_kwargs"] = {}
        return cls(**config_dict)

    def save_json(self, filepath: Path | str) -> None:
        """Saves the configuration in JSON format."""
        filepath = Path(filepath)
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    def save_yaml(self, filepath: Path | str) -> None:
        """Saves the configuration in YAML format."""
        filepath = Path(filepath)
        with open(filepath, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

    @classmethod
    def load_json(cls, filepath: Path | str) -> "ExperimentConfig":
        """Loads the configuration from JSON."""
        filepath = Path(filepath)
        with open(filepath, "r", encoding="utf-8") as f:
            config_dict = json.load(f)
        return cls.from_dict(config_dict)

    @classmethod
    def load_yaml(cls, filepath: Path | str) -> "ExperimentConfig":
        """Loads the configuration from YAML."""
        filepath = Path(filepath)
        with open(filepath, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
        return cls.from_dict(config_dict)
