"""tabular_rl: tabular Q-Learning, SARSA and Expected-SARSA with epsilon-greedy exploration."""

from .agents_rl import BaseRLAgent, ExpectedSARSAAgent, QLearningAgent, SARSAAgent
from .config_exp import ExperimentConfig, RLAlgMethod, RLConfig, create_agent
from .decay_schedules import (
    CosineAnnealingSchedule,
    DecaySchedule,
    ExponentialDecaySchedule,
    LinearDecaySchedule,
    PolynomialDecaySchedule,
    StepDecaySchedule,
)
from .environment import Environment
from .serialization import QTableSerializer
from .training import train_with_stats
from .training_stats import AggregatedStats, TrainingStats
from .types import Action, InvalidStateError, State, StateAction, StepResult

__all__ = [
    "Action",
    "AggregatedStats",
    "BaseRLAgent",
    "CosineAnnealingSchedule",
    "DecaySchedule",
    "Environment",
    "ExpectedSARSAAgent",
    "ExperimentConfig",
    "ExponentialDecaySchedule",
    "InvalidStateError",
    "LinearDecaySchedule",
    "PolynomialDecaySchedule",
    "QLearningAgent",
    "QTableSerializer",
    "RLAlgMethod",
    "RLConfig",
    "SARSAAgent",
    "State",
    "StateAction",
    "StepDecaySchedule",
    "StepResult",
    "TrainingStats",
    "create_agent",
    "train_with_stats",
]
