from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Sequence

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class TrainingStats:
    """Snapshot of one training episode."""

    episode: int
    total_reward: float
    steps: int
    epsilon: float
    learning_rate: float
    average_q_value: float
    max_q_value: float
    q_table_size: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def __str__(self) -> str:
        return (
            f"TrainingStats(episode: {self.episode}, reward: {self.total_reward:.2f}, "
            f"steps: {self.steps}, epsilon: {self.epsilon:.3f}, "
            f"lr: {self.learning_rate:.3f}, q_table_size: {self.q_table_size})"
        )


TrainingCallback = Callable[[TrainingStats], None]


class AggregatedStats:
    """
    Metrics derived from an ordered sequence of `TrainingStats`.

    All metrics are computed on access and are 0.0 for an empty sequence.
    `last_n` and `window` return new aggregations over sub-slices; the source
    sequence is never modified.
    """

    def __init__(self, episodes: Sequence[TrainingStats]):
        """
        :param episodes: Episode statistics in training order
        """
        self.episodes = tuple(episodes)

    def __len__(self) -> int:
        return len(self.episodes)

    def _rewards(self) -> np.ndarray:
        return np.array([e.total_reward for e in self.episodes], dtype=float)

    @property
    def average_reward(self) -> float:
        if not self.episodes:
            return 0.0
        return float(np.mean(self._rewards()))

    @property
    def average_steps(self) -> float:
        if not self.episodes:
            return 0.0
        return float(np.mean([e.steps for e in self.episodes]))

    @property
    def best_reward(self) -> float:
        if not self.episodes:
            return 0.0
        return float(np.max(self._rewards()))

    @property
    def worst_reward(self) -> float:
        if not self.episodes:
            return 0.0
        return float(np.min(self._rewards()))

    @property
    def reward_variance(self) -> float:
        """Population variance of the episode rewards."""
        if not self.episodes:
            return 0.0
        return float(np.var(self._rewards()))

    @property
    def reward_std(self) -> float:
        return float(np.sqrt(self.reward_variance))

    def last_n(self, n: int) -> "AggregatedStats":
        """
        Statistics over the last `n` episodes.

        :param n: Number of trailing episodes (all of them if `n` exceeds the count)
        :return: New `AggregatedStats`
        """
        if n >= len(self.episodes):
            return self
        if n <= 0:
            return AggregatedStats([])
        return AggregatedStats(self.episodes[-n:])

    def window(self, start: int, end: int) -> "AggregatedStats":
        """
        Statistics over episodes in `[start, end)`.

        An out-of-range or empty window yields an empty aggregation.

        :param start: First episode position (inclusive)
        :param end: Last episode position (exclusive)
        :return: New `AggregatedStats`
        """
        if start < 0 or end > len(self.episodes) or start >= end:
            return AggregatedStats([])
        return AggregatedStats(self.episodes[start:end])

    def summary(self) -> Dict[str, float]:
        return {
            "episodes": len(self.episodes),
            "average_reward": self.average_reward,
            "average_steps": self.average_steps,
            "best_reward": self.best_reward,
            "worst_reward": self.worst_reward,
            "reward_variance": self.reward_variance,
        }

    def to_dataframe(self) -> pd.DataFrame:
        """One row per episode, columns as in `TrainingStats`."""
        return pd.DataFrame(
            [e.to_dict() for e in self.episodes],
            columns=list(TrainingStats.__dataclass_fields__),
        )

    def __str__(self) -> str:
        if not self.episodes:
            return "AggregatedStats(no episodes)"
        return (
            f"AggregatedStats(episodes: {len(self.episodes)}, "
            f"avg_reward: {self.average_reward:.2f}, "
            f"avg_steps: {self.average_steps:.1f}, "
            f"best: {self.best_reward:.2f}, "
            f"worst: {self.worst_reward:.2f})"
        )
