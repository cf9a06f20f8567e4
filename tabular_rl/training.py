"""
Episode-by-episode training driver.

The agents only expose pull-based `train_episode` / `train` calls. This module
wraps them in a generator so a caller (progress bar, UI, notebook) regains
control after every episode and receives a `TrainingStats` snapshot. Stopping
early is done by no longer consuming the generator; an episode that has
started always runs to completion or to its step cap.
"""

from typing import Iterator, Optional

from .agents_rl import BaseRLAgent
from .decay_schedules import DecaySchedule
from .environment import Environment
from .training_stats import TrainingCallback, TrainingStats


def collect_stats(
    agent: BaseRLAgent, episode: int, total_reward: float, steps: int
) -> TrainingStats:
    """
    Builds the statistics snapshot of an episode from the agent's current table.

    :param agent: Agent after the episode
    :param episode: Episode index
    :param total_reward: Reward accumulated during the episode
    :param steps: Steps taken during the episode
    :return: `TrainingStats` snapshot
    """
    average_q, max_q, size = agent.q_table_statistics()
    return TrainingStats(
        episode=episode,
        total_reward=total_reward,
        steps=steps,
        epsilon=agent.epsilon,
        learning_rate=agent.learning_rate,
        average_q_value=average_q,
        max_q_value=max_q,
        q_table_size=size,
    )


def train_with_stats(
    agent: BaseRLAgent,
    environment: Environment,
    n_episodes: int,
    report_interval: int = 1,
    decay_schedule: Optional[DecaySchedule] = None,
    epsilon_floor: float = 0.0,
    max_steps: Optional[int] = None,
    callback: Optional[TrainingCallback] = None,
) -> Iterator[TrainingStats]:
    """
    Trains `agent` for `n_episodes`, yielding statistics between episodes.

    Stats are yielded every `report_interval` episodes and always for the last one.

    :param agent: Agent to train
    :param environment: Environment to train on
    :param n_episodes: Number of training episodes
    :param report_interval: Yield every this many episodes
    :param decay_schedule: If given, epsilon is set from it before each episode
    :param epsilon_floor: Floor passed to the decay schedule
    :param max_steps: Optional step cap per episode
    :param callback: Called with every yielded snapshot
    :return: Iterator over `TrainingStats`
    """
    if report_interval < 1:
        raise ValueError(f"report_interval must be at least 1, got {report_interval}")

    initial_epsilon = agent.epsilon

    for episode in range(n_episodes):
        if decay_schedule is not None:
            agent.epsilon = decay_schedule.value(episode, initial_epsilon, epsilon_floor)

        total_reward, steps = agent.train_episode(environment, max_steps)

        if episode % report_interval == 0 or episode == n_episodes - 1:
            stats = collect_stats(agent, episode, total_reward, steps)
            if callback is not None:
                callback(stats)
            yield stats
