"""Tests for TrainingStats, AggregatedStats and the stats-reporting training driver."""

import pytest

from tabular_rl.agents_rl import QLearningAgent
from tabular_rl.decay_schedules import ExponentialDecaySchedule
from tabular_rl.envs import GridWorld
from tabular_rl.training import train_with_stats
from tabular_rl.training_stats import AggregatedStats, TrainingStats


def make_stats(episode, reward, steps=10):
    return TrainingStats(
        episode=episode,
        total_reward=reward,
        steps=steps,
        epsilon=0.1,
        learning_rate=0.1,
        average_q_value=0.0,
        max_q_value=0.0,
        q_table_size=0,
    )


@pytest.fixture
def history():
    return [make_stats(0, 1.0, 10), make_stats(1, 3.0, 20), make_stats(2, 5.0, 30), make_stats(3, 7.0, 40)]


class TestAggregatedStats:
    def test_empty_is_all_zero(self):
        stats = AggregatedStats([])
        assert stats.average_reward == 0.0
        assert stats.average_steps == 0.0
        assert stats.best_reward == 0.0
        assert stats.worst_reward == 0.0
        assert stats.reward_variance == 0.0
        assert str(stats) == "AggregatedStats(no episodes)"

    def test_metrics(self, history):
        stats = AggregatedStats(history)
        assert stats.average_reward == 4.0
        assert stats.average_steps == 25.0
        assert stats.best_reward == 7.0
        assert stats.worst_reward == 1.0
        assert stats.reward_variance == pytest.approx(5.0)
        assert stats.reward_std == pytest.approx(5.0**0.5)

    def test_last_n(self, history):
        stats = AggregatedStats(history)
        assert stats.last_n(2).average_reward == 6.0
        assert stats.last_n(10) is stats
        assert len(stats.last_n(0)) == 0

    def test_window(self, history):
        stats = AggregatedStats(history)
        assert stats.window(1, 3).average_reward == 4.0
        assert len(stats.window(3, 2)) == 0
        assert len(stats.window(-1, 2)) == 0
        assert len(stats.window(0, 5)) == 0

    def test_views_do_not_mutate_source(self, history):
        stats = AggregatedStats(history)
        stats.window(0, 2)
        stats.last_n(1)
        assert len(stats) == 4
        assert len(history) == 4

    def test_dataframe(self, history):
        df = AggregatedStats(history).to_dataframe()
        assert list(df["total_reward"]) == [1.0, 3.0, 5.0, 7.0]
        assert "q_table_size" in df.columns

    def test_training_stats_immutable(self):
        stats = make_stats(0, 1.0)
        with pytest.raises(AttributeError):
            stats.total_reward = 2.0


class TestTrainWithStats:
    def test_reports_every_interval_and_last(self):
        agent = QLearningAgent(epsilon=0.2, random_seed=0)
        reported = list(train_with_stats(agent, GridWorld(grid_size=3), 10, report_interval=4))
        assert [s.episode for s in reported] == [0, 4, 8, 9]

    def test_snapshot_reflects_agent(self):
        agent = QLearningAgent(learning_rate=0.2, epsilon=0.2, random_seed=0)
        (stats,) = list(train_with_stats(agent, GridWorld(grid_size=3), 1))
        average_q, max_q, size = agent.q_table_statistics()
        assert stats.q_table_size == size > 0
        assert stats.average_q_value == average_q
        assert stats.max_q_value == max_q
        assert stats.learning_rate == 0.2
        assert stats.steps > 0

    def test_applies_decay_before_each_episode(self):
        agent = QLearningAgent(epsilon=1.0, random_seed=0)
        schedule = ExponentialDecaySchedule(decay_rate=0.5)
        reported = list(train_with_stats(agent, GridWorld(grid_size=3), 3, decay_schedule=schedule))
        assert [s.epsilon for s in reported] == [1.0, 0.5, 0.25]

    def test_callback_receives_each_snapshot(self):
        received = []
        agent = QLearningAgent(epsilon=0.2, random_seed=0)
        reported = list(
            train_with_stats(agent, GridWorld(grid_size=3), 5, callback=received.append)
        )
        assert received == reported

    def test_stopping_consumption_stops_training(self):
        agent = QLearningAgent(epsilon=0.2, random_seed=0)
        stream = train_with_stats(agent, GridWorld(grid_size=3), 100)
        next(stream)
        size_after_one = agent.q_table_size
        stream.close()
        assert agent.q_table_size == size_after_one

    def test_rejects_bad_interval(self):
        with pytest.raises(ValueError):
            list(train_with_stats(QLearningAgent(), GridWorld(), 3, report_interval=0))
