"""Tests for the Q-table contract and the epsilon-greedy policy shared by all agents."""

from collections import Counter

import pytest

from tabular_rl.agents_rl import ExpectedSARSAAgent, QLearningAgent, SARSAAgent
from tabular_rl.types import Action, InvalidStateError, State, StateAction

AGENT_CLASSES = [QLearningAgent, SARSAAgent, ExpectedSARSAAgent]


@pytest.fixture(params=AGENT_CLASSES, ids=lambda cls: cls.__name__)
def agent(request):
    return request.param(learning_rate=0.1, gamma=0.9, epsilon=0.1, random_seed=0)


class TestQTable:
    def test_unseen_pairs_return_default(self):
        agent = QLearningAgent(default_q_value=2.5)
        assert agent.get_q_value(State(1), Action("up")) == 2.5
        assert agent.get_q_value(State("x"), Action(7)) == 2.5

    def test_reads_do_not_grow_table(self, agent):
        agent.get_q_value(State(1), Action("up"))
        agent.get_q_values_for_state(State(1))
        assert agent.q_table_size == 0

    def test_update_creates_single_entry(self, agent):
        agent.update_q_value(State(1), Action("up"), 1.0)
        agent.update_q_value(State(1), Action("up"), 2.0)
        assert agent.q_table_size == 1
        assert agent.get_q_value(State(1), Action("up")) == 2.0

    def test_values_for_state(self, agent):
        agent.update_q_value(State(1), Action("up"), 1.0)
        agent.update_q_value(State(1), Action("down"), -1.0)
        agent.update_q_value(State(2), Action("up"), 5.0)
        assert agent.get_q_values_for_state(State(1)) == {
            Action("up"): 1.0,
            Action("down"): -1.0,
        }

    def test_q_table_view_is_read_only(self, agent):
        agent.update_q_value(State(1), Action("up"), 1.0)
        with pytest.raises(TypeError):
            agent.q_table[StateAction(State(1), Action("up"))] = 3.0

    def test_statistics(self, agent):
        assert agent.q_table_statistics() == (0.0, 0.0, 0)
        agent.update_q_value(State(1), Action("up"), 1.0)
        agent.update_q_value(State(1), Action("down"), 3.0)
        assert agent.q_table_statistics() == (2.0, 3.0, 2)

    def test_load_q_table(self, agent):
        agent.load_q_table({StateAction(State(1), Action("up")): 4.0})
        assert agent.get_q_value(State(1), Action("up")) == 4.0

    @pytest.mark.parametrize("kwargs", [{"learning_rate": 1.5}, {"gamma": -0.1}])
    def test_rejects_out_of_range_hyperparameters(self, kwargs):
        with pytest.raises(ValueError):
            QLearningAgent(**kwargs)


class TestEpsilon:
    def test_decay(self):
        agent = QLearningAgent(epsilon=0.5)
        agent.decay_epsilon(0.9)
        assert agent.epsilon == pytest.approx(0.45)

    def test_decay_floored_at_zero(self):
        agent = QLearningAgent(epsilon=0.5)
        agent.decay_epsilon(-1.0)
        assert agent.epsilon == 0.0

    @pytest.mark.parametrize("value, expected", [(1.7, 1.0), (-0.3, 0.0), (0.25, 0.25)])
    def test_set_clamps(self, value, expected):
        agent = QLearningAgent()
        agent.set_epsilon(value)
        assert agent.epsilon == expected

    def test_direct_assignment(self):
        agent = QLearningAgent()
        agent.epsilon = 0.3
        assert agent.epsilon == 0.3


class TestSelectAction:
    def test_no_actions_raises(self, agent, scripted_env):
        with pytest.raises(InvalidStateError):
            agent.select_action(scripted_env, State(3))

    def test_invalid_state_error_is_value_error(self):
        assert issubclass(InvalidStateError, ValueError)

    def test_greedy_picks_max(self, agent, scripted_env):
        agent.epsilon = 0.0
        agent.update_q_value(State(1), Action("right"), 1.0)
        for _ in range(20):
            assert agent.select_action(scripted_env, State(1)) == Action("right")

    def test_ties_broken_at_random(self, agent, scripted_env):
        agent.epsilon = 0.0
        counts = Counter(agent.select_action(scripted_env, State(1)) for _ in range(400))
        assert set(counts) == {Action("left"), Action("right")}
        assert min(counts.values()) > 100

    def test_full_exploration_is_uniform(self, agent, scripted_env):
        agent.epsilon = 1.0
        agent.update_q_value(State(1), Action("right"), 100.0)
        counts = Counter(agent.select_action(scripted_env, State(1)) for _ in range(400))
        assert counts[Action("left")] > 100

    def test_seeded_agents_agree(self, scripted_env):
        a = QLearningAgent(epsilon=0.5, random_seed=42)
        b = QLearningAgent(epsilon=0.5, random_seed=42)
        picks_a = [a.select_action(scripted_env, State(1)) for _ in range(50)]
        picks_b = [b.select_action(scripted_env, State(1)) for _ in range(50)]
        assert picks_a == picks_b

    def test_greedy_selection_ignores_epsilon(self, agent, scripted_env):
        agent.epsilon = 1.0
        agent.update_q_value(State(1), Action("left"), 1.0)
        for _ in range(20):
            assert agent.select_action_greedy(scripted_env, State(1)) == Action("left")
