"""Learning the 4x4 grid from scratch with each algorithm."""

import pytest

from tabular_rl.config_exp import create_agent
from tabular_rl.envs import GridWorld
from tabular_rl.types import StateAction

GRID_SIZE = 4
SHORTEST_PATH = 2 * (GRID_SIZE - 1)


def greedy_rollout(agent, env, max_steps=50):
    state = env.reset()
    visited = []
    total_reward = 0.0
    for _ in range(max_steps):
        if env.is_terminal():
            break
        action = agent.select_action_greedy(env, state)
        visited.append(StateAction(state, action))
        state, reward, done = env.step(action)
        total_reward += reward
        if done:
            break
    return visited, total_reward


@pytest.mark.parametrize("algorithm", ["q_learning", "sarsa", "expected_sarsa"])
def test_learns_path_to_goal(algorithm):
    env = GridWorld(grid_size=GRID_SIZE)
    agent = create_agent(algorithm, learning_rate=0.1, gamma=0.9, epsilon=0.1, random_seed=0)
    agent.train(env, 500, max_steps=100)

    visited, total_reward = greedy_rollout(agent, env)

    assert env.is_terminal()
    assert len(visited) <= SHORTEST_PATH + 6
    assert total_reward == pytest.approx(-(len(visited) - 1) + 10.0)
    assert all(pair in agent.q_table for pair in visited)


def test_greedy_policy_covers_non_terminal_states():
    env = GridWorld(grid_size=GRID_SIZE)
    agent = create_agent("q_learning", epsilon=0.2, random_seed=0)
    agent.train(env, 300, max_steps=100)

    policy = agent.get_policy(env)
    assert len(policy) == GRID_SIZE * GRID_SIZE - 1
    for state, action in policy.items():
        assert action in env.actions_for(state)


def test_evaluate_after_training():
    env = GridWorld(grid_size=GRID_SIZE)
    agent = create_agent("expected_sarsa", epsilon=0.1, random_seed=0)
    agent.train(env, 500, max_steps=100)

    mean_reward, std_reward, rewards = agent.evaluate(env, n_episodes=5, max_steps=50)
    assert len(rewards) == 5
    assert mean_reward > 0
    assert std_reward >= 0
