"""Tests for the reference environments."""

import gymnasium as gym
import pytest

from tabular_rl.envs import FrozenLake, GridWorld, GymEnvironment, make_environment
from tabular_rl.types import Action, State


def slippery_rollout(seed, n_steps=30):
    env = make_environment("FrozenLake-v1", seed=seed)
    states = [env.reset()]
    for _ in range(n_steps):
        next_state, _, done = env.step(Action(2))
        states.append(next_state)
        if done:
            states.append(env.reset())
    env.close()
    return states


class TestGridWorld:
    def test_reset_to_origin(self, grid_env):
        grid_env.step(Action("down"))
        assert grid_env.reset() == State((0, 0))
        assert grid_env.current_state() == State((0, 0))

    def test_corner_actions(self, grid_env):
        assert set(grid_env.actions_for(State((0, 0)))) == {Action("down"), Action("right")}
        assert len(grid_env.actions_for(State((1, 1)))) == 4
        assert grid_env.available_actions() == grid_env.actions_for(State((0, 0)))

    def test_step_reward(self, grid_env):
        next_state, reward, done = grid_env.step(Action("right"))
        assert next_state == State((0, 1))
        assert reward == -1.0
        assert not done

    def test_goal(self):
        env = GridWorld(grid_size=2)
        env.step(Action("right"))
        next_state, reward, done = env.step(Action("down"))
        assert next_state == State((1, 1))
        assert reward == 10.0
        assert done
        assert env.is_terminal()
        assert env.is_state_terminal(State((1, 1)))

    def test_enumeration(self, grid_env):
        assert len(grid_env.all_states()) == 16
        assert len(grid_env.all_actions()) == 4

    def test_unknown_action(self, grid_env):
        with pytest.raises(ValueError):
            grid_env.step(Action("jump"))

    @pytest.mark.parametrize("kwargs", [{"grid_size": 1}, {"grid_size": 3, "goal": (3, 0)}])
    def test_invalid_construction(self, kwargs):
        with pytest.raises(ValueError):
            GridWorld(**kwargs)


class TestFrozenLake:
    def test_all_moves_available(self):
        env = FrozenLake()
        assert len(env.actions_for(env.reset())) == 4

    def test_border_keeps_position(self):
        env = FrozenLake()
        env.reset()
        next_state, reward, done = env.step(Action("up"))
        assert next_state == State((0, 0))
        assert reward == pytest.approx(-0.1)
        assert not done

    def test_hole_ends_episode(self):
        env = FrozenLake()
        env.reset()
        env.step(Action("right"))
        next_state, reward, done = env.step(Action("down"))
        assert next_state == State((1, 1))
        assert reward == -10.0
        assert done and env.is_terminal()

    def test_goal_pays(self):
        env = FrozenLake(grid=["SG"])
        _, reward, done = env.step(Action("right"))
        assert reward == 10.0
        assert done

    def test_render_marks_agent(self):
        env = FrozenLake()
        env.reset()
        assert env.render().splitlines()[0] == "A F F F"


class TestGymEnvironment:
    @pytest.fixture
    def env(self):
        env = make_environment("FrozenLake-v1", is_slippery=False)
        yield env
        env.close()

    def test_wraps_discrete_spaces(self, env):
        assert isinstance(env, GymEnvironment)
        assert len(env.all_states()) == 16
        assert env.all_actions() == [Action(i) for i in range(4)]

    def test_reaches_goal(self, env):
        assert env.reset() == State(0)
        # right, right, down, down, down, right
        for action in [2, 2, 1, 1, 1]:
            _, reward, done = env.step(Action(action))
            assert reward == 0.0 and not done
        next_state, reward, done = env.step(Action(2))
        assert next_state == State(15)
        assert reward == 1.0
        assert done and env.is_terminal()

    def test_current_state_requires_reset(self, env):
        with pytest.raises(RuntimeError):
            env.current_state()

    def test_truncation_is_not_terminal(self):
        env = make_environment("FrozenLake-v1", is_slippery=False, max_episode_steps=1)
        env.reset()
        next_state, _, done = env.step(Action(2))
        assert done and env.is_terminal()
        assert not env.is_state_terminal(next_state)
        env.close()

    def test_termination_marks_reached_state(self):
        env = make_environment("FrozenLake-v1", desc=["SH", "FG"], is_slippery=False)
        env.reset()
        next_state, _, done = env.step(Action(2))
        assert done
        assert env.is_state_terminal(next_state)
        assert not env.is_state_terminal(State(0))
        assert env.reset() == State(0)
        assert not env.is_state_terminal(next_state)
        env.close()

    def test_seed_makes_slippery_dynamics_reproducible(self):
        assert slippery_rollout(seed=11) == slippery_rollout(seed=11)

    def test_rejects_continuous_spaces(self):
        base = gym.make("CartPole-v1")
        with pytest.raises(ValueError):
            GymEnvironment(base)
        base.close()


def test_make_environment_registry():
    env = make_environment("GridWorld", grid_size=3)
    assert isinstance(env, GridWorld)
    assert env.grid_size == 3
    assert isinstance(make_environment("FrozenLake"), FrozenLake)
    assert isinstance(make_environment("FrozenLake", seed=3), FrozenLake)
