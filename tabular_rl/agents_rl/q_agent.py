from typing import List, Optional, Tuple

from ..environment import Environment
from ..types import Action, State
from .base import BaseRLAgent


class QLearningAgent(BaseRLAgent):
    """
    Q-Learning agent for discrete action spaces.

    Q-Learning is a TD(0) off-policy algorithm that learns the optimal action-value
    function by taking the maximum Q-value over all possible next actions.

    Key characteristics:
    - Updates after each step (not at episode end)
    - Off-policy: learns optimal policy while following ε-greedy
    - Uses max Q(s',a') for updates (optimistic)
    """

    def update(
        self,
        state: State,
        action: Action,
        reward: float,
        next_state: State,
        next_state_actions: List[Action],
        done: bool = False,
    ) -> None:
        """
        Update Q-value using the Q-Learning update rule.

        Q(s,a) := Q(s,a) + α[r + γ·max(Q(s',a')) - Q(s,a)]

        This is off-policy because it uses max Q(s',a') regardless of which
        action would actually be taken by the current ε-greedy policy.

        :param state: Current state
        :param action: Action taken
        :param reward: Reward received
        :param next_state: Next state
        :param next_state_actions: Actions available in the next state
        :param done: Whether the next state is terminal (no future rewards)
        """
        current_q = self.get_q_value(state, action)

        if done or not next_state_actions:
            # No future rewards from a terminal state
            max_next_q = 0.0
        else:
            max_next_q = max(self.get_q_value(next_state, a) for a in next_state_actions)

        td_target = reward + self.gamma * max_next_q
        td_error = td_target - current_q
        new_q = current_q + self.learning_rate * td_error

        self.update_q_value(state, action, new_q)

    def train_episode(
        self, environment: Environment, max_steps: Optional[int] = None
    ) -> Tuple[float, int]:
        """
        Train the agent for one episode using Q-Learning.

        :param environment: Environment to train on
        :param max_steps: Optional step cap for the episode
        :return: Tuple of (total reward, steps taken)
        """
        state = environment.reset()

        episode_reward = 0.0
        steps = 0

        for _ in self._step_range(max_steps):
            if environment.is_terminal():
                break

            action = self.select_action(environment, state)
            next_state, reward, done = environment.step(action)
            # `done` also covers truncation; only a terminal next state drops the bootstrap
            terminal = environment.is_state_terminal(next_state)

            # Fetched after the step: the next state's actions may differ from the current ones
            next_state_actions = environment.actions_for(next_state)
            self.update(state, action, reward, next_state, next_state_actions, terminal)

            episode_reward += reward
            steps += 1

            if done or terminal:
                break

            state = next_state

        return episode_reward, steps
