from typing import Optional, Tuple

from ..environment import Environment
from ..types import Action, State
from .base import BaseRLAgent


class SARSAAgent(BaseRLAgent):
    """
    SARSA agent for discrete action spaces.

    SARSA is a TD(0) on-policy algorithm that learns the value of the policy
    it is actually following (including exploration).

    Key characteristics:
    - Updates after each step (not at episode end)
    - On-policy: learns about the policy being followed
    - Uses Q(s',a') where a' is the action actually taken
    - More conservative than Q-Learning
    - Better for risky environments (considers exploration in learning)
    """

    def update(
        self,
        state: State,
        action: Action,
        reward: float,
        next_state: State,
        next_action: Optional[Action],
        done: bool = False,
    ) -> None:
        """
        Update Q-value using the SARSA update rule.

        Q(s,a) := Q(s,a) + α[r + γ·Q(s',a') - Q(s,a)]

        This is on-policy because it uses Q(s',a') where a' is the action
        that will actually be taken by the ε-greedy policy.

        :param state: Current state
        :param action: Action taken
        :param reward: Reward received
        :param next_state: Next state
        :param next_action: Next action (actually selected by policy), None after termination
        :param done: Whether the next state is terminal (no future rewards)
        """
        current_q = self.get_q_value(state, action)

        if done or next_action is None:
            # No future rewards if episode terminated
            next_q = 0.0
        else:
            next_q = self.get_q_value(next_state, next_action)

        td_target = reward + self.gamma * next_q
        td_error = td_target - current_q
        new_q = current_q + self.learning_rate * td_error

        self.update_q_value(state, action, new_q)

    def train_episode(
        self, environment: Environment, max_steps: Optional[int] = None
    ) -> Tuple[float, int]:
        """
        Train the agent for one episode using SARSA.

        The next action is chosen before the update and carried over as the
        action of the following step.

        :param environment: Environment to train on
        :param max_steps: Optional step cap for the episode
        :return: Tuple of (total reward, steps taken)
        """
        state = environment.reset()
        if environment.is_terminal():
            return 0.0, 0

        action = self.select_action(environment, state)

        episode_reward = 0.0
        steps = 0

        for _ in self._step_range(max_steps):
            next_state, reward, done = environment.step(action)

            # `done` also covers truncation; only a terminal next state drops the bootstrap
            terminal = environment.is_state_terminal(next_state)
            next_action = None
            if not terminal and environment.actions_for(next_state):
                next_action = self.select_action(environment, next_state)

            self.update(state, action, reward, next_state, next_action, terminal)

            episode_reward += reward
            steps += 1

            if done or terminal:
                break

            state = next_state
            action = next_action

        return episode_reward, steps
