from typing import List, Optional, Tuple

from ..environment import Environment
from ..types import Action, State
from .base import BaseRLAgent


class ExpectedSARSAAgent(BaseRLAgent):
    """
    Expected-SARSA agent for discrete action spaces.

    Expected-SARSA is a TD(0) on-policy algorithm that bootstraps from the
    expected Q-value of the next state under the ε-greedy policy instead of
    the Q-value of a sampled next action.

    Key characteristics:
    - Updates after each step (not at episode end)
    - On-policy: the expectation follows the current ε
    - Lower variance than SARSA (no sampling of a')
    """

    def expected_q_value(self, next_state: State, actions: List[Action]) -> float:
        """
        Closed-form expectation of Q(s',a') under the ε-greedy policy.

        Every action tied at the maximum receives (1-ε) + ε/|A|, the others ε/|A|.
        With several tied actions the probabilities sum to more than one; this
        approximates the policy, which only plays one of the ties at a time.

        :param next_state: Next state
        :param actions: Actions available in the next state
        :return: Expected Q-value, 0.0 if there are no actions
        """
        if not actions:
            return 0.0

        q_values = [self.get_q_value(next_state, a) for a in actions]
        max_q = max(q_values)

        n_actions = len(actions)
        prob_best = (1 - self.epsilon) + self.epsilon / n_actions
        prob_other = self.epsilon / n_actions

        return sum((prob_best if q == max_q else prob_other) * q for q in q_values)

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
        Update Q-value using the Expected-SARSA update rule.

        Q(s,a) := Q(s,a) + α[r + γ·E_π[Q(s',a')] - Q(s,a)]

        :param state: Current state
        :param action: Action taken
        :param reward: Reward received
        :param next_state: Next state
        :param next_state_actions: Actions available in the next state
        :param done: Whether the next state is terminal (no future rewards)
        """
        current_q = self.get_q_value(state, action)

        expected_next_q = 0.0 if done else self.expected_q_value(next_state, next_state_actions)

        td_target = reward + self.gamma * expected_next_q
        td_error = td_target - current_q
        new_q = current_q + self.learning_rate * td_error

        self.update_q_value(state, action, new_q)

    def train_episode(
        self, environment: Environment, max_steps: Optional[int] = None
    ) -> Tuple[float, int]:
        """
        Train the agent for one episode using Expected-SARSA.

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

            next_state_actions = environment.actions_for(next_state)
            self.update(state, action, reward, next_state, next_state_actions, terminal)

            episode_reward += reward
            steps += 1

            if done or terminal:
                break

            state = next_state

        return episode_reward, steps
