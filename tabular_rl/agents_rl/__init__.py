"""
RL Agents Package

This package contains implementations of tabular temporal-difference algorithms:
- Q-Learning (TD off-policy):
    Q-Learning is a TD(0) off-policy algorithm that learns the optimal action-value function by taking the maximum Q-value over all possible next actions.
    Updates Q-values using: Q(s,a) := Q(s,a) + α[r + γ·max(Q(s',a')) - Q(s,a)]
- SARSA (TD on-policy):
    State-Action-Reward-State-Action (SARSA) is a TD(0) on-policy algorithm that learns the value of the policy it is actually following (including exploration).
    Updates Q-values using: Q(s,a) := Q(s,a) + α[r + γ·Q(s',a') - Q(s,a)]
- Expected-SARSA (TD on-policy):
    Expected-SARSA replaces the sampled next action of SARSA by the expectation over the ε-greedy policy.
    Updates Q-values using: Q(s,a) := Q(s,a) + α[r + γ·E_π[Q(s',a')] - Q(s,a)]

All agents inherit from BaseRLAgent and share the Q-table and the ε-greedy policy.
"""

from .base import BaseRLAgent
from .expected_sarsa_agent import ExpectedSARSAAgent
from .q_agent import QLearningAgent
from .sarsa_agent import SARSAAgent

__all__ = [
    "BaseRLAgent",
    "ExpectedSARSAAgent",
    "QLearningAgent",
    "SARSAAgent",
]
