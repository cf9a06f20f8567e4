from pathlib import Path

from tabular_rl.config_exp import (
    DecayConfig,
    DecayMethod,
    ExperimentConfig,
    RLAlgMethod,
    RLConfig,
)
from tabular_rl.experiment import ReinforcementLearningExperiment


def main(config: ExperimentConfig) -> None:
    """
    Runs one training experiment and demonstrates the learned greedy policy.

    :param config: Experiment configuration
    """
    experiment = ReinforcementLearningExperiment(config)
    results = experiment.run()

    agent = experiment.agent
    env = experiment.env

    print("\nDemonstrating learned policy:")
    print("-" * 70)
    state = env.reset()
    trajectory = [state.value]
    actions = []
    episode_reward = 0.0
    for _ in range(config.algorithm.max_steps or 100):
        if env.is_terminal():
            break
        action = agent.select_action_greedy(env, state)
        state, reward, done = env.step(action)
        actions.append(action.value)
        trajectory.append(state.value)
        episode_reward += reward
        if done:
            break

    print(f"Reward = {episode_reward:.1f}, Steps = {len(actions)}")
    print(f"  Trajectory: {' -> '.join(map(str, trajectory))}")
    print(f"  Actions: {actions}")
    print("-" * 70)
    print(f"Results saved to {results['exp_dir']}")


if __name__ == "__main__":
    ALGORITHM = RLAlgMethod.EXPECTED_SARSA  # Options: Q_LEARNING, SARSA, EXPECTED_SARSA
    ENV_NAME = "GridWorld"  # "GridWorld", "FrozenLake" or a Gymnasium id such as "FrozenLake-v1"
    ENV_KWARGS = {"grid_size": 4}  # Environment-specific kwargs

    config = ExperimentConfig(
        environment_name=ENV_NAME,
        env_kwargs=ENV_KWARGS,
        algorithm=RLConfig(
            algorithm=ALGORITHM,
            n_training_episodes=1000,  # Number of training episodes
            max_steps=100,  # Max steps per episode
            learning_rate=0.1,  # Learning rate (alpha)
            gamma=0.9,  # Discount factor
            epsilon_start=0.5,  # Probability of choosing a random action at the start of training
            epsilon_end=0.01,  # Minimum probability of choosing a random action
            decay=DecayConfig(method=DecayMethod.EXPONENTIAL, decay_rate=0.995),
            n_eval_episodes=10,  # Number of evaluation episodes
        ),
        experiments_dir=Path("results"),
    )

    main(config)
