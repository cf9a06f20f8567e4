import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from tqdm import tqdm

from .agents_rl import BaseRLAgent
from .config_exp import ExperimentConfig
from .environment import Environment
from .envs import make_environment
from .training import train_with_stats
from .training_stats import AggregatedStats, TrainingStats


class ReinforcementLearningExperiment:
    """
    Runs a complete tabular training experiment.

    Builds the environment and the agent from an `ExperimentConfig`, trains while
    collecting per-episode statistics, evaluates the greedy policy and stores
    config, logs, plots and the Q-table in a timestamped directory.
    """

    def __init__(self, config: ExperimentConfig, environment: Optional[Environment] = None):
        """
        Initializes the reinforcement learning experiment.

        :param config: Experiment configuration object containing all settings for the experiment
        :param environment: Pre-built environment; created from the config when omitted
        """
        self.config = config
        if environment is None:
            environment = make_environment(
                self.config.environment_name,
                seed=self.config.algorithm.random_seed,
                **self.config.env_kwargs,
            )
        self.env = environment
        self.exp_dir: Optional[Path] = None
        self.agent: Optional[BaseRLAgent] = None
        self.history: List[TrainingStats] = []

    def _setup_experiment_dir(self) -> Path:
        """Creates and returns the experiment directory."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        exp_dir = (
            self.config.experiments_dir
            / f"{self.config.environment_name}"
            / f"{self.config.algorithm.algorithm.value}_{timestamp}"
        )
        exp_dir.mkdir(parents=True, exist_ok=True)
        return exp_dir

    def _save_experiment_config(self) -> None:
        """Saves the experiment configuration."""
        self.config.save_json(self.exp_dir / "config.json")
        self.config.save_yaml(self.exp_dir / "config.yaml")

    def plot_training_results(
        self, episode_rewards: np.ndarray, window_size: int = 100
    ) -> None:
        """
        Plot training results with moving average.

        :param episode_rewards: Array of rewards per episode
        :param window_size: Window size for moving average
        """
        plt.figure(figsize=(12, 5))

        plt.subplot(1, 2, 1)
        plt.plot(episode_rewards, alpha=0.3, label="Episode Reward")

        if len(episode_rewards) >= window_size:
            moving_avg = np.convolve(
                episode_rewards, np.ones(window_size) / window_size, mode="valid"
            )
            plt.plot(
                range(window_size - 1, len(episode_rewards)),
                moving_avg,
                label=f"{window_size}-Episode Moving Average",
                linewidth=2,
            )

        plt.xlabel("Episode")
        plt.ylabel("Reward")
        plt.title("Training Progress")
        plt.legend()
        plt.grid(True, alpha=0.3)

        plt.subplot(1, 2, 2)
        plt.hist(episode_rewards, bins=50, edgecolor="black", alpha=0.7)
        plt.xlabel("Reward")
        plt.ylabel("Frequency")
        plt.title("Reward Distribution")
        plt.grid(True, alpha=0.3)

        plt.tight_layout()
        plt.savefig(self.exp_dir / "training_results.png", dpi=150, bbox_inches="tight")
        plt.close()

    def save_training_logs(self, stats: AggregatedStats, window_size: int = 100) -> None:
        """
        Saves per-episode statistics and windowed summaries to CSV files.

        For each block of `window_size` reported episodes, it stores the mean, the median, and the standard deviation

        :param stats: Aggregated statistics of the run
        :param window_size: Number of episodes per logging block
        """
        stats.to_dataframe().to_csv(self.exp_dir / "episode_stats.csv", index=False)

        rewards = np.array([e.total_reward for e in stats.episodes], dtype=float)
        metrics_data = []

        for end in range(window_size, len(rewards) + 1, window_size):
            start = end - window_size
            block = stats.window(start, end)
            metrics_data.append(
                {
                    "iteration": end,
                    "window_start": start + 1,
                    "window_end": end,
                    "mean": block.average_reward,
                    "median": float(np.median(rewards[start:end])),
                    "std": block.reward_std,
                    "mean_steps": block.average_steps,
                }
            )

        df_metrics = pd.DataFrame(
            metrics_data,
            columns=["iteration", "window_start", "window_end", "mean", "median", "std", "mean_steps"],
        )
        df_metrics.to_csv(self.exp_dir / "training_logs.csv", index=False)

    def train(self) -> AggregatedStats:
        """
        Trains the agent, showing a progress bar updated with the latest statistics.

        :return: Aggregated statistics over the reported episodes
        """
        rl_config = self.config.algorithm
        n_episodes = rl_config.n_training_episodes
        interval = rl_config.report_interval
        n_reports = len(range(0, n_episodes, interval)) + (
            1 if n_episodes and (n_episodes - 1) % interval else 0
        )

        progress = tqdm(
            train_with_stats(
                self.agent,
                self.env,
                n_episodes=n_episodes,
                report_interval=interval,
                decay_schedule=rl_config.build_decay_schedule(),
                epsilon_floor=rl_config.epsilon_end,
                max_steps=rl_config.max_steps,
            ),
            total=n_reports,
            desc=f"Training {self.agent.__class__.__name__}",
        )

        for stats in progress:
            self.history.append(stats)
            if len(self.history) % 100 == 0:
                recent = AggregatedStats(self.history).last_n(100)
                progress.set_postfix(
                    {
                        "avg_reward_100": f"{recent.average_reward:.2f}",
                        "epsilon": f"{stats.epsilon:.3f}",
                        "q_size": stats.q_table_size,
                    }
                )

        return AggregatedStats(self.history)

    def run(self) -> dict:
        """
        Runs the reinforcement learning experiment.

        :return: Dictionary containing results and metrics from the experiment
        """
        rl_config = self.config.algorithm
        self.exp_dir = self._setup_experiment_dir()

        print("=" * 80)
        print(f"EXPERIMENT: {self.exp_dir.name}")
        print("=" * 80)

        if rl_config.random_seed is not None:
            print(f"Seed: {rl_config.random_seed}")

        self._save_experiment_config()

        start = time.time()
        print(f"STARTING TRAINING - {self.config.environment_name}")
        print("-" * 70)
        print(f"Algorithm: {rl_config.algorithm.value}")
        print(f"Environment: {self.config.environment_name}")
        print(f"Environment kwargs: {self.config.env_kwargs}")
        print(f"Training episodes: {rl_config.n_training_episodes}")
        print(f"Learning rate: {rl_config.learning_rate}")
        print(f"Gamma: {rl_config.gamma}")
        decay = rl_config.build_decay_schedule()
        print(
            f"Epsilon: {rl_config.epsilon_start} -> {rl_config.epsilon_end} (schedule: {decay})"
        )
        print("=" * 70 + "\n")

        self.agent = rl_config.build_agent()
        self.history = []
        stats = self.train()
        end = time.time()

        print(f"\nTraining completed in {end - start:.2f} seconds")
        print(stats)
        self.agent.print_statistics()

        # Evaluation
        print("Starting evaluation...\n")
        mean_reward, std_reward, eval_rewards = self.agent.evaluate(
            self.env,
            n_episodes=rl_config.n_eval_episodes,
            max_steps=rl_config.max_steps or 1000,
        )

        print("\n" + "=" * 70)
        print("EVALUATION RESULTS")
        print("=" * 70)
        print(f"Mean reward: {mean_reward:.2f} +/- {std_reward:.2f}")
        print(f"Min reward: {np.min(eval_rewards):.2f}")
        print(f"Max reward: {np.max(eval_rewards):.2f}")
        print(
            f"Success rate: {np.sum(eval_rewards > 0) / len(eval_rewards) * 100:.1f}%"
        )
        print("=" * 70 + "\n")

        print("Generating training visualization...")
        rewards = np.array([e.total_reward for e in stats.episodes], dtype=float)
        self.plot_training_results(rewards, window_size=100)
        self.save_training_logs(stats, window_size=100)
        q_table_path = self.agent.save(self.exp_dir / "q_table.json")

        return {
            "exp_dir": self.exp_dir,
            "stats": stats,
            "eval_mean_reward": mean_reward,
            "eval_std_reward": std_reward,
            "q_table_path": q_table_path,
            "training_time": end - start,
        }
