from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional

from .config_exp import ExperimentConfig, RLAlgMethod

CONFIG_SUFFIXES = {".yaml", ".yml", ".json"}


class ConfigManager:
    """Manages named experiment configurations: save, load, compare and derive variants."""

    def __init__(self, config_dir: Path = Path("configs")):
        """
        Initializes the configuration manager.

        :param config_dir: Directory where configurations will be saved and loaded from
        """
        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self._configs: Dict[str, ExperimentConfig] = {}

    def add_config(self, name: str, config: ExperimentConfig) -> None:
        self._configs[name] = config

    def get_config(self, name: str) -> Optional[ExperimentConfig]:
        return self._configs.get(name)

    def list_configs(self) -> List[str]:
        return list(self._configs.keys())

    def add_algorithm_variants(self, base_name: str) -> List[str]:
        """
        Registers one copy of a configuration per supported algorithm.

        Variants are named `<base_name>_<algorithm>` and share every other setting,
        which makes side-by-side comparisons of Q-Learning, SARSA and
        Expected-SARSA on the same environment straightforward.

        :param base_name: Name of an already registered configuration
        :return: Names of the registered variants
        """
        if base_name not in self._configs:
            raise ValueError(f"Configuration '{base_name}' not found")

        base = self._configs[base_name]
        names = []
        for method in RLAlgMethod:
            name = f"{base_name}_{method.value}"
            algorithm = replace(base.algorithm, algorithm=method)
            self._configs[name] = replace(base, algorithm=algorithm)
            names.append(name)
        return names

    def save_config(self, name: str, format: str = "yaml") -> Path:
        """
        Saves a configuration to disk.

        :param name: Name of the configuration
        :param format: File format ('yaml' or 'json')
        :return: Path to the saved file
        """
        if name not in self._configs:
            raise ValueError(f"Configuration '{name}' not found")

        config = self._configs[name]
        filepath = self.config_dir / f"{name}.{format}"

        if format == "yaml":
            config.save_yaml(filepath)
        elif format == "json":
            config.save_json(filepath)
        else:
            raise ValueError(f"Format '{format}' not supported")

        return filepath

    def load_config(self, filepath: Path | str) -> ExperimentConfig:
        """
        Loads a configuration from a file.

        :param filepath: Path to the configuration file
        :return: Loaded `ExperimentConfig` instance
        """
        filepath = Path(filepath)

        if filepath.suffix in {".yaml", ".yml"}:
            return ExperimentConfig.load_yaml(filepath)
        elif filepath.suffix == ".json":
            return ExperimentConfig.load_json(filepath)
        else:
            raise ValueError(f"File format '{filepath.suffix}' not supported")

    def load_and_add(self, name: str, filepath: Path | str) -> None:
        self.add_config(name, self.load_config(filepath))

    def load_all(self) -> List[str]:
        """
        Loads every configuration file found in `config_dir`, named after the file stem.

        :return: Names of the loaded configurations
        """
        names = []
        for filepath in sorted(self.config_dir.iterdir()):
            if filepath.suffix in CONFIG_SUFFIXES:
                self.load_and_add(filepath.stem, filepath)
                names.append(filepath.stem)
        return names

    def save_all(self, format: str = "yaml") -> List[Path]:
        return [self.save_config(name, format) for name in self._configs]

    def compare_configs(self, name1: str, name2: str) -> Dict:
        """
        Compares two configurations.

        Nested keys are reported with dotted paths, e.g. `algorithm.learning_rate`.

        :param name1: Name of the first configuration
        :param name2: Name of the second configuration
        :return: Dictionary mapping each differing key to its two values
        """
        if name1 not in self._configs or name2 not in self._configs:
            raise ValueError("One or both configurations do not exist")

        differences = {}
        self._compare_dicts(
            self._configs[name1].to_dict(), self._configs[name2].to_dict(), differences
        )
        return differences

    def _compare_dicts(
        self, dict1: Dict, dict2: Dict, differences: Dict, prefix: str = ""
    ) -> None:
        for key in set(dict1) | set(dict2):
            current_path = f"{prefix}.{key}" if prefix else key
            value1, value2 = dict1.get(key), dict2.get(key)

            if isinstance(value1, dict) and isinstance(value2, dict):
                self._compare_dicts(value1, value2, differences, current_path)
            elif value1 != value2:
                differences[current_path] = {"config1": value1, "config2": value2}
