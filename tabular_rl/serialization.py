import ast
import json
from pathlib import Path
from typing import Any, Callable, Dict, Hashable, Mapping, Optional, Union

from .types import Action, State, StateAction

KEY_SEPARATOR = "|"

PayloadDeserializer = Callable[[str], Hashable]


def parse_literal(text: str) -> Hashable:
    """
    Parses the textual form of a Python literal (ints, floats, tuples, quoted strings).

    Falls back to the raw text when it is not a literal, so bare labels such as
    `right` come back unchanged.
    Text that is a literal always converts: `None`, `True` and `1e3` do not
    come back as strings.

    :param text: Text to parse
    :return: Parsed value or the text itself
    """
    try:
        return ast.literal_eval(text)
    except (ValueError, SyntaxError):
        return text


class QTableSerializer:
    """
    Saves and loads Q-tables as flat JSON documents.

    Each key is `"<state>|<action>"` built from the textual form of the wrapped
    values and each value is the Q-value. The wrapped types are opaque here, so
    restoring anything other than strings needs caller-supplied deserializers.
    """

    @staticmethod
    def encode_key(state_action: StateAction) -> str:
        return f"{state_action.state.value}{KEY_SEPARATOR}{state_action.action.value}"

    @staticmethod
    def serialize(q_table: Mapping[StateAction, float]) -> str:
        """
        Serializes a Q-table to a JSON string.

        :param q_table: Mapping from state-action pairs to Q-values
        :return: JSON document
        """
        data = {
            QTableSerializer.encode_key(key): float(value)
            for key, value in q_table.items()
        }
        return json.dumps(data, indent=2)

    @staticmethod
    def deserialize(
        text: str,
        state_deserializer: Optional[PayloadDeserializer] = None,
        action_deserializer: Optional[PayloadDeserializer] = None,
    ) -> Dict[StateAction, float]:
        """
        Deserializes a Q-table from a JSON string.

        Entries whose key does not split into exactly one state and one action,
        or whose value is not a number, are skipped.

        :param text: JSON document produced by `serialize`
        :param state_deserializer: Maps the state text back to its value (defaults to the text)
        :param action_deserializer: Maps the action text back to its value (defaults to the text)
        :return: Mapping from state-action pairs to Q-values
        """
        data: Dict[str, Any] = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("Q-table document must be a JSON object")

        state_deserializer = state_deserializer or str
        action_deserializer = action_deserializer or str

        q_table = {}
        for key, value in data.items():
            parts = key.split(KEY_SEPARATOR)
            if len(parts) != 2:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            state = State(state_deserializer(parts[0]))
            action = Action(action_deserializer(parts[1]))
            q_table[StateAction(state, action)] = float(value)

        return q_table

    @staticmethod
    def save_to_file(
        filepath: Union[str, Path], q_table: Mapping[StateAction, float]
    ) -> Path:
        """
        Saves a Q-table to a JSON file, creating parent directories as needed.

        :param filepath: Destination file
        :param q_table: Mapping from state-action pairs to Q-values
        :return: Path of the written file
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(QTableSerializer.serialize(q_table))
        return filepath

    @staticmethod
    def load_from_file(
        filepath: Union[str, Path],
        state_deserializer: Optional[PayloadDeserializer] = None,
        action_deserializer: Optional[PayloadDeserializer] = None,
    ) -> Dict[StateAction, float]:
        """
        Loads a Q-table from a JSON file.

        :param filepath: File written by `save_to_file`
        :param state_deserializer: See `deserialize`
        :param action_deserializer: See `deserialize`
        :return: Mapping from state-action pairs to Q-values
        """
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"Q-table file not found: {filepath}")
        with open(filepath, "r", encoding="utf-8") as f:
            text = f.read()
        return QTableSerializer.deserialize(
            text,
            state_deserializer=state_deserializer,
            action_deserializer=action_deserializer,
        )
