"""
Decay schedules for the exploration rate.

Every schedule is a pure function of the step index: `value(step, initial, floor)`
can be evaluated for any step without replaying the previous ones. Shape
parameters are fixed at construction time and validated there.

The effective floor of a call is `max(min_value, floor)`: callers may tighten
the configured minimum but never loosen it.
"""

import math
from abc import ABC, abstractmethod


def _check_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


def _check_unit_interval(name: str, value: float) -> None:
    if not 0.0 < value <= 1.0:
        raise ValueError(f"{name} must be in (0, 1], got {value}")


class DecaySchedule(ABC):
    """Base class for decay schedules."""

    def __init__(self, min_value: float = 0.0):
        """
        :param min_value: Lowest value the schedule may return
        """
        if min_value < 0:
            raise ValueError(f"min_value must be non-negative, got {min_value}")
        self.min_value = min_value

    def _effective_floor(self, floor: float) -> float:
        return max(self.min_value, floor)

    @abstractmethod
    def value(self, step: int, initial: float, floor: float = 0.0) -> float:
        """
        Decayed value at a given step.

        :param step: Step (usually episode) index, starting at 0
        :param initial: Value at step 0
        :param floor: Minimum value requested by the caller
        :return: Decayed value, never below the effective floor
        """
        pass

    def reset(self) -> None:
        """Schedules keep no state between calls, so there is nothing to reset."""

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v}" for k, v in vars(self).items())
        return f"{self.__class__.__name__}({params})"


class LinearDecaySchedule(DecaySchedule):
    """Decays linearly from `initial` to the floor over `total_steps`."""

    def __init__(self, total_steps: int, min_value: float = 0.0):
        super().__init__(min_value)
        _check_positive("total_steps", total_steps)
        self.total_steps = total_steps

    def value(self, step: int, initial: float, floor: float = 0.0) -> float:
        floor = self._effective_floor(floor)
        if step >= self.total_steps:
            return floor
        progress = step / self.total_steps
        return initial - (initial - floor) * progress


class ExponentialDecaySchedule(DecaySchedule):
    """Decays as `initial * decay_rate ** step`, floored."""

    def __init__(self, decay_rate: float, min_value: float = 0.0):
        super().__init__(min_value)
        _check_unit_interval("decay_rate", decay_rate)
        self.decay_rate = decay_rate

    def value(self, step: int, initial: float, floor: float = 0.0) -> float:
        floor = self._effective_floor(floor)
        return max(initial * self.decay_rate**step, floor)


class PolynomialDecaySchedule(DecaySchedule):
    """Decays as `(initial - floor) * (1 - step / total_steps) ** power + floor`."""

    def __init__(self, total_steps: int, power: float = 1.0, min_value: float = 0.0):
        super().__init__(min_value)
        _check_positive("total_steps", total_steps)
        _check_positive("power", power)
        self.total_steps = total_steps
        self.power = power

    def value(self, step: int, initial: float, floor: float = 0.0) -> float:
        floor = self._effective_floor(floor)
        if step >= self.total_steps:
            return floor
        remaining = 1.0 - step / self.total_steps
        return (initial - floor) * remaining**self.power + floor


class StepDecaySchedule(DecaySchedule):
    """Multiplies the value by `decay_factor` once every `step_size` steps."""

    def __init__(self, step_size: int, decay_factor: float, min_value: float = 0.0):
        super().__init__(min_value)
        _check_positive("step_size", step_size)
        _check_unit_interval("decay_factor", decay_factor)
        self.step_size = step_size
        self.decay_factor = decay_factor

    def value(self, step: int, initial: float, floor: float = 0.0) -> float:
        floor = self._effective_floor(floor)
        value = initial
        for _ in range(step // self.step_size):
            value *= self.decay_factor
            if value <= floor:
                return floor
        return max(value, floor)


class CosineAnnealingSchedule(DecaySchedule):
    """
    Cosine annealing over `total_steps`.

    Computes `floor + (initial - floor) * (1 - (1 + cos(pi * progress)) / 2)` with
    `progress = min(step / total_steps, 1)`: the curve starts at the floor for
    step 0 and reaches `initial` at `total_steps`, where it stays.
    """

    def __init__(self, total_steps: int, min_value: float = 0.0):
        super().__init__(min_value)
        _check_positive("total_steps", total_steps)
        self.total_steps = total_steps

    def value(self, step: int, initial: float, floor: float = 0.0) -> float:
        floor = self._effective_floor(floor)
        progress = min(step / self.total_steps, 1.0)
        cosine_factor = (1.0 + math.cos(math.pi * progress)) / 2.0
        return floor + (initial - floor) * (1.0 - cosine_factor)
