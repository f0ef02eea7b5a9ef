"""Combinations of the reference and target support weights."""
from enum import Enum

import numpy as np


class Combination(Enum):
    LEFT = "left"
    MAX = "max"
    MIN = "min"
    MULT = "mult"
    PLUS = "plus"

    @classmethod
    def parse(cls, name) -> "Combination":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).lower())
        except ValueError:
            raise ValueError(
                f"Unrecognized weights combination '{name}' "
                f"(should be one of {', '.join(c.value for c in cls)})"
            ) from None

    @property
    def uses_target(self) -> bool:
        """False when target windows are never needed."""
        return self is not Combination.LEFT

    @property
    def spatial_factor(self) -> int:
        """Power of the spatial term once both windows are combined."""
        return 2 if self is Combination.MULT else 1


def _left(w1, w2):
    return w1


COMBINE = {
    Combination.LEFT: _left,
    Combination.MAX: np.maximum,
    Combination.MIN: np.minimum,
    Combination.MULT: np.multiply,
    Combination.PLUS: np.add,
}


def combine(combination: Combination, w1, w2):
    return COMBINE[combination](w1, w2)
