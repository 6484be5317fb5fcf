"""
가중치 초기화
=============

initialize(rows, cols, rng) → (rows, cols) 행렬

- RandomInitialization: U(lower, upper)
- XavierInitialization: U(-a, a),  a = √6 / √(rows + cols)  (Glorot & Bengio, 2010)

Author: NumLearn Project
"""

import numpy as np

from ..config import get_rng
from ..serialization import register_serializable


@register_serializable
class RandomInitialization:
    """균등 분포 초기화"""

    def __init__(self, lower: float = -1.0, upper: float = 1.0):
        if lower >= upper:
            raise ValueError(f"lower ({lower}) must be smaller than upper ({upper})")
        self.lower = float(lower)
        self.upper = float(upper)

    def initialize(self, rows: int, cols: int = 1, rng=None) -> np.ndarray:
        rng = get_rng(rng)
        return rng.uniform(self.lower, self.upper, size=(rows, cols))

    def get_state(self) -> dict:
        return {'lower': self.lower, 'upper': self.upper}

    @classmethod
    def from_state(cls, state: dict) -> 'RandomInitialization':
        return cls(state['lower'], state['upper'])


@register_serializable
class XavierInitialization:
    """Glorot 균등 초기화"""

    def initialize(self, rows: int, cols: int = 1, rng=None) -> np.ndarray:
        rng = get_rng(rng)
        bound = np.sqrt(6.0) / np.sqrt(rows + cols)
        return rng.uniform(-bound, bound, size=(rows, cols))

    def get_state(self) -> dict:
        return {}

    @classmethod
    def from_state(cls, state: dict) -> 'XavierInitialization':
        return cls()
