"""
가중치 정규화
=============

evaluate(weights, gradient) 는 정규화 항의 그래디언트를 gradient 에
제자리(in-place)로 더한다.

    L1: gradient += λ · sign(w)
    L2: gradient += λ · w        (weight decay)

Author: NumLearn Project
"""

import numpy as np

from ..serialization import register_serializable


@register_serializable
class NoRegularizer:
    """정규화 없음"""

    def evaluate(self, weights: np.ndarray, gradient: np.ndarray) -> None:
        pass

    def get_state(self) -> dict:
        return {}

    @classmethod
    def from_state(cls, state: dict) -> 'NoRegularizer':
        return cls()

    def __repr__(self) -> str:
        return "NoRegularizer()"


@register_serializable
class L1Regularizer:
    """L1 정규화"""

    def __init__(self, factor: float = 1.0):
        if factor < 0:
            raise ValueError(f"factor must be non-negative, got {factor}")
        self.factor = float(factor)

    def evaluate(self, weights: np.ndarray, gradient: np.ndarray) -> None:
        gradient += self.factor * np.sign(weights)

    def get_state(self) -> dict:
        return {'factor': self.factor}

    @classmethod
    def from_state(cls, state: dict) -> 'L1Regularizer':
        return cls(state['factor'])

    def __repr__(self) -> str:
        return f"L1Regularizer(factor={self.factor})"


@register_serializable
class L2Regularizer:
    """L2 정규화 (weight decay)"""

    def __init__(self, factor: float = 1.0):
        if factor < 0:
            raise ValueError(f"factor must be non-negative, got {factor}")
        self.factor = float(factor)

    def evaluate(self, weights: np.ndarray, gradient: np.ndarray) -> None:
        gradient += self.factor * weights

    def get_state(self) -> dict:
        return {'factor': self.factor}

    @classmethod
    def from_state(cls, state: dict) -> 'L2Regularizer':
        return cls(state['factor'])

    def __repr__(self) -> str:
        return f"L2Regularizer(factor={self.factor})"
