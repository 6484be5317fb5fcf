"""
Laplace Distribution
====================

평균 벡터 μ 와 스칼라 scale b 를 가지는 (등방성) Laplace 분포.

    log p(x) = -log(2b) - ‖x - μ‖₂ / b

추정:
    μ = 가중 평균
    b = Σ w_i ‖x_i - μ‖₂ / Σ w_i

Author: NumLearn Project
"""

import numpy as np

from ..config import get_rng
from ..exceptions import DimensionMismatchError
from ..serialization import register_serializable
from .base import Distribution, as_training_data, check_weights


@register_serializable
class LaplaceDistribution(Distribution):
    """
    Laplace 분포

    Parameters
    ----------
    mean : array-like of shape (d,), optional
    scale : float, default=1.0
    dimensionality : int, optional
        mean 없이 주어지면 평균 0으로 초기화
    """

    def __init__(self, mean=None, scale: float = 1.0, dimensionality=None):
        if mean is None:
            self.mean = np.zeros(dimensionality or 0)
        else:
            self.mean = np.asarray(mean, dtype=np.float64).ravel().copy()

        if scale <= 0:
            raise ValueError(f"scale must be positive, got {scale}")
        self.scale = float(scale)

    @property
    def dimensionality(self) -> int:
        return len(self.mean)

    def _log_probability(self, points: np.ndarray) -> np.ndarray:
        distance = np.linalg.norm(points - self.mean[:, None], axis=0)
        return -np.log(2 * self.scale) - distance / self.scale

    def random(self, rng=None) -> np.ndarray:
        """역변환 샘플링: μ - b · sign(u) · log(1 - 2|u|), u ~ U(-1/2, 1/2)"""
        rng = get_rng(rng)
        u = rng.random(self.dimensionality) - 0.5
        return self.mean - self.scale * np.sign(u) * np.log(1 - 2 * np.abs(u))

    def train(self, observations, weights=None) -> 'LaplaceDistribution':
        observations = as_training_data(observations)
        n = observations.shape[1]
        weights = check_weights(weights, n)

        if n == 0:
            raise DimensionMismatchError("Cannot train on an empty dataset")

        total = np.sum(weights)
        self.mean = observations @ weights / total
        distance = np.linalg.norm(observations - self.mean[:, None], axis=0)
        self.scale = float(distance @ weights / total)
        return self

    def get_state(self) -> dict:
        return {'mean': self.mean.copy(), 'scale': self.scale}

    @classmethod
    def from_state(cls, state: dict) -> 'LaplaceDistribution':
        return cls(state['mean'], state['scale'])

    def __repr__(self) -> str:
        return f"LaplaceDistribution(dimensionality={self.dimensionality}, scale={self.scale:.4g})"
