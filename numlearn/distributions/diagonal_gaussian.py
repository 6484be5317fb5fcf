"""
Diagonal Gaussian Distribution
==============================

대각 공분산 정규분포. 공분산은 길이 d의 분산 벡터로 저장한다.

    log N(x) = -d/2 · log(2π) - 1/2 · Σ_j log σ²_j - 1/2 · Σ_j (x_j - μ_j)² / σ²_j

가중 추정은 GaussianDistribution 과 동일한 불편 추정량을 대각 성분에만
적용한다 (R의 cov.wt 와 같은 값).

Author: NumLearn Project
"""

import numpy as np

from ..config import CONFIG, get_rng
from ..exceptions import DimensionMismatchError
from ..serialization import register_serializable
from .base import Distribution, as_training_data, check_weights, unbiased_denominator
from .gaussian import LOG_2PI


@register_serializable
class DiagonalGaussianDistribution(Distribution):
    """
    대각 공분산 정규분포

    Parameters
    ----------
    mean : array-like of shape (d,), optional
    covariance : array-like of shape (d,), optional
        차원별 분산
    dimensionality : int, optional
        mean 없이 주어지면 평균 0, 분산 1로 초기화
    """

    def __init__(self, mean=None, covariance=None, dimensionality=None):
        if mean is None:
            dim = dimensionality or 0
            self.mean = np.zeros(dim)
            self.covariance = np.ones(dim)
            return

        self.mean = np.asarray(mean, dtype=np.float64).ravel().copy()
        self.covariance = np.ones(len(self.mean)) if covariance is None else covariance

    @property
    def dimensionality(self) -> int:
        return len(self.mean)

    @property
    def covariance(self) -> np.ndarray:
        return self._covariance

    @covariance.setter
    def covariance(self, covariance) -> None:
        covariance = np.asarray(covariance, dtype=np.float64).ravel()
        if len(covariance) != len(self.mean):
            raise DimensionMismatchError(
                f"Covariance length {len(covariance)} does not match mean "
                f"dimensionality {len(self.mean)}"
            )
        if np.any(covariance <= 0):
            raise ValueError("Diagonal covariance entries must be positive")

        self._covariance = covariance.copy()
        self._log_det = np.sum(np.log(covariance))

    def _log_probability(self, points: np.ndarray) -> np.ndarray:
        d = self.dimensionality
        diff = points - self.mean[:, None]
        exponent = np.sum(diff ** 2 / self._covariance[:, None], axis=0)
        return -0.5 * d * LOG_2PI - 0.5 * self._log_det - 0.5 * exponent

    def random(self, rng=None) -> np.ndarray:
        rng = get_rng(rng)
        return self.mean + np.sqrt(self._covariance) * rng.standard_normal(self.dimensionality)

    def train(self, observations, weights=None) -> 'DiagonalGaussianDistribution':
        """(가중) 최대우도 추정. 분산은 불편 추정량."""
        observations = as_training_data(observations)
        d, n = observations.shape
        weights = check_weights(weights, n)

        if n == 0:
            raise DimensionMismatchError("Cannot train on an empty dataset")

        self.mean = observations @ weights / np.sum(weights)

        diff = observations - self.mean[:, None]
        denominator = unbiased_denominator(weights)
        if denominator > 0:
            variance = (diff ** 2) @ weights / denominator
        else:
            variance = np.zeros(d)

        self.covariance = np.maximum(variance, CONFIG['min_eigenvalue'])
        return self

    def get_state(self) -> dict:
        return {'mean': self.mean.copy(), 'covariance': self._covariance.copy()}

    @classmethod
    def from_state(cls, state: dict) -> 'DiagonalGaussianDistribution':
        return cls(state['mean'], state['covariance'])

    def __repr__(self) -> str:
        return f"DiagonalGaussianDistribution(dimensionality={self.dimensionality})"
