"""
Gaussian Distribution - From Scratch Implementation
===================================================

완전 공분산 다변량 정규분포.

수학적 배경:
-----------
로그 밀도:
    log N(x | μ, Σ) = -d/2 · log(2π) - 1/2 · log|Σ| - 1/2 · (x-μ)ᵀ Σ⁻¹ (x-μ)

Σ = L Lᵀ (Cholesky) 로 분해하면
    log|Σ| = 2 Σ_i log L_ii
    (x-μ)ᵀ Σ⁻¹ (x-μ) = ‖L⁻¹ (x-μ)‖²

가중 최대우도 (신뢰도 가중치 w_i, V1 = Σw, V2 = Σw²):
    μ = Σ w_i x_i / V1
    Σ = Σ w_i (x_i - μ)(x_i - μ)ᵀ / (V1 - V2/V1)

w_i = 1 이면 분모는 n - 1 (불편 표본 공분산).

Author: NumLearn Project
"""

import logging
from typing import Optional

import numpy as np
from scipy import linalg

from ..config import CONFIG, get_rng
from ..exceptions import DimensionMismatchError
from ..serialization import register_serializable
from .base import Distribution, as_training_data, check_weights, unbiased_denominator

logger = logging.getLogger(__name__)

LOG_2PI = np.log(2 * np.pi)


def positive_definite_constraint(covariance: np.ndarray) -> np.ndarray:
    """
    공분산 행렬을 양의 정부호로 보정

    최소 고유값이 음수이거나 조건수가 CONFIG['max_condition_number'] 를
    넘으면 고유값을 (최대 고유값 / 조건수 한계) 이상으로 올린다.
    """
    covariance = (covariance + covariance.T) / 2
    eigval, eigvec = np.linalg.eigh(covariance)
    max_cond = CONFIG['max_condition_number']

    if eigval[0] <= 0 or eigval[-1] / eigval[0] > max_cond:
        floor = max(eigval[-1] / max_cond, CONFIG['min_eigenvalue'])
        logger.debug(f"Covariance not well conditioned; flooring eigenvalues at {floor:.3e}")
        eigval = np.maximum(eigval, floor)
        covariance = (eigvec * eigval) @ eigvec.T
        covariance = (covariance + covariance.T) / 2

    return covariance


@register_serializable
class GaussianDistribution(Distribution):
    """
    다변량 정규분포

    Parameters
    ----------
    mean : array-like of shape (d,), optional
        평균 벡터

    covariance : array-like of shape (d, d), optional
        공분산 행렬 (양의 정부호)

    dimensionality : int, optional
        mean 없이 주어지면 평균 0, 단위 공분산으로 초기화

    Examples
    --------
    >>> g = GaussianDistribution([0.0], [[1.0]])
    >>> round(g.probability([0.0]), 6)
    0.398942
    """

    def __init__(
        self,
        mean=None,
        covariance=None,
        dimensionality: Optional[int] = None
    ):
        if mean is None:
            dim = dimensionality or 0
            self.mean = np.zeros(dim)
            self._set_covariance(np.eye(dim))
            return

        self.mean = np.asarray(mean, dtype=np.float64).ravel().copy()
        if covariance is None:
            covariance = np.eye(len(self.mean))
        self.covariance = covariance

    @property
    def dimensionality(self) -> int:
        return len(self.mean)

    @property
    def covariance(self) -> np.ndarray:
        return self._covariance

    @covariance.setter
    def covariance(self, covariance) -> None:
        covariance = np.asarray(covariance, dtype=np.float64)
        d = len(self.mean)
        covariance = covariance.reshape(d, d) if covariance.size == d * d else covariance

        if covariance.shape != (d, d):
            raise DimensionMismatchError(
                f"Covariance shape {covariance.shape} does not match mean "
                f"dimensionality {d}"
            )
        self._set_covariance(covariance.copy())

    def _set_covariance(self, covariance: np.ndarray) -> None:
        """공분산 설정 후 Cholesky 인수와 로그 행렬식 갱신"""
        self._covariance = covariance
        if covariance.size == 0:
            self._chol = covariance.copy()
            self._log_det = 0.0
            return

        try:
            self._chol = np.linalg.cholesky(covariance)
        except np.linalg.LinAlgError:
            raise ValueError("Covariance matrix must be positive definite")
        self._log_det = 2.0 * np.sum(np.log(np.diag(self._chol)))

    def _log_probability(self, points: np.ndarray) -> np.ndarray:
        d = self.dimensionality
        diff = points - self.mean[:, None]
        z = linalg.solve_triangular(self._chol, diff, lower=True)
        mahalanobis = np.sum(z ** 2, axis=0)
        return -0.5 * d * LOG_2PI - 0.5 * self._log_det - 0.5 * mahalanobis

    def random(self, rng=None) -> np.ndarray:
        """mean + L z, z ~ N(0, I)"""
        rng = get_rng(rng)
        return self.mean + self._chol @ rng.standard_normal(self.dimensionality)

    def train(self, observations, weights=None) -> 'GaussianDistribution':
        """
        (가중) 최대우도 추정

        Parameters
        ----------
        observations : array of shape (d, n)
        weights : array of shape (n,), optional

        Returns
        -------
        self : GaussianDistribution
        """
        observations = as_training_data(observations)
        d, n = observations.shape
        weights = check_weights(weights, n)

        if n == 0:
            raise DimensionMismatchError("Cannot train on an empty dataset")

        self.mean = observations @ weights / np.sum(weights)

        diff = observations - self.mean[:, None]
        denominator = unbiased_denominator(weights)

        if denominator > 0:
            covariance = (diff * weights) @ diff.T / denominator
        else:
            # 유효 관측점이 하나뿐이면 분산을 추정할 수 없음
            covariance = np.zeros((d, d))

        self._set_covariance(positive_definite_constraint(covariance))
        return self

    def get_state(self) -> dict:
        return {'mean': self.mean.copy(), 'covariance': self._covariance.copy()}

    @classmethod
    def from_state(cls, state: dict) -> 'GaussianDistribution':
        mean = np.asarray(state['mean'], dtype=np.float64)
        if len(mean) == 0:
            return cls()
        return cls(mean, state['covariance'])

    def __repr__(self) -> str:
        return f"GaussianDistribution(dimensionality={self.dimensionality})"
