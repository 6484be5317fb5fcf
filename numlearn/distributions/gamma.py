"""
Gamma Distribution - From Scratch Implementation
================================================

차원별로 독립인 Gamma(α, β) 분포 (α: shape, β: scale).

수학적 배경:
-----------
밀도:
    f(x | α, β) = x^(α-1) · exp(-x/β) / (Γ(α) · β^α)

    x = 0 에서는 극한값을 쓴다 (α = 1 이면 1/β, α < 1 이면 ∞).

최대우도 추정 (Minka, "Estimating a Gamma distribution", 2002):
    s = log(mean(x)) - mean(log(x))     (s > 0, Jensen 부등식)

    초기값 (근사 해):
        α₀ = (3 - s + sqrt((s - 3)² + 24 s)) / (12 s)

    일반화 Newton 갱신:
        1/α_new = 1/α + (mean(log x) - log(mean x) + log α - ψ(α))
                        / (α² · (1/α - ψ'(α)))

    |α_new - α| / α < tol 이면 종료, β = mean(x) / α

퇴화 조건:
    s = 0 (모든 관측값이 동일) 이면 α → ∞ 이므로 추정 불가 → ConvergenceError
    Newton 갱신이 비유한값이 되면 근사 해 α₀ 로 대체 (경고 로그)

Author: NumLearn Project
"""

import logging
from typing import Optional, Union

import numpy as np
from scipy import special

from ..config import CONFIG, get_rng
from ..exceptions import ConvergenceError, DimensionMismatchError, InvalidObservationError
from ..serialization import register_serializable
from .base import Distribution, as_training_data, check_weights

logger = logging.getLogger(__name__)


@register_serializable
class GammaDistribution(Distribution):
    """
    다차원 (독립) Gamma 분포

    Parameters
    ----------
    alpha : array-like of shape (d,), optional
        차원별 shape 파라미터
    beta : array-like of shape (d,), optional
        차원별 scale 파라미터
    tolerance : float, optional
        Newton 반복 종료 기준 (기본값 CONFIG['gamma_tolerance'])
    max_iterations : int, optional
        Newton 반복 최대 횟수 (기본값 CONFIG['gamma_max_iterations'])

    Attributes
    ----------
    n_iterations_ : ndarray of shape (d,)
        마지막 학습에서 차원별 Newton 반복 횟수
    """

    def __init__(
        self,
        alpha=None,
        beta=None,
        tolerance: Optional[float] = None,
        max_iterations: Optional[int] = None
    ):
        self.alpha = np.zeros(0) if alpha is None else np.asarray(alpha, dtype=np.float64).ravel().copy()
        self.beta = np.zeros(0) if beta is None else np.asarray(beta, dtype=np.float64).ravel().copy()
        self.tolerance = tolerance if tolerance is not None else CONFIG['gamma_tolerance']
        self.max_iterations = max_iterations if max_iterations is not None else CONFIG['gamma_max_iterations']
        self.n_iterations_ = np.zeros(len(self.alpha), dtype=np.int64)

        if len(self.alpha) != len(self.beta):
            raise DimensionMismatchError(
                f"alpha ({len(self.alpha)}) and beta ({len(self.beta)}) must "
                f"have the same length"
            )

    @property
    def dimensionality(self) -> int:
        return len(self.alpha)

    @staticmethod
    def _log_density(x, alpha, beta) -> np.ndarray:
        """
        1차원 로그 밀도 (원소별)

        x = 0 에서는 극한값: α < 1 이면 +∞, α = 1 이면 -log β, α > 1 이면 -∞.
        x < 0 은 지지집합 밖이므로 -∞.
        """
        x, alpha, beta = np.broadcast_arrays(
            np.asarray(x, dtype=np.float64), alpha, beta
        )
        with np.errstate(divide='ignore', invalid='ignore'):
            log_density = (
                (alpha - 1) * np.log(x) - x / beta
                - special.gammaln(alpha) - alpha * np.log(beta)
            )
            at_zero = np.where(
                alpha < 1, np.inf, np.where(alpha == 1, -np.log(beta), -np.inf)
            )
        log_density = np.where(x == 0, at_zero, log_density)
        return np.where(x < 0, -np.inf, log_density)

    def _log_probability(self, points: np.ndarray) -> np.ndarray:
        log_density = self._log_density(points, self.alpha[:, None], self.beta[:, None])
        return np.sum(log_density, axis=0)

    def log_probability(self, x, dim: Optional[int] = None) -> Union[float, np.ndarray]:
        """
        로그 밀도

        Parameters
        ----------
        x : array of shape (d,) or (d, n), 또는 dim이 주어지면 스칼라
        dim : int, optional
            주어지면 해당 차원의 1차원 밀도로 스칼라 x 를 평가
        """
        if dim is None:
            return super().log_probability(x)

        return float(self._log_density(float(x), self.alpha[dim], self.beta[dim]))

    def probability(self, x, dim: Optional[int] = None) -> Union[float, np.ndarray]:
        """밀도. dim이 주어지면 해당 차원의 1차원 밀도."""
        if dim is None:
            return super().probability(x)
        return float(np.exp(self.log_probability(x, dim)))

    def random(self, rng=None) -> np.ndarray:
        rng = get_rng(rng)
        return rng.gamma(self.alpha, self.beta)

    def train(self, observations, weights=None) -> 'GammaDistribution':
        """
        (가중) 최대우도 추정

        Parameters
        ----------
        observations : array of shape (d, n)
            양수 관측값
        weights : array of shape (n,), optional

        Returns
        -------
        self : GammaDistribution
        """
        observations = as_training_data(observations)
        n = observations.shape[1]
        weights = check_weights(weights, n)

        if n == 0:
            raise DimensionMismatchError("Cannot train on an empty dataset")
        if np.any(observations <= 0):
            raise InvalidObservationError(
                "Gamma distribution requires strictly positive observations"
            )

        total = np.sum(weights)
        mean_x = observations @ weights / total
        mean_log_x = np.log(observations) @ weights / total
        log_mean_x = np.log(mean_x)

        return self.train_from_statistics(log_mean_x, mean_log_x, mean_x)

    def train_from_statistics(self, log_mean_x, mean_log_x, mean_x) -> 'GammaDistribution':
        """
        충분 통계량으로부터 파라미터 추정

        Parameters
        ----------
        log_mean_x : array of shape (d,)
            log(mean(x))
        mean_log_x : array of shape (d,)
            mean(log(x))
        mean_x : array of shape (d,)
            mean(x)
        """
        log_mean_x = np.atleast_1d(np.asarray(log_mean_x, dtype=np.float64))
        mean_log_x = np.atleast_1d(np.asarray(mean_log_x, dtype=np.float64))
        mean_x = np.atleast_1d(np.asarray(mean_x, dtype=np.float64))

        if not (len(log_mean_x) == len(mean_log_x) == len(mean_x)):
            raise DimensionMismatchError("Statistics vectors must have the same length")

        d = len(mean_x)
        alpha = np.zeros(d)
        n_iterations = np.zeros(d, dtype=np.int64)

        for i in range(d):
            alpha[i], n_iterations[i] = self._fit_shape(log_mean_x[i], mean_log_x[i], i)

        self.alpha = alpha
        self.beta = mean_x / alpha
        self.n_iterations_ = n_iterations
        return self

    def _fit_shape(self, log_mean_x: float, mean_log_x: float, dim: int):
        """한 차원의 shape 파라미터 α 를 Newton 반복으로 추정"""
        s = log_mean_x - mean_log_x

        if not np.isfinite(s) or s <= 1e-12:
            raise ConvergenceError(
                f"Degenerate data in dimension {dim}: log(mean(x)) - mean(log(x)) "
                f"= {s}; observations need some spread to fit a Gamma distribution"
            )

        # 근사 해 (초기값)
        alpha_approx = (3 - s + np.sqrt((s - 3) ** 2 + 24 * s)) / (12 * s)
        alpha = alpha_approx

        for iteration in range(1, self.max_iterations + 1):
            numerator = mean_log_x - log_mean_x + np.log(alpha) - special.digamma(alpha)
            denominator = alpha ** 2 * (1 / alpha - special.polygamma(1, alpha))
            alpha_new = 1 / (1 / alpha + numerator / denominator)

            if not np.isfinite(alpha_new) or alpha_new <= 0:
                logger.warning(
                    f"Newton step diverged in dimension {dim} at iteration "
                    f"{iteration}; falling back to closed-form estimate "
                    f"alpha={alpha_approx:.6g}"
                )
                return alpha_approx, iteration

            if abs(alpha_new - alpha) / alpha < self.tolerance:
                logger.debug(f"Gamma fit converged in dimension {dim} after {iteration} iterations")
                return alpha_new, iteration

            alpha = alpha_new

        raise ConvergenceError(
            f"Gamma fit did not converge in dimension {dim} within "
            f"{self.max_iterations} iterations (tolerance={self.tolerance})"
        )

    def get_state(self) -> dict:
        return {
            'alpha': self.alpha.copy(),
            'beta': self.beta.copy(),
            'tolerance': self.tolerance,
            'max_iterations': self.max_iterations,
        }

    @classmethod
    def from_state(cls, state: dict) -> 'GammaDistribution':
        return cls(
            state['alpha'], state['beta'],
            tolerance=state['tolerance'],
            max_iterations=state['max_iterations']
        )

    def __repr__(self) -> str:
        return f"GammaDistribution(dimensionality={self.dimensionality})"
