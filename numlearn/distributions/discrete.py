"""
Discrete Distribution - From Scratch Implementation
===================================================

다차원 분해(factorized) 범주형 분포.

수학적 배경:
-----------
각 차원 j는 독립적인 범주형 분포 p_j 를 가진다.

    P(x) = Π_j p_j[x_j]

최대우도 추정 (가중치 w_i):
    p_j[k] = Σ_i w_i · 1(x_ij = k) / Σ_i w_i

관측값은 가장 가까운 정수 심볼로 반올림된다.

Author: NumLearn Project
"""

import logging
from typing import List, Optional, Sequence, Union

import numpy as np

from ..config import get_rng
from ..exceptions import DimensionMismatchError, InvalidObservationError
from ..serialization import register_serializable
from .base import Distribution, as_training_data, check_weights

logger = logging.getLogger(__name__)


def _normalized(prob, dim: int, allow_zero: bool = False) -> np.ndarray:
    """확률 벡터 검증 후 합이 1이 되도록 정규화"""
    prob = np.asarray(prob, dtype=np.float64).ravel()

    if not np.all(np.isfinite(prob)):
        raise ValueError(f"Probabilities for dimension {dim} must be finite")
    if np.any(prob < 0):
        raise ValueError(f"Probabilities for dimension {dim} must be non-negative")

    total = np.sum(prob)
    if total > 0:
        return prob / total
    if not allow_zero:
        raise ValueError(f"Probabilities for dimension {dim} sum to zero")
    # 생성자에서는 합이 0 인 벡터를 균등 분포로 둔다
    return np.full(len(prob), 1.0 / max(len(prob), 1))


@register_serializable
class DiscreteDistribution(Distribution):
    """
    다차원 범주형 분포

    Parameters
    ----------
    num_observations : int or sequence of int, default=0
        - int: 1차원, 해당 개수의 심볼 (균등 확률)
        - sequence: 차원별 심볼 개수 (균등 확률)

    probabilities : list of array-like, optional
        차원별 확률 벡터. 주어지면 num_observations 보다 우선하며
        각 벡터는 합이 1이 되도록 정규화된다.

    Examples
    --------
    >>> d = DiscreteDistribution(5)
    >>> d.probability(0)
    0.2
    >>> d = DiscreteDistribution([4, 4])
    >>> d.probability([0, 3])
    0.0625
    """

    def __init__(
        self,
        num_observations: Union[int, Sequence[int]] = 0,
        probabilities: Optional[Sequence[Sequence[float]]] = None
    ):
        if probabilities is not None:
            self.probabilities: List[np.ndarray] = [
                _normalized(prob, dim, allow_zero=True)
                for dim, prob in enumerate(probabilities)
            ]
            return

        if np.isscalar(num_observations):
            counts = [int(num_observations)] if num_observations else []
        else:
            counts = [int(c) for c in num_observations]

        if any(c <= 0 for c in counts):
            raise ValueError(f"Number of observations must be positive: {counts}")

        self.probabilities = [np.full(c, 1.0 / c) for c in counts]

    @property
    def dimensionality(self) -> int:
        return len(self.probabilities)

    def set_probabilities(self, probabilities: Sequence[float], dim: int = 0) -> None:
        """
        한 차원의 확률 벡터 교체 (심볼 개수는 생성 시점에 고정)

        벡터는 합이 1이 되도록 정규화된다. 음수, 비유한값, 합 0 은 ValueError.
        """
        probabilities = np.asarray(probabilities, dtype=np.float64).ravel()
        if len(probabilities) != len(self.probabilities[dim]):
            raise DimensionMismatchError(
                f"Dimension {dim} has {len(self.probabilities[dim])} outcomes, "
                f"got {len(probabilities)} probabilities"
            )
        self.probabilities[dim] = _normalized(probabilities, dim)

    def _symbols(self, points: np.ndarray) -> np.ndarray:
        """관측값을 정수 심볼로 변환하고 범위 검증"""
        symbols = np.floor(points + 0.5).astype(np.int64)

        for dim, prob in enumerate(self.probabilities):
            row = symbols[dim]
            if np.any(row < 0) or np.any(row >= len(prob)):
                bad = row[(row < 0) | (row >= len(prob))][0]
                raise InvalidObservationError(
                    f"Observation {bad} in dimension {dim} is not in the "
                    f"range [0, {len(prob) - 1}]"
                )
        return symbols

    def _probability(self, points: np.ndarray) -> np.ndarray:
        symbols = self._symbols(points)
        result = np.ones(points.shape[1])

        for dim, prob in enumerate(self.probabilities):
            result *= prob[symbols[dim]]

        return result

    def _log_probability(self, points: np.ndarray) -> np.ndarray:
        with np.errstate(divide='ignore'):
            return np.log(self._probability(points))

    def random(self, rng=None) -> np.ndarray:
        """각 차원에서 독립적으로 심볼 하나씩 샘플링"""
        rng = get_rng(rng)
        sample = np.zeros(self.dimensionality)

        for dim, prob in enumerate(self.probabilities):
            cumulative = np.cumsum(prob)
            u = rng.random() * cumulative[-1]
            sample[dim] = min(
                np.searchsorted(cumulative, u, side='right'), len(prob) - 1
            )

        return sample

    def train(self, observations, weights=None) -> 'DiscreteDistribution':
        """
        (가중) 최대우도 추정

        Parameters
        ----------
        observations : array of shape (d, n) or (n,)
            관측 심볼
        weights : array of shape (n,), optional
            각 관측의 가중치

        Returns
        -------
        self : DiscreteDistribution
        """
        observations = as_training_data(observations)
        if observations.shape[0] != self.dimensionality:
            raise DimensionMismatchError(
                f"Observations have {observations.shape[0]} dimensions, "
                f"distribution has {self.dimensionality}"
            )

        weights = check_weights(weights, observations.shape[1])
        symbols = self._symbols(observations)

        for dim, prob in enumerate(self.probabilities):
            counts = np.bincount(symbols[dim], weights=weights, minlength=len(prob))
            total = np.sum(counts)

            if total > 0:
                self.probabilities[dim] = counts / total
            else:
                # 관측이 없으면 균등 분포
                logger.debug(f"No mass in dimension {dim}; using uniform probabilities")
                self.probabilities[dim] = np.full(len(prob), 1.0 / len(prob))

        return self

    def get_state(self) -> dict:
        return {'probabilities': [p.copy() for p in self.probabilities]}

    @classmethod
    def from_state(cls, state: dict) -> 'DiscreteDistribution':
        d = cls()
        d.probabilities = [np.asarray(p, dtype=np.float64) for p in state['probabilities']]
        return d

    def __repr__(self) -> str:
        sizes = [len(p) for p in self.probabilities]
        return f"DiscreteDistribution(outcomes={sizes})"
