"""
Distribution 공통 기반 클래스
=============================

모든 분포가 공유하는 입력 정규화, 가중치 검증, 확률 계산 규약.

데이터 규약:
-----------
- 행렬의 행 = 차원, 열 = 관측점
- 평가 메서드에 전달된 1차원 배열은 "하나의 관측점"
- 학습 메서드에 전달된 1차원 배열은 "1차원 관측점들의 행"

Author: NumLearn Project
"""

from typing import Optional, Tuple, Union

import numpy as np

from ..exceptions import DimensionMismatchError, InvalidWeightsError

ArrayLike = Union[np.ndarray, list, tuple, float]


def as_points(x: ArrayLike, dimensionality: int) -> Tuple[np.ndarray, bool]:
    """
    평가용 입력을 (d, n) 행렬로 변환

    Returns
    -------
    points : ndarray of shape (d, n)
    single : bool
        입력이 단일 관측점이었는지 여부
    """
    x = np.asarray(x, dtype=np.float64)

    if x.ndim == 0:
        x = x.reshape(1)
    if x.ndim == 1:
        points, single = x.reshape(-1, 1), True
    elif x.ndim == 2:
        points, single = x, False
    else:
        raise DimensionMismatchError(
            f"Observations must be 1-D or 2-D, got {x.ndim}-D"
        )

    if points.shape[0] != dimensionality:
        raise DimensionMismatchError(
            f"Observation dimensionality ({points.shape[0]}) must match "
            f"distribution dimensionality ({dimensionality})"
        )
    return points, single


def as_training_data(observations: ArrayLike) -> np.ndarray:
    """학습용 입력을 (d, n) 행렬로 변환 (1차원 입력은 한 행)"""
    observations = np.asarray(observations, dtype=np.float64)

    if observations.ndim == 1:
        observations = observations.reshape(1, -1)
    if observations.ndim != 2:
        raise DimensionMismatchError(
            f"Training data must be 1-D or 2-D, got {observations.ndim}-D"
        )
    return observations


def check_weights(weights: Optional[ArrayLike], n_points: int) -> np.ndarray:
    """
    샘플 가중치 검증

    None이면 모든 가중치를 1로 둔다. 가중치 1 학습이 비가중 학습과
    정확히 같은 결과를 내도록 모든 분포는 이 경로를 공유한다.
    """
    if weights is None:
        return np.ones(n_points)

    weights = np.asarray(weights, dtype=np.float64).ravel()

    if len(weights) != n_points:
        raise InvalidWeightsError(
            f"Number of weights ({len(weights)}) must match number of "
            f"observations ({n_points})"
        )
    if not np.all(np.isfinite(weights)):
        raise InvalidWeightsError("Weights must be finite")
    if np.any(weights < 0):
        raise InvalidWeightsError("Weights must be non-negative")
    if n_points > 0 and np.sum(weights) <= 0:
        raise InvalidWeightsError("At least one weight must be positive")

    return weights


def unbiased_denominator(weights: np.ndarray) -> float:
    """
    신뢰도 가중(reliability weights) 불편 분산의 분모: V1 - V2 / V1

    모든 가중치가 1이면 n - 1 로 줄어든다.
    """
    v1 = np.sum(weights)
    v2 = np.sum(weights ** 2)
    return v1 - v2 / v1


class Distribution:
    """
    확률 분포 기본 클래스

    하위 클래스는 dimensionality, _log_probability(points), random(),
    train(), get_state(), from_state() 를 구현한다.
    """

    @property
    def dimensionality(self) -> int:
        raise NotImplementedError

    def _log_probability(self, points: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def log_probability(self, x: ArrayLike) -> Union[float, np.ndarray]:
        """
        로그 확률(밀도) 계산

        Parameters
        ----------
        x : array of shape (d,) or (d, n)
            단일 관측점 또는 관측점 행렬

        Returns
        -------
        float (단일 관측점) 또는 ndarray of shape (n,)
        """
        points, single = as_points(x, self.dimensionality)
        result = self._log_probability(points)
        return float(result[0]) if single else result

    def _probability(self, points: np.ndarray) -> np.ndarray:
        return np.exp(self._log_probability(points))

    def probability(self, x: ArrayLike) -> Union[float, np.ndarray]:
        """확률(밀도) 계산"""
        points, single = as_points(x, self.dimensionality)
        result = self._probability(points)
        return float(result[0]) if single else result

    def train(self, observations: ArrayLike, weights: Optional[ArrayLike] = None):
        raise NotImplementedError

    @classmethod
    def from_data(cls, observations: ArrayLike, weights: Optional[ArrayLike] = None, **kwargs):
        """데이터로부터 바로 학습된 분포 생성"""
        return cls(**kwargs).train(observations, weights)
