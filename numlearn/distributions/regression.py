"""
Regression Distribution
=======================

선형 회귀 y = θ₀ + θᵀx 와 잔차 ε = y - ŷ 의 1차원 정규분포를 묶은 조건부 분포.

관측점 규약:
    관측점의 첫 번째 행은 반응 변수 y, 나머지 행은 설명 변수 x

    log p(y | x) = log N(y - ŷ(x) | μ_ε, σ²_ε)

Author: NumLearn Project
"""

from typing import Optional

import numpy as np

from ..config import get_rng
from ..exceptions import DimensionMismatchError, NotFittedError
from ..linear_regression import LinearRegression
from ..serialization import register_serializable
from .base import Distribution, as_points, as_training_data, check_weights
from .gaussian import GaussianDistribution


@register_serializable
class RegressionDistribution(Distribution):
    """
    회귀 오차 분포

    Parameters
    ----------
    predictors : array of shape (d, n), optional
        주어지면 responses 와 함께 바로 학습
    responses : array of shape (n,), optional
    lambda_ : float, default=0.0
        릿지 정규화 계수

    Attributes
    ----------
    regression : LinearRegression
    error : GaussianDistribution
        1차원 잔차 분포
    """

    def __init__(self, predictors=None, responses=None, lambda_: float = 0.0):
        self.regression = LinearRegression(lambda_=lambda_, intercept=True)
        self.error = GaussianDistribution(dimensionality=1)

        if predictors is not None:
            if responses is None:
                raise ValueError("responses are required when predictors are given")
            self._fit(as_training_data(predictors),
                      np.asarray(responses, dtype=np.float64).ravel(), None)

    @property
    def dimensionality(self) -> int:
        """회귀 파라미터 개수 (= 절편 + 설명 변수 수 = 관측점 차원)"""
        if self.regression.parameters is None:
            return 0
        return len(self.regression.parameters)

    @property
    def parameters(self) -> np.ndarray:
        return self.regression.parameters

    def _fit(self, predictors: np.ndarray, responses: np.ndarray,
             weights: Optional[np.ndarray]) -> None:
        self.regression.fit(predictors, responses, weights)
        residuals = responses - self.regression.predict(predictors)
        self.error.train(residuals.reshape(1, -1), weights)

    def train(self, observations, weights=None) -> 'RegressionDistribution':
        """
        (가중) 학습

        Parameters
        ----------
        observations : array of shape (1 + d, n)
            첫 행은 반응 변수, 나머지는 설명 변수
        weights : array of shape (n,), optional
        """
        observations = as_training_data(observations)
        if observations.shape[0] < 2:
            raise DimensionMismatchError(
                "Observations need a response row and at least one predictor row"
            )
        weights = check_weights(weights, observations.shape[1])
        self._fit(observations[1:], observations[0], weights)
        return self

    def _log_probability(self, points: np.ndarray) -> np.ndarray:
        residuals = points[0] - self.regression.predict(points[1:])
        return self.error.log_probability(residuals.reshape(1, -1))

    def predict(self, points) -> np.ndarray:
        """설명 변수 (d, n) 에 대한 회귀 예측"""
        return self.regression.predict(points)

    def random(self, predictors, rng=None) -> float:
        """설명 변수 x 가 주어졌을 때 y ~ p(y | x) 샘플"""
        if self.regression.parameters is None:
            raise NotFittedError("모델이 학습되지 않았습니다. train()을 먼저 호출하세요.")
        points, _ = as_points(predictors, self.dimensionality - 1)
        rng = get_rng(rng)
        return float(self.regression.predict(points)[0] + self.error.random(rng)[0])

    def get_state(self) -> dict:
        return {'regression': self.regression, 'error': self.error}

    @classmethod
    def from_state(cls, state: dict) -> 'RegressionDistribution':
        dist = cls()
        dist.regression = state['regression']
        dist.error = state['error']
        return dist

    def __repr__(self) -> str:
        if self.regression.parameters is None:
            return "RegressionDistribution(not fitted)"
        return f"RegressionDistribution(dimensionality={self.dimensionality})"
