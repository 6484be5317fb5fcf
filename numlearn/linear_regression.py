"""
Linear Regression - From Scratch Implementation
===============================================

가중 릿지(Ridge) 선형 회귀.

수학적 배경:
-----------
목적 함수 (가중치 w_i, 정규화 계수 λ):
    min_θ  Σ_i w_i (y_i - θ₀ - θᵀ x_i)² + λ ‖θ‖²

절편 θ₀ 는 정규화하지 않는다. 정규 방정식 대신 확장된 최소제곱 문제

    [ √W A    ]  θ ≈ [ √W y ]
    [ √λ I'   ]      [  0   ]

를 lstsq 로 풀어 수치적으로 안정적으로 계산한다 (A = [1, Xᵀ]).

Author: NumLearn Project
"""

from typing import Optional

import numpy as np

from .distributions.base import check_weights
from .exceptions import DimensionMismatchError, NotFittedError
from .serialization import register_serializable


@register_serializable
class LinearRegression:
    """
    가중 릿지 선형 회귀

    Parameters
    ----------
    lambda_ : float, default=0.0
        L2 정규화 계수
    intercept : bool, default=True
        절편 포함 여부

    Attributes
    ----------
    parameters : ndarray
        절편이 있으면 [θ₀, θ₁, ..., θ_d], 없으면 [θ₁, ..., θ_d]
    """

    def __init__(self, lambda_: float = 0.0, intercept: bool = True):
        if lambda_ < 0:
            raise ValueError(f"lambda_ must be non-negative, got {lambda_}")
        self.lambda_ = float(lambda_)
        self.intercept = intercept
        self.parameters: Optional[np.ndarray] = None

    def _design(self, predictors: np.ndarray) -> np.ndarray:
        design = predictors.T
        if self.intercept:
            design = np.hstack([np.ones((design.shape[0], 1)), design])
        return design

    def fit(self, predictors, responses, weights=None) -> 'LinearRegression':
        """
        모델 학습

        Parameters
        ----------
        predictors : array of shape (d, n)
        responses : array of shape (n,)
        weights : array of shape (n,), optional

        Returns
        -------
        self : LinearRegression
        """
        predictors = np.asarray(predictors, dtype=np.float64)
        if predictors.ndim == 1:
            predictors = predictors.reshape(1, -1)
        responses = np.asarray(responses, dtype=np.float64).ravel()

        if predictors.shape[1] != len(responses):
            raise DimensionMismatchError(
                f"Number of points ({predictors.shape[1]}) and responses "
                f"({len(responses)}) must match"
            )

        weights = check_weights(weights, len(responses))
        sqrt_w = np.sqrt(weights)

        design = self._design(predictors) * sqrt_w[:, None]
        target = responses * sqrt_w

        if self.lambda_ > 0:
            n_params = design.shape[1]
            penalty = np.sqrt(self.lambda_) * np.eye(n_params)
            if self.intercept:
                penalty = penalty[1:]
            design = np.vstack([design, penalty])
            target = np.concatenate([target, np.zeros(penalty.shape[0])])

        self.parameters, _, _, _ = np.linalg.lstsq(design, target, rcond=None)
        return self

    def predict(self, points) -> np.ndarray:
        """
        예측

        Parameters
        ----------
        points : array of shape (d, n)

        Returns
        -------
        predictions : ndarray of shape (n,)
        """
        if self.parameters is None:
            raise NotFittedError("모델이 학습되지 않았습니다. fit()을 먼저 호출하세요.")

        points = np.asarray(points, dtype=np.float64)
        if points.ndim == 1:
            points = points.reshape(-1, 1)

        expected = len(self.parameters) - int(self.intercept)
        if points.shape[0] != expected:
            raise DimensionMismatchError(
                f"Points have {points.shape[0]} dimensions, model expects {expected}"
            )

        return self._design(points) @ self.parameters

    def compute_error(self, points, responses) -> float:
        """평균 제곱 오차"""
        residuals = np.asarray(responses, dtype=np.float64).ravel() - self.predict(points)
        return float(np.mean(residuals ** 2))

    def get_state(self) -> dict:
        return {
            'lambda_': self.lambda_,
            'intercept': self.intercept,
            'parameters': None if self.parameters is None else self.parameters.copy(),
        }

    @classmethod
    def from_state(cls, state: dict) -> 'LinearRegression':
        model = cls(state['lambda_'], state['intercept'])
        if state['parameters'] is not None:
            model.parameters = np.asarray(state['parameters'], dtype=np.float64)
        return model

    def __repr__(self) -> str:
        if self.parameters is None:
            return "LinearRegression(not fitted)"
        return f"LinearRegression(n_parameters={len(self.parameters)}, lambda_={self.lambda_})"
