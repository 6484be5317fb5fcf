"""
Perceptron - From Scratch Implementation
========================================

샘플 가중치를 지원하는 다중 클래스 퍼셉트론 (AdaBoost 약한 학습기).

수학적 배경:
-----------
클래스 점수:  s = W x + b,   예측 ŷ = argmax_c s_c

갱신 규칙 (오분류 시, 샘플 가중치 w_i):
    W[y_i]  += w_i · x_i,   b[y_i]  += w_i
    W[ŷ_i]  -= w_i · x_i,   b[ŷ_i]  -= w_i

한 에폭 동안 갱신이 없거나 max_iterations 에 도달하면 종료.

Author: NumLearn Project
"""

import logging
from typing import Optional

import numpy as np

from .config import CONFIG
from .exceptions import DimensionMismatchError, NotFittedError
from .serialization import register_serializable

logger = logging.getLogger(__name__)


@register_serializable
class Perceptron:
    """
    가중 다중 클래스 퍼셉트론

    Parameters
    ----------
    max_iterations : int, optional
        최대 에폭 수 (기본값 CONFIG['perceptron_max_iterations'])

    Attributes
    ----------
    weights_ : ndarray of shape (n_classes, n_features)
    biases_ : ndarray of shape (n_classes,)
    n_iterations_ : int
    """

    def __init__(self, max_iterations: Optional[int] = None):
        self.max_iterations = max_iterations if max_iterations is not None \
            else CONFIG['perceptron_max_iterations']
        self.weights_: Optional[np.ndarray] = None
        self.biases_: Optional[np.ndarray] = None
        self.n_iterations_ = 0

    def fit(
        self,
        X: np.ndarray,
        y: np.ndarray,
        n_classes: Optional[int] = None,
        sample_weight: Optional[np.ndarray] = None
    ) -> 'Perceptron':
        """
        퍼셉트론 학습

        Parameters
        ----------
        X : ndarray of shape (n_features, n_samples)
        y : ndarray of shape (n_samples,)
            0 ~ n_classes-1 정수 레이블
        n_classes : int, optional
        sample_weight : ndarray of shape (n_samples,), optional

        Returns
        -------
        self : Perceptron
        """
        X = np.asarray(X, dtype=np.float64)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        y = np.asarray(y).ravel().astype(np.int64)

        if X.shape[1] != len(y):
            raise DimensionMismatchError(
                f"X와 y의 샘플 수가 일치하지 않습니다: {X.shape[1]} vs {len(y)}"
            )

        w = np.ones(len(y)) if sample_weight is None \
            else np.asarray(sample_weight, dtype=np.float64).ravel()
        n_classes = int(n_classes) if n_classes is not None else int(y.max()) + 1

        self.weights_ = np.zeros((n_classes, X.shape[0]))
        self.biases_ = np.zeros(n_classes)

        for iteration in range(1, self.max_iterations + 1):
            converged = True
            for i in range(X.shape[1]):
                x = X[:, i]
                predicted = int(np.argmax(self.weights_ @ x + self.biases_))
                if predicted != y[i]:
                    converged = False
                    self.weights_[y[i]] += w[i] * x
                    self.biases_[y[i]] += w[i]
                    self.weights_[predicted] -= w[i] * x
                    self.biases_[predicted] -= w[i]

            self.n_iterations_ = iteration
            if converged:
                break

        logger.debug(f"Perceptron stopped after {self.n_iterations_} epochs")
        return self

    def predict(self, X: np.ndarray) -> np.ndarray:
        """
        예측 레이블

        Parameters
        ----------
        X : ndarray of shape (n_features, n_samples)

        Returns
        -------
        y_pred : ndarray of shape (n_samples,)
        """
        if self.weights_ is None:
            raise NotFittedError("모델이 학습되지 않았습니다. fit()을 먼저 호출하세요.")

        X = np.asarray(X, dtype=np.float64)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if X.shape[0] != self.weights_.shape[1]:
            raise DimensionMismatchError(
                f"Data has {X.shape[0]} features, perceptron was trained on "
                f"{self.weights_.shape[1]}"
            )

        return np.argmax(self.weights_ @ X + self.biases_[:, None], axis=0)

    def get_state(self) -> dict:
        return {
            'max_iterations': self.max_iterations,
            'weights': self.weights_,
            'biases': self.biases_,
        }

    @classmethod
    def from_state(cls, state: dict) -> 'Perceptron':
        model = cls(state['max_iterations'])
        if state['weights'] is not None:
            model.weights_ = np.asarray(state['weights'], dtype=np.float64)
            model.biases_ = np.asarray(state['biases'], dtype=np.float64)
        return model

    def __repr__(self) -> str:
        if self.weights_ is None:
            return "Perceptron(not fitted)"
        return f"Perceptron(n_classes={self.weights_.shape[0]}, n_features={self.weights_.shape[1]})"
