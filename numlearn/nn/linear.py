"""
Linear Layer - From Scratch Implementation
==========================================

아핀 변환 레이어.

수학적 배경:
-----------
순전파:
    y = W x + b            W: (out, in), b: (out,), x: (in, batch)

역전파:
    ∂L/∂x = Wᵀ · gy

파라미터 그래디언트:
    ∂L/∂W = error · xᵀ
    ∂L/∂b = Σ_batch error
    이후 정규화 항을 그래디언트 버퍼에 제자리로 더한다.

가중치 버퍼 배치: [vec(W) (행 우선), b], 크기 out·in + out

Author: NumLearn Project
"""

from typing import Optional

import numpy as np

from ..serialization import register_serializable
from .layer import Layer
from .regularizers import NoRegularizer


@register_serializable
class Linear(Layer):
    """
    완전 연결 레이어

    Parameters
    ----------
    out_size : int
        출력 특징 수
    regularizer : object, optional
        evaluate(weights, gradient) 를 가진 정규화 객체 (기본값 NoRegularizer)

    Examples
    --------
    >>> layer = Linear(3).set_input_dimensions([2])
    >>> layer.weight_size()
    9
    """

    def __init__(self, out_size: int, regularizer: Optional[object] = None):
        super().__init__()
        if out_size <= 0:
            raise ValueError(f"out_size must be positive, got {out_size}")
        self.out_size = int(out_size)
        self.regularizer = regularizer if regularizer is not None else NoRegularizer()
        self.weight: Optional[np.ndarray] = None
        self.bias: Optional[np.ndarray] = None

    def compute_output_dimensions(self) -> None:
        self.output_dimensions = (self.out_size,)

    def weight_size(self) -> int:
        return self.out_size * self.input_size + self.out_size

    def _bind_weights(self, weights: np.ndarray) -> None:
        n_weight = self.out_size * self.input_size
        self.weight = weights[:n_weight].reshape(self.out_size, self.input_size)
        self.bias = weights[n_weight:]

    def forward(self, input: np.ndarray) -> np.ndarray:
        self._check_ready()
        input = self._check_input(input)
        return self.weight @ input + self.bias[:, None]

    def backward(self, input: np.ndarray, output: np.ndarray, gy: np.ndarray) -> np.ndarray:
        self._check_ready()
        return self.weight.T @ np.asarray(gy, dtype=np.float64)

    def gradient(self, input: np.ndarray, error: np.ndarray) -> np.ndarray:
        self._check_ready()
        input = self._check_input(input)
        error = np.asarray(error, dtype=np.float64)

        gradient = np.concatenate([
            (error @ input.T).ravel(),
            error.sum(axis=1),
        ])
        self.regularizer.evaluate(self.parameters, gradient)
        return gradient

    def _config(self) -> dict:
        return {'out_size': self.out_size, 'regularizer': self.regularizer}
