"""
LogSoftMax Layer
================

열 단위 로그 소프트맥스.

    y = x - log Σ_i exp(x_i)
    ∂L/∂x = gy - exp(y) · Σ_i gy_i

Author: NumLearn Project
"""

import numpy as np
from scipy.special import logsumexp

from ..serialization import register_serializable
from .layer import Layer


@register_serializable
class LogSoftMax(Layer):
    """열(샘플) 단위 로그 소프트맥스 레이어"""

    def forward(self, input: np.ndarray) -> np.ndarray:
        input = self._check_input(input)
        return input - logsumexp(input, axis=0, keepdims=True)

    def backward(self, input: np.ndarray, output: np.ndarray, gy: np.ndarray) -> np.ndarray:
        gy = np.asarray(gy, dtype=np.float64)
        return gy - np.exp(output) * np.sum(gy, axis=0, keepdims=True)
