"""
Loss Functions
==============

NegativeLogLikelihood: 로그 확률 예측 (classes, batch) 과 정수 타깃 (batch,)

    L = - Σ_b log p[target_b, b]          (reduction='sum')
    L = - 1/B · Σ_b log p[target_b, b]    (reduction='mean')

Author: NumLearn Project
"""

import numpy as np

from ..exceptions import DimensionMismatchError, InvalidObservationError
from ..serialization import register_serializable


@register_serializable
class NegativeLogLikelihood:
    """
    음의 로그 우도 손실 (LogSoftMax 출력과 함께 사용)

    Parameters
    ----------
    reduction : {'sum', 'mean'}, default='sum'
    """

    def __init__(self, reduction: str = 'sum'):
        if reduction not in ('sum', 'mean'):
            raise ValueError(f"reduction must be 'sum' or 'mean', got {reduction}")
        self.reduction = reduction

    def _targets(self, prediction: np.ndarray, target) -> np.ndarray:
        target = np.asarray(target).ravel()
        if len(target) != prediction.shape[1]:
            raise DimensionMismatchError(
                f"Number of targets ({len(target)}) must match batch size "
                f"({prediction.shape[1]})"
            )
        target = target.astype(np.int64)
        if np.any(target < 0) or np.any(target >= prediction.shape[0]):
            raise InvalidObservationError(
                f"Targets must lie in [0, {prediction.shape[0]})"
            )
        return target

    def forward(self, prediction: np.ndarray, target) -> float:
        prediction = np.asarray(prediction, dtype=np.float64)
        target = self._targets(prediction, target)
        loss = -np.sum(prediction[target, np.arange(len(target))])
        if self.reduction == 'mean':
            loss /= len(target)
        return float(loss)

    def backward(self, prediction: np.ndarray, target) -> np.ndarray:
        prediction = np.asarray(prediction, dtype=np.float64)
        target = self._targets(prediction, target)
        gradient = np.zeros_like(prediction)
        gradient[target, np.arange(len(target))] = -1.0
        if self.reduction == 'mean':
            gradient /= len(target)
        return gradient

    def get_state(self) -> dict:
        return {'reduction': self.reduction}

    @classmethod
    def from_state(cls, state: dict) -> 'NegativeLogLikelihood':
        return cls(state['reduction'])

    def __repr__(self) -> str:
        return f"NegativeLogLikelihood(reduction='{self.reduction}')"
