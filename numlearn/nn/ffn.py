"""
FFN - Feed-Forward Network Container
====================================

레이어를 순서대로 연결하는 신경망 컨테이너.

모든 레이어의 가중치는 하나의 평탄화된 파라미터 버퍼에 연속으로 배치되고,
각 레이어는 자기 구간의 뷰를 가진다. 따라서 parameters 의 원소를 바꾸면
곧바로 레이어 가중치가 바뀐다 (수치 그래디언트 검증에 사용).

학습:
    경사 하강법  θ ← θ - η · ∇L(θ)

Author: NumLearn Project
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..config import get_rng
from ..exceptions import NotFittedError
from ..serialization import register_serializable
from .init import XavierInitialization
from .layer import Layer
from .loss import NegativeLogLikelihood

logger = logging.getLogger(__name__)


@register_serializable
class FFN:
    """
    순차 신경망

    Parameters
    ----------
    loss : object, optional
        forward(prediction, target), backward(prediction, target) 를 가진
        손실 객체 (기본값 NegativeLogLikelihood)
    initializer : object, optional
        initialize(rows, cols, rng) 를 가진 초기화 객체 (기본값 XavierInitialization)
    input_dimensions : sequence of int, optional
        첫 레이어의 입력 차원

    Attributes
    ----------
    parameters : ndarray
        전체 파라미터 버퍼 (reset() 이후)
    training_history_ : list of dict
        train() 의 에폭별 손실
    """

    def __init__(
        self,
        loss: Optional[object] = None,
        initializer: Optional[object] = None,
        input_dimensions: Optional[Sequence[int]] = None
    ):
        self.loss = loss if loss is not None else NegativeLogLikelihood()
        self.initializer = initializer if initializer is not None else XavierInitialization()
        self.input_dimensions = tuple(input_dimensions) if input_dimensions is not None else ()
        self.layers: List[Layer] = []
        self.parameters: Optional[np.ndarray] = None
        self.training_history_: List[dict] = []

    def add(self, layer: Layer) -> 'FFN':
        """레이어 추가 (추가 후 reset() 필요)"""
        self.layers.append(layer)
        self.parameters = None
        return self

    def _offsets(self) -> List[Tuple[int, int]]:
        offsets, start = [], 0
        for layer in self.layers:
            size = layer.weight_size()
            offsets.append((start, start + size))
            start += size
        return offsets

    def _propagate_dimensions(self) -> None:
        dimensions = self.input_dimensions
        for layer in self.layers:
            layer.set_input_dimensions(dimensions)
            dimensions = layer.output_dimensions

    def _bind(self) -> None:
        for layer, (start, end) in zip(self.layers, self._offsets()):
            layer.set_weights(self.parameters[start:end])

    def reset(self, rng=None) -> 'FFN':
        """
        차원 전파 후 파라미터 버퍼 할당 및 초기화

        Parameters
        ----------
        rng : int or Generator, optional
        """
        if not self.input_dimensions:
            raise ValueError("input_dimensions must be set before reset()")

        rng = get_rng(rng)
        self._propagate_dimensions()

        offsets = self._offsets()
        self.parameters = np.zeros(offsets[-1][1] if offsets else 0)
        for layer, (start, end) in zip(self.layers, offsets):
            if end > start:
                self.parameters[start:end] = self.initializer.initialize(end - start, 1, rng).ravel()
        self._bind()

        logger.debug(f"FFN reset: {len(self.layers)} layers, {len(self.parameters)} parameters")
        return self

    def _check_ready(self) -> None:
        if self.parameters is None:
            raise NotFittedError("네트워크가 초기화되지 않았습니다. reset()을 먼저 호출하세요.")

    def _activations(self, input: np.ndarray) -> List[np.ndarray]:
        activations = [np.asarray(input, dtype=np.float64)]
        for layer in self.layers:
            activations.append(layer.forward(activations[-1]))
        return activations

    def forward(self, input: np.ndarray) -> np.ndarray:
        self._check_ready()
        return self._activations(input)[-1]

    predict = forward

    def evaluate(self, input: np.ndarray, target) -> float:
        """현재 파라미터에서의 손실"""
        return self.loss.forward(self.forward(input), target)

    def gradient(self, input: np.ndarray, target) -> Tuple[float, np.ndarray]:
        """
        손실과 평탄화된 파라미터 그래디언트

        Returns
        -------
        loss : float
        gradient : ndarray of shape (len(parameters),)
        """
        self._check_ready()
        activations = self._activations(input)
        loss = self.loss.forward(activations[-1], target)
        error = self.loss.backward(activations[-1], target)

        gradient = np.zeros_like(self.parameters)
        offsets = self._offsets()

        for i in reversed(range(len(self.layers))):
            layer = self.layers[i]
            start, end = offsets[i]
            if end > start:
                gradient[start:end] = layer.gradient(activations[i], error)
            if i > 0:
                error = layer.backward(activations[i], activations[i + 1], error)

        return loss, gradient

    def train(
        self,
        input: np.ndarray,
        target,
        learning_rate: float = 0.01,
        epochs: int = 100,
        verbose: bool = False
    ) -> 'FFN':
        """
        전체 배치 경사 하강법

        Parameters
        ----------
        input : array of shape (input_size, batch)
        target : array of shape (batch,)
        learning_rate : float
        epochs : int
        verbose : bool
        """
        if self.parameters is None:
            self.reset()

        self.training_history_ = []
        for epoch in range(epochs):
            loss, gradient = self.gradient(input, target)
            self.parameters -= learning_rate * gradient
            self.training_history_.append({'epoch': epoch, 'loss': loss})

            if verbose and (epoch + 1) % max(1, epochs // 10) == 0:
                print(f"Epoch {epoch + 1}/{epochs}: loss={loss:.6f}")

        return self

    def get_state(self) -> dict:
        return {
            'loss': self.loss,
            'initializer': self.initializer,
            'input_dimensions': list(self.input_dimensions),
            'layers': list(self.layers),
            'parameters': None if self.parameters is None else self.parameters.copy(),
        }

    @classmethod
    def from_state(cls, state: dict) -> 'FFN':
        model = cls(state['loss'], state['initializer'], state['input_dimensions'] or None)
        model.layers = list(state['layers'])
        if state['parameters'] is not None:
            model._propagate_dimensions()
            model.parameters = np.array(state['parameters'], dtype=np.float64)
            model._bind()
        return model

    def __repr__(self) -> str:
        names = ', '.join(type(layer).__name__ for layer in self.layers)
        return f"FFN([{names}])"
