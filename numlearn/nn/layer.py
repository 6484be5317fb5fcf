"""
Layer 기본 클래스
=================

모든 레이어가 공유하는 차원/가중치 버퍼 규약.

규약:
-----
- 입력/출력은 (특징 수, 배치 크기) 행렬 (열 = 샘플)
- 레이어는 하나의 평탄화된 가중치 버퍼를 소유하며, 가중치 행렬과 편향은
  그 버퍼의 뷰(view)이다. 따라서 버퍼를 수정하면 레이어 가중치가 바로 바뀐다.
- forward / backward / gradient 는 호출 간 활성값을 보관하지 않는 순수 변환이다.
  backward 와 gradient 는 필요한 중간값을 입력으로부터 다시 계산한다.

Author: NumLearn Project
"""

from typing import Sequence, Tuple

import numpy as np

from ..exceptions import DimensionMismatchError, NotFittedError


class Layer:
    """
    신경망 레이어 기본 클래스

    하위 클래스는 compute_output_dimensions(), weight_size(), _bind_weights(),
    forward(), backward(), gradient() 를 구현한다.

    Attributes
    ----------
    input_dimensions : tuple of int
        입력 한 샘플의 형태. 행 수는 그 곱이다.
    output_dimensions : tuple of int
        compute_output_dimensions() 호출 후 설정됨
    parameters : ndarray of shape (weight_size(),)
        평탄화된 가중치 버퍼
    """

    def __init__(self):
        self.input_dimensions: Tuple[int, ...] = ()
        self.output_dimensions: Tuple[int, ...] = ()
        self.parameters = np.zeros(0)
        self._weights_set = False

    @property
    def input_size(self) -> int:
        return int(np.prod(self.input_dimensions)) if self.input_dimensions else 0

    @property
    def output_size(self) -> int:
        return int(np.prod(self.output_dimensions)) if self.output_dimensions else 0

    def set_input_dimensions(self, dimensions: Sequence[int]) -> 'Layer':
        """입력 차원 설정 후 출력 차원 계산"""
        self.input_dimensions = tuple(int(d) for d in dimensions)
        self.compute_output_dimensions()
        return self

    def compute_output_dimensions(self) -> None:
        self.output_dimensions = tuple(self.input_dimensions)

    def weight_size(self) -> int:
        return 0

    def set_weights(self, weights: np.ndarray) -> None:
        """
        가중치 버퍼 연결

        Parameters
        ----------
        weights : ndarray
            정확히 weight_size() 개의 원소를 가진 float64 배열.
            연속 메모리 배열이면 복사 없이 뷰로 연결된다.
        """
        weights = np.asarray(weights, dtype=np.float64)
        expected = self.weight_size()

        if weights.size != expected:
            raise DimensionMismatchError(
                f"{type(self).__name__} expects a weight buffer of {expected} "
                f"elements, got {weights.size}"
            )

        self.parameters = weights.reshape(-1)
        self._bind_weights(self.parameters)
        self._weights_set = True

    def _bind_weights(self, weights: np.ndarray) -> None:
        pass

    def _check_ready(self) -> None:
        if self.weight_size() > 0 and not self._weights_set:
            raise NotFittedError(
                f"{type(self).__name__} weights are not set; call set_weights() first"
            )

    def _check_input(self, input: np.ndarray) -> np.ndarray:
        input = np.asarray(input, dtype=np.float64)
        if input.ndim == 1:
            input = input.reshape(-1, 1)
        if input.shape[0] != self.input_size:
            raise DimensionMismatchError(
                f"{type(self).__name__} expects {self.input_size} input rows, "
                f"got {input.shape[0]}"
            )
        return input

    def forward(self, input: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def backward(self, input: np.ndarray, output: np.ndarray, gy: np.ndarray) -> np.ndarray:
        """출력에 대한 그래디언트 gy 를 입력에 대한 그래디언트로 전파"""
        raise NotImplementedError

    def gradient(self, input: np.ndarray, error: np.ndarray) -> np.ndarray:
        """출력 그래디언트 error 로부터 평탄화된 파라미터 그래디언트 계산"""
        return np.zeros(0)

    def _config(self) -> dict:
        return {}

    def get_state(self) -> dict:
        return {
            'config': self._config(),
            'input_dimensions': list(self.input_dimensions),
            'parameters': self.parameters.copy() if self._weights_set else None,
        }

    @classmethod
    def from_state(cls, state: dict) -> 'Layer':
        layer = cls(**state['config'])
        if state['input_dimensions']:
            layer.set_input_dimensions(state['input_dimensions'])
        if state['parameters'] is not None:
            layer.set_weights(np.array(state['parameters'], dtype=np.float64))
        return layer

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(input_dimensions={self.input_dimensions}, "
                f"output_dimensions={self.output_dimensions})")
