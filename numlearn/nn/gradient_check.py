"""
Gradient Check - 수치 미분 검증
===============================

중심 차분으로 계산한 수치 미분과 해석적 그래디언트를 비교한다.

    f'(θ) ≈ (f(θ + ε) - f(θ - ε)) / 2ε

Author: NumLearn Project
"""

import logging
from typing import Optional

import numpy as np

from ..config import CONFIG

logger = logging.getLogger(__name__)


def jacobian_test(layer, input: np.ndarray, perturbation: Optional[float] = None) -> float:
    """
    레이어 입력에 대한 야코비안 검증

    수치 야코비안 (입력 원소별 섭동) 과 backward() 로 구한 야코비안
    (출력 원소별 단위 gy) 을 비교한다.

    Parameters
    ----------
    layer : Layer
        가중치가 설정된 레이어
    input : array of shape (input_size, batch)
    perturbation : float, optional
        기본값 CONFIG['jacobian_perturbation']

    Returns
    -------
    error : float
        두 야코비안의 최대 절대 오차
    """
    if perturbation is None:
        perturbation = CONFIG['jacobian_perturbation']

    input = np.array(input, dtype=np.float64, order='C')
    flat_input = input.reshape(-1)
    output = layer.forward(input)

    numeric = np.zeros((input.size, output.size))
    for i in range(input.size):
        original = flat_input[i]
        flat_input[i] = original + perturbation
        output_plus = layer.forward(input).ravel()
        flat_input[i] = original - perturbation
        output_minus = layer.forward(input).ravel()
        flat_input[i] = original
        numeric[i] = (output_plus - output_minus) / (2 * perturbation)

    analytic = np.zeros_like(numeric)
    # C 순서여야 reshape(-1) 가 gy 의 뷰가 된다 (forward 출력은 F 순서일 수 있음)
    gy = np.zeros(output.shape)
    flat_gy = gy.reshape(-1)
    for j in range(output.size):
        flat_gy[j] = 1.0
        analytic[:, j] = layer.backward(input, output, gy).ravel()
        flat_gy[j] = 0.0

    error = float(np.max(np.abs(analytic - numeric)))
    logger.debug(f"Jacobian test for {type(layer).__name__}: max error {error:.3e}")
    return error


def check_gradient(function, eps: Optional[float] = None) -> float:
    """
    파라미터 그래디언트 검증

    Parameters
    ----------
    function : object
        parameters (제자리 수정 가능한 ndarray) 속성과
        gradient() -> (cost, gradient) 메서드를 가진 객체
    eps : float, optional
        기본값 CONFIG['gradient_check_epsilon']

    Returns
    -------
    error : float
        ‖g - ĝ‖ / ‖g + ĝ‖
    """
    if eps is None:
        eps = CONFIG['gradient_check_epsilon']

    _, original_gradient = function.gradient()
    estimated = np.zeros_like(original_gradient)
    parameters = function.parameters

    for i in range(parameters.size):
        original = parameters[i]

        parameters[i] = original + eps
        cost_plus, _ = function.gradient()
        parameters[i] = original - eps
        cost_minus, _ = function.gradient()
        parameters[i] = original

        estimated[i] = (cost_plus - cost_minus) / (2 * eps)

    denominator = np.linalg.norm(original_gradient + estimated)
    if denominator == 0:
        return float(np.linalg.norm(original_gradient - estimated))

    error = float(np.linalg.norm(original_gradient - estimated) / denominator)
    logger.debug(f"Gradient check: relative error {error:.3e}")
    return error
