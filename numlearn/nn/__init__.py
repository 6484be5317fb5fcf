"""
신경망 레이어
=============

- Layer: 평탄화된 가중치 버퍼 규약을 가진 기본 클래스
- Linear: 아핀 변환
- MultiheadAttention: 스케일드 닷-프로덕트 멀티헤드 어텐션
- LogSoftMax: 열 단위 로그 소프트맥스
- NegativeLogLikelihood: 음의 로그 우도 손실
- FFN: 순차 신경망 컨테이너
"""

from .layer import Layer
from .linear import Linear
from .multihead_attention import MultiheadAttention
from .log_softmax import LogSoftMax
from .loss import NegativeLogLikelihood
from .regularizers import NoRegularizer, L1Regularizer, L2Regularizer
from .init import RandomInitialization, XavierInitialization
from .ffn import FFN
from .gradient_check import jacobian_test, check_gradient

__all__ = [
    'Layer',
    'Linear',
    'MultiheadAttention',
    'LogSoftMax',
    'NegativeLogLikelihood',
    'NoRegularizer',
    'L1Regularizer',
    'L2Regularizer',
    'RandomInitialization',
    'XavierInitialization',
    'FFN',
    'jacobian_test',
    'check_gradient',
]
