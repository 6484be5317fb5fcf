"""
NumLearn - 머신러닝 알고리즘 직접 구현
======================================

NumPy/SciPy 위에 직접 구현한 통계 분포, 부스팅, 신경망 레이어 라이브러리.

데이터 규약: 행렬의 행 = 차원(특징), 열 = 관측점(샘플)

구현된 구성 요소:
- distributions: Discrete, Gaussian, DiagonalGaussian, Gamma, Laplace, Regression
- LinearRegression: 가중 릿지 회귀
- DecisionTreeClassifier / Perceptron: 가중치를 지원하는 약한 학습기
- AdaBoostClassifier / AdaBoostModel: 다중 클래스 AdaBoost.MH
- nn: Linear, MultiheadAttention, LogSoftMax, FFN, 그래디언트 검증
- serialization: JSON / joblib / pickle 저장 및 로드
- MLVisualizer: 학습 결과 시각화

Author: NumLearn Project
"""

__version__ = '1.0.0'

from .exceptions import (
    NumLearnError,
    DimensionMismatchError,
    InvalidObservationError,
    InvalidWeightsError,
    ConvergenceError,
    NotFittedError,
    SerializationError,
)
from .distributions import (
    DiscreteDistribution,
    GaussianDistribution,
    DiagonalGaussianDistribution,
    GammaDistribution,
    LaplaceDistribution,
    RegressionDistribution,
)
from .linear_regression import LinearRegression
from .decision_tree import DecisionTreeClassifier
from .perceptron import Perceptron
from .adaboost import AdaBoostClassifier, AdaBoostModel
from . import nn
from .serialization import SerializationFormat, dumps, loads, save, load
from .visualizer import MLVisualizer

__all__ = [
    'NumLearnError',
    'DimensionMismatchError',
    'InvalidObservationError',
    'InvalidWeightsError',
    'ConvergenceError',
    'NotFittedError',
    'SerializationError',
    'DiscreteDistribution',
    'GaussianDistribution',
    'DiagonalGaussianDistribution',
    'GammaDistribution',
    'LaplaceDistribution',
    'RegressionDistribution',
    'LinearRegression',
    'DecisionTreeClassifier',
    'Perceptron',
    'AdaBoostClassifier',
    'AdaBoostModel',
    'nn',
    'SerializationFormat',
    'dumps',
    'loads',
    'save',
    'load',
    'MLVisualizer',
]
