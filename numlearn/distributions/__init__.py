"""
확률 분포
=========

- DiscreteDistribution: 다차원 분해 범주형 분포
- GaussianDistribution: 완전 공분산 정규분포
- DiagonalGaussianDistribution: 대각 공분산 정규분포
- GammaDistribution: 차원별 Gamma 분포 (Newton MLE)
- LaplaceDistribution: 등방성 Laplace 분포
- RegressionDistribution: 선형 회귀 + 잔차 정규분포
"""

from .base import Distribution
from .discrete import DiscreteDistribution
from .gaussian import GaussianDistribution
from .diagonal_gaussian import DiagonalGaussianDistribution
from .gamma import GammaDistribution
from .laplace import LaplaceDistribution
from .regression import RegressionDistribution

__all__ = [
    'Distribution',
    'DiscreteDistribution',
    'GaussianDistribution',
    'DiagonalGaussianDistribution',
    'GammaDistribution',
    'LaplaceDistribution',
    'RegressionDistribution',
]
