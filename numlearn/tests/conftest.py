"""
pytest 공통 설정
"""

import matplotlib

matplotlib.use('Agg')

import numpy as np
import pytest


@pytest.fixture
def rng():
    """고정 시드 난수 생성기"""
    return np.random.default_rng(42)


@pytest.fixture
def iris():
    """iris 데이터 (특징, 샘플) 형태"""
    from sklearn.datasets import load_iris

    X, y = load_iris(return_X_y=True)
    return X.T.copy(), y
