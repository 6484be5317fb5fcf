"""
NumLearn - 선형 회귀 / 회귀 분포 검증 테스트
============================================

테스트 항목:
1. sklearn 과의 일관성 (가중 릿지)
2. 절편 처리
3. 회귀 오차 분포의 조건부 밀도

Author: NumLearn Project
"""

import numpy as np
import pytest

from numlearn import (
    LinearRegression,
    RegressionDistribution,
    GaussianDistribution,
    DimensionMismatchError,
    NotFittedError,
)


def _make_data(rng, n=200):
    X = rng.standard_normal((3, n))
    y = 1.5 + X.T @ np.array([2.0, -1.0, 0.5]) + 0.1 * rng.standard_normal(n)
    return X, y


def test_linear_regression_exact_fit(rng):
    """노이즈 없는 데이터는 정확히 복원"""
    print("=" * 50)
    print("Test: Linear Regression Exact Fit")
    print("=" * 50)

    X = rng.standard_normal((2, 50))
    y = 3.0 + 2.0 * X[0] - 4.0 * X[1]

    model = LinearRegression().fit(X, y)
    assert np.allclose(model.parameters, [3.0, 2.0, -4.0]), f"파라미터 오류: {model.parameters}"
    assert model.compute_error(X, y) < 1e-20

    no_intercept = LinearRegression(intercept=False).fit(X, 2.0 * X[0] - 4.0 * X[1])
    assert np.allclose(no_intercept.parameters, [2.0, -4.0])

    print(f"  ✓ 파라미터: {model.parameters}")
    print("  ✓ 모든 테스트 통과!")


def test_linear_regression_vs_sklearn(rng):
    """sklearn Ridge 와 비교 (가중치 포함)"""
    print("\n" + "=" * 50)
    print("Test: Linear Regression vs sklearn")
    print("=" * 50)

    from sklearn.linear_model import LinearRegression as SklearnLinear
    from sklearn.linear_model import Ridge

    X, y = _make_data(rng)
    weights = rng.random(len(y)) + 0.1

    ours = LinearRegression().fit(X, y, weights)
    sk = SklearnLinear().fit(X.T, y, sample_weight=weights)
    assert ours.parameters[0] == pytest.approx(sk.intercept_, abs=1e-8)
    assert np.allclose(ours.parameters[1:], sk.coef_, atol=1e-8)

    ours = LinearRegression(lambda_=5.0).fit(X, y, weights)
    sk = Ridge(alpha=5.0).fit(X.T, y, sample_weight=weights)
    assert ours.parameters[0] == pytest.approx(sk.intercept_, abs=1e-6)
    assert np.allclose(ours.parameters[1:], sk.coef_, atol=1e-6)
    assert np.allclose(ours.predict(X), sk.predict(X.T), atol=1e-6)

    print(f"  ✓ Ridge 계수 일치: {ours.parameters[1:]}")
    print("  ✓ 모든 테스트 통과!")


def test_linear_regression_errors(rng):
    """학습 전 예측 / 차원 불일치"""
    print("\n" + "=" * 50)
    print("Test: Linear Regression Errors")
    print("=" * 50)

    model = LinearRegression()
    assert "not fitted" in repr(model)

    with pytest.raises(NotFittedError):
        model.predict(np.zeros((3, 2)))

    X, y = _make_data(rng, n=20)
    with pytest.raises(DimensionMismatchError):
        model.fit(X, y[:-1])

    model.fit(X, y)
    with pytest.raises(DimensionMismatchError):
        model.predict(np.zeros((2, 5)))
    with pytest.raises(ValueError):
        LinearRegression(lambda_=-1.0)

    print("  ✓ 모든 테스트 통과!")


def test_regression_distribution_train(rng):
    """첫 행 = 반응 변수 규약"""
    print("\n" + "=" * 50)
    print("Test: Regression Distribution Train")
    print("=" * 50)

    X, y = _make_data(rng, n=500)
    observations = np.vstack([y, X])

    dist = RegressionDistribution().train(observations)
    direct = RegressionDistribution(X, y)

    assert dist.dimensionality == 4, f"차원 오류: {dist.dimensionality}"
    assert np.allclose(dist.parameters, direct.parameters)
    assert np.allclose(dist.parameters, [1.5, 2.0, -1.0, 0.5], atol=0.05)
    assert abs(dist.error.mean[0]) < 1e-8, "잔차 평균은 0 이어야 함"
    assert np.sqrt(dist.error.covariance[0, 0]) == pytest.approx(0.1, rel=0.15)

    print(f"  ✓ 파라미터: {np.round(dist.parameters, 3)}")
    print(f"  ✓ 잔차 분산: {dist.error.covariance[0, 0]:.5f}")
    print("  ✓ 모든 테스트 통과!")


def test_regression_distribution_log_probability(rng):
    """log p(y|x) = 잔차의 정규 로그 밀도"""
    print("\n" + "=" * 50)
    print("Test: Regression Distribution Log Probability")
    print("=" * 50)

    X, y = _make_data(rng, n=100)
    dist = RegressionDistribution(X, y)

    points = np.vstack([y[:5], X[:, :5]])
    residuals = y[:5] - dist.predict(X[:, :5])
    expected = dist.error.log_probability(residuals.reshape(1, -1))

    assert np.allclose(dist.log_probability(points), expected)
    assert np.allclose(dist.probability(points), np.exp(expected))

    with pytest.raises(DimensionMismatchError):
        dist.log_probability(np.zeros((3, 2)))

    print("  ✓ 모든 테스트 통과!")


def test_regression_distribution_weighted(rng):
    """가중치 1 = 비가중, 가중치는 잔차 분포에도 적용"""
    print("\n" + "=" * 50)
    print("Test: Regression Distribution Weighted")
    print("=" * 50)

    X, y = _make_data(rng, n=100)
    observations = np.vstack([y, X])

    plain = RegressionDistribution().train(observations)
    unit = RegressionDistribution().train(observations, np.ones(100))
    assert np.allclose(plain.parameters, unit.parameters)
    assert np.allclose(plain.error.covariance, unit.error.covariance)

    weights = rng.random(100)
    weighted = RegressionDistribution().train(observations, weights)
    residuals = y - weighted.predict(X)
    expected_error = GaussianDistribution().train(residuals.reshape(1, -1), weights)
    assert np.allclose(weighted.error.covariance, expected_error.covariance)

    print("  ✓ 모든 테스트 통과!")


def test_regression_distribution_random(rng):
    """조건부 샘플링"""
    print("\n" + "=" * 50)
    print("Test: Regression Distribution Random")
    print("=" * 50)

    with pytest.raises(NotFittedError):
        RegressionDistribution().random([0.0, 0.0, 0.0], rng)

    X, y = _make_data(rng, n=300)
    dist = RegressionDistribution(X, y)

    x = np.array([1.0, 0.0, -1.0])
    samples = np.array([dist.random(x, rng) for _ in range(2000)])
    assert samples.mean() == pytest.approx(dist.predict(x.reshape(-1, 1))[0], abs=0.02)

    with pytest.raises(DimensionMismatchError):
        RegressionDistribution().train(np.zeros((1, 10)))

    print("  ✓ 모든 테스트 통과!")
