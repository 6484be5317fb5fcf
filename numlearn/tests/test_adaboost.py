"""
NumLearn - AdaBoost / 약한 학습기 검증 테스트
=============================================

테스트 항목:
1. 결정 그루터기 / 퍼셉트론의 가중 학습
2. AdaBoost.MH 부스팅 효과
3. 클래스 확률 규약 (열 합 = 1)
4. 레이블 매핑과 차원 검증

Author: NumLearn Project
"""

import numpy as np
import pytest

from numlearn import (
    AdaBoostClassifier,
    AdaBoostModel,
    DecisionTreeClassifier,
    DimensionMismatchError,
    NotFittedError,
    Perceptron,
)


def _blobs(rng, n_per_class=40):
    """선형 분리 가능한 3개 클래스"""
    centers = np.array([[0.0, 10.0, 0.0], [0.0, 0.0, 10.0]])
    y = np.repeat(np.arange(3), n_per_class)
    X = centers[:, y] + 0.5 * rng.standard_normal((2, len(y)))
    return X, y


# ============================================================
# Weak learners
# ============================================================

def test_decision_stump_basic():
    """결정 그루터기 기본 동작"""
    print("=" * 50)
    print("Test: Decision Stump Basic")
    print("=" * 50)

    X = np.array([[1.0, 2.0, 3.0, 4.0]])
    y = np.array([0, 0, 1, 1])

    stump = DecisionTreeClassifier(max_depth=1).fit(X, y, 2)

    assert np.array_equal(stump.predict(np.array([[1.5, 3.5]])), [0, 1])
    assert stump.get_depth() == 1, f"깊이 오류: {stump.get_depth()}"
    assert stump.get_n_leaves() == 2
    assert stump.root_.threshold == pytest.approx(2.5)

    proba = stump.predict_proba(X)
    assert proba.shape == (2, 4)
    assert np.allclose(proba.sum(axis=0), 1.0)

    print(f"  ✓ 임계값: {stump.root_.threshold}")
    print("  ✓ 모든 테스트 통과!")


def test_decision_tree_pure_leaf():
    """순수 노드는 분할하지 않음"""
    print("\n" + "=" * 50)
    print("Test: Decision Tree Pure Leaf")
    print("=" * 50)

    X = np.array([[1.0, 2.0, 3.0, 4.0, 5.0]])
    y = np.array([2, 2, 2, 2, 2])

    tree = DecisionTreeClassifier(max_depth=10).fit(X, y, 3)

    assert tree.get_depth() == 0, f"깊이가 0이어야 함: {tree.get_depth()}"
    assert np.all(tree.predict(X) == 2)

    print("  ✓ 모든 테스트 통과!")


def test_decision_stump_sample_weight():
    """가중치가 분할 위치와 리프 레이블을 바꿈"""
    print("\n" + "=" * 50)
    print("Test: Decision Stump Sample Weight")
    print("=" * 50)

    X = np.array([[1.0, 2.0, 3.0, 4.0, 5.0, 6.0]])
    y = np.array([0, 0, 1, 0, 1, 1])

    uniform = DecisionTreeClassifier(max_depth=1).fit(X, y, 2)
    weighted = DecisionTreeClassifier(max_depth=1).fit(
        X, y, 2, sample_weight=np.array([1.0, 1.0, 1.0, 100.0, 1.0, 1.0])
    )

    assert uniform.predict(np.array([[4.0]]))[0] == 1
    assert weighted.predict(np.array([[4.0]]))[0] == 0, "무거운 샘플을 맞혀야 함"

    unit = DecisionTreeClassifier(max_depth=1).fit(X, y, 2, sample_weight=np.ones(6))
    assert np.array_equal(unit.predict(X), uniform.predict(X))

    print("  ✓ 모든 테스트 통과!")


def test_decision_tree_feature_importance(rng):
    """유효한 특징에 중요도 집중"""
    print("\n" + "=" * 50)
    print("Test: Decision Tree Feature Importance")
    print("=" * 50)

    X = rng.standard_normal((4, 200))
    y = (X[2] > 0.3).astype(int)

    tree = DecisionTreeClassifier(max_depth=3).fit(X, y)

    assert np.argmax(tree.feature_importances_) == 2
    assert np.sum(tree.feature_importances_) == pytest.approx(1.0)
    assert np.mean(tree.predict(X) == y) == 1.0

    with pytest.raises(DimensionMismatchError):
        tree.predict(np.zeros((3, 5)))
    with pytest.raises(NotFittedError):
        DecisionTreeClassifier().predict(X)

    print(f"  ✓ 중요도: {np.round(tree.feature_importances_, 3)}")
    print("  ✓ 모든 테스트 통과!")


def test_perceptron_separable(rng):
    """선형 분리 가능 데이터에서 수렴"""
    print("\n" + "=" * 50)
    print("Test: Perceptron Separable")
    print("=" * 50)

    X, y = _blobs(rng)
    model = Perceptron().fit(X, y, 3)

    assert np.mean(model.predict(X) == y) == 1.0, "분리 가능한 데이터를 모두 맞혀야 함"
    assert model.n_iterations_ < model.max_iterations, "수렴 전에 종료됨"
    assert model.weights_.shape == (3, 2)

    with pytest.raises(DimensionMismatchError):
        model.predict(np.zeros((3, 4)))

    print(f"  ✓ 에폭 수: {model.n_iterations_}")
    print("  ✓ 모든 테스트 통과!")


def test_perceptron_max_iterations(iris):
    """분리 불가능 데이터는 max_iterations 에서 종료"""
    print("\n" + "=" * 50)
    print("Test: Perceptron Max Iterations")
    print("=" * 50)

    X, y = iris
    model = Perceptron(max_iterations=5).fit(X, y, 3)

    assert model.n_iterations_ == 5
    assert model.predict(X).shape == (X.shape[1],)

    print("  ✓ 모든 테스트 통과!")


# ============================================================
# AdaBoost
# ============================================================

def test_adaboost_iris_decision_stump(iris):
    """결정 그루터기 부스팅 정확도는 단일 그루터기 이상"""
    print("\n" + "=" * 50)
    print("Test: AdaBoost Iris (Decision Stump)")
    print("=" * 50)

    X, y = iris
    stump_accuracy = np.mean(DecisionTreeClassifier().fit(X, y, 3).predict(X) == y)

    ada = AdaBoostClassifier(n_iterations=50).fit(X, y, 3)
    labels, probabilities = ada.classify(X)
    accuracy = np.mean(labels == y)

    assert accuracy >= stump_accuracy, f"부스팅 정확도 {accuracy} < 그루터기 {stump_accuracy}"
    assert probabilities.shape == (3, X.shape[1])
    assert np.allclose(probabilities.sum(axis=0), 1.0), "확률 열 합이 1이 아님"
    assert np.array_equal(labels, np.argmax(probabilities, axis=0))
    assert len(ada.estimators_) == len(ada.alphas_) == len(ada.training_history_)
    assert 0 < ada.zt_product_ <= 1.0

    print(f"  ✓ 그루터기 정확도: {stump_accuracy:.4f}")
    print(f"  ✓ AdaBoost 정확도: {accuracy:.4f} ({len(ada.estimators_)} learners)")
    print("  ✓ 모든 테스트 통과!")


def test_adaboost_iris_depth_two(iris):
    """깊이 2 트리 부스팅"""
    print("\n" + "=" * 50)
    print("Test: AdaBoost Iris (Depth-2 Trees)")
    print("=" * 50)

    X, y = iris
    ada = AdaBoostClassifier(n_iterations=30, learner_params={'max_depth': 2}).fit(X, y, 3)
    accuracy = np.mean(ada.predict(X) == y)

    assert accuracy >= 0.9, f"정확도 부족: {accuracy:.4f}"

    staged = ada.staged_predict(X)
    assert staged.shape == (len(ada.estimators_), X.shape[1])
    assert np.array_equal(staged[-1], ada.predict(X))

    print(f"  ✓ 정확도: {accuracy:.4f}")
    print("  ✓ 모든 테스트 통과!")


def test_adaboost_perfect_learner(rng):
    """완벽한 약한 학습기 하나로 종료"""
    print("\n" + "=" * 50)
    print("Test: AdaBoost Perfect Learner")
    print("=" * 50)

    X, y = _blobs(rng)
    ada = AdaBoostClassifier(n_iterations=20, weak_learner='perceptron').fit(X, y, 3)

    assert len(ada.estimators_) == 1, f"학습기 수: {len(ada.estimators_)}"
    assert np.mean(ada.predict(X) == y) == 1.0
    assert np.allclose(ada.predict_proba(X).max(axis=0), 1.0)

    print("  ✓ 모든 테스트 통과!")


def test_adaboost_errors(iris):
    """잘못된 입력"""
    print("\n" + "=" * 50)
    print("Test: AdaBoost Errors")
    print("=" * 50)

    X, y = iris
    ada = AdaBoostClassifier(n_iterations=5)
    assert "not fitted" in repr(ada)

    with pytest.raises(NotFittedError):
        ada.classify(X)
    with pytest.raises(DimensionMismatchError):
        ada.fit(X, y[:-1], 3)
    with pytest.raises(ValueError):
        AdaBoostClassifier(weak_learner='svm')
    with pytest.raises(ValueError):
        AdaBoostClassifier(n_iterations=0)

    ada.fit(X, y, 3)
    with pytest.raises(DimensionMismatchError) as excinfo:
        ada.classify(X[:3])
    assert "model dimensionality (4)" in str(excinfo.value)

    print("  ✓ 모든 테스트 통과!")


def test_adaboost_model_label_mapping(iris):
    """임의의 레이블 값 복원"""
    print("\n" + "=" * 50)
    print("Test: AdaBoostModel Label Mapping")
    print("=" * 50)

    X, y = iris
    original = np.array([10, 20, 30])[y]

    model = AdaBoostModel(n_iterations=20).train(X, original)

    assert np.array_equal(model.mappings, [10, 20, 30])
    assert model.dimensionality == 4

    predictions, probabilities = model.classify(X)
    assert set(np.unique(predictions)) <= {10, 20, 30}
    assert probabilities.shape == (3, X.shape[1])
    assert np.allclose(probabilities.sum(axis=0), 1.0)
    assert np.array_equal(predictions, model.mappings[np.argmax(probabilities, axis=0)])

    print(f"  ✓ {model}")
    print("  ✓ 모든 테스트 통과!")


def test_adaboost_model_dimension_mismatch(iris):
    """테스트 차원 불일치"""
    print("\n" + "=" * 50)
    print("Test: AdaBoostModel Dimension Mismatch")
    print("=" * 50)

    X, y = iris
    model = AdaBoostModel(n_iterations=5).train(X, y)

    with pytest.raises(DimensionMismatchError) as excinfo:
        model.classify(np.zeros((5, 10)))
    assert str(excinfo.value) == (
        "Test data dimensionality (5) must be the same as the model dimensionality (4)!"
    )

    with pytest.raises(NotFittedError):
        AdaBoostModel().classify(X)

    print("  ✓ 모든 테스트 통과!")
