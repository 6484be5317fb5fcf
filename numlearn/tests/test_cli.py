"""
NumLearn - 명령행 인터페이스 검증 테스트
========================================

테스트 항목:
1. 학습 → 저장 → 확률 예측 파이프라인
2. 레이블 파일 없이 마지막 차원을 레이블로 사용
3. 차원 불일치 시 출력 파일 없이 종료 코드 1

Author: NumLearn Project
"""

import numpy as np
import pytest

from numlearn import LaplaceDistribution, save
from numlearn.cli import build_predict_proba_parser, predict_proba_main, train_main
from numlearn.data_utils import load_labels, load_matrix, save_labels, save_matrix


@pytest.fixture
def iris_files(tmp_path, iris):
    X, y = iris
    train = save_matrix(tmp_path / "train.csv", X)
    labels = save_labels(tmp_path / "labels.csv", y + 1)
    return tmp_path, train, labels


def test_data_utils_layout(tmp_path):
    """CSV 한 줄 = 관측점 하나"""
    print("=" * 50)
    print("Test: Data Utils Layout")
    print("=" * 50)

    matrix = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    path = save_matrix(tmp_path / "m.csv", matrix)

    lines = path.read_text().strip().splitlines()
    assert len(lines) == 3, "CSV 줄 수는 관측점 수와 같아야 함"
    assert np.array_equal(load_matrix(path), matrix)

    npy = save_matrix(tmp_path / "m.npy", matrix)
    assert np.array_equal(load_matrix(npy), matrix)

    labels = save_labels(tmp_path / "l.csv", np.array([3, 1, 2]))
    loaded = load_labels(labels)
    assert np.array_equal(loaded, [3, 1, 2])
    assert np.issubdtype(loaded.dtype, np.integer)

    with pytest.raises(FileNotFoundError):
        load_matrix(tmp_path / "missing.csv")

    print("  ✓ 모든 테스트 통과!")


def test_train_then_predict_proba(iris_files):
    """학습 후 클래스 확률 계산"""
    print("\n" + "=" * 50)
    print("Test: CLI Train → Predict Proba")
    print("=" * 50)

    tmp_path, train, labels = iris_files
    model_path = tmp_path / "model.json"

    code = train_main([
        "--training", str(train), "--labels", str(labels),
        "--output_model", str(model_path), "--iterations", "10",
    ])
    assert code == 0, "학습 실패"
    assert model_path.exists()

    probabilities_path = tmp_path / "probs.csv"
    predictions_path = tmp_path / "preds.csv"
    code = predict_proba_main([
        "-T", str(train), "-m", str(model_path),
        "-p", str(probabilities_path), "--predictions", str(predictions_path),
    ])
    assert code == 0, "예측 실패"

    probabilities = load_matrix(probabilities_path)
    predictions = load_labels(predictions_path)

    assert probabilities.shape == (3, 150), f"확률 행렬 형태 오류: {probabilities.shape}"
    assert np.allclose(probabilities.sum(axis=0), 1.0)
    assert set(np.unique(predictions)) <= {1, 2, 3}, "원래 레이블 값이어야 함"

    print(f"  ✓ 확률 행렬: {probabilities.shape}")
    print("  ✓ 모든 테스트 통과!")


def test_train_labels_from_last_dimension(tmp_path, iris):
    """레이블 파일이 없으면 마지막 행이 레이블"""
    print("\n" + "=" * 50)
    print("Test: CLI Labels From Last Dimension")
    print("=" * 50)

    X, y = iris
    train = save_matrix(tmp_path / "train.csv", np.vstack([X, y]))
    model_path = tmp_path / "model.joblib"

    assert train_main(["-t", str(train), "-M", str(model_path), "-i", "5",
                       "-w", "perceptron"]) == 0

    test = save_matrix(tmp_path / "test.csv", X)
    probabilities_path = tmp_path / "probs.csv"
    assert predict_proba_main(["-T", str(test), "-m", str(model_path),
                               "-p", str(probabilities_path)]) == 0
    assert load_matrix(probabilities_path).shape == (3, 150)

    print("  ✓ 모든 테스트 통과!")


def test_predict_proba_dimension_mismatch(iris_files):
    """차원이 다르면 아무것도 쓰지 않고 실패"""
    print("\n" + "=" * 50)
    print("Test: CLI Dimension Mismatch")
    print("=" * 50)

    tmp_path, train, labels = iris_files
    model_path = tmp_path / "model.pkl"
    assert train_main(["-t", str(train), "-l", str(labels),
                       "-M", str(model_path), "-i", "5"]) == 0

    test = save_matrix(tmp_path / "test.csv", np.zeros((3, 10)))
    probabilities_path = tmp_path / "probs.csv"

    code = predict_proba_main(["-T", str(test), "-m", str(model_path),
                               "-p", str(probabilities_path)])

    assert code == 1, "차원 불일치는 종료 코드 1"
    assert not probabilities_path.exists(), "실패 시 출력 파일이 없어야 함"

    print("  ✓ 모든 테스트 통과!")


def test_predict_proba_bad_inputs(tmp_path):
    """모델 파일 오류"""
    print("\n" + "=" * 50)
    print("Test: CLI Bad Inputs")
    print("=" * 50)

    test = save_matrix(tmp_path / "test.csv", np.zeros((1, 4)))
    other = save(LaplaceDistribution([0.0]), tmp_path / "laplace.json")

    assert predict_proba_main(["-T", str(test), "-m", str(other)]) == 1
    assert predict_proba_main(["-T", str(test), "-m", str(tmp_path / "none.json")]) == 1

    with pytest.raises(SystemExit):
        build_predict_proba_parser().parse_args(["-T", str(test)])

    print("  ✓ 모든 테스트 통과!")


def test_predict_proba_malformed_csv(iris_files):
    """숫자가 아닌 CSV 는 로그 후 종료 코드 1"""
    print("\n" + "=" * 50)
    print("Test: CLI Malformed CSV")
    print("=" * 50)

    tmp_path, train, labels = iris_files
    model_path = tmp_path / "model.json"
    assert train_main(["-t", str(train), "-l", str(labels),
                       "-M", str(model_path), "-i", "3"]) == 0

    test = tmp_path / "bad.csv"
    test.write_text("1.0,2.0,3.0,4.0\nfoo,bar,baz,qux\n")
    probabilities_path = tmp_path / "probs.csv"

    code = predict_proba_main(["-T", str(test), "-m", str(model_path),
                               "-p", str(probabilities_path)])
    assert code == 1, "잘못된 CSV 는 종료 코드 1"
    assert not probabilities_path.exists()

    print("  ✓ 모든 테스트 통과!")
