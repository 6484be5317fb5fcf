"""
NumLearn - 직렬화 검증 테스트
=============================

모든 형식(JSON, joblib, pickle)에서 저장 후 로드한 객체가
원본과 동일한 평가 결과를 내는지 검증합니다.

Author: NumLearn Project
"""

import json

import numpy as np
import pytest

from numlearn import (
    AdaBoostModel,
    DiagonalGaussianDistribution,
    DiscreteDistribution,
    GammaDistribution,
    GaussianDistribution,
    LaplaceDistribution,
    LinearRegression,
    RegressionDistribution,
    SerializationError,
    SerializationFormat,
    dumps,
    load,
    loads,
    save,
)
from numlearn.nn import FFN, L2Regularizer, Linear, LogSoftMax, MultiheadAttention

FORMATS = [SerializationFormat.JSON, SerializationFormat.JOBLIB, SerializationFormat.PICKLE]


def _distributions(rng):
    data = rng.gamma(3.0, 2.0, size=(2, 200))
    return [
        DiscreteDistribution(probabilities=[[0.2, 0.8], [0.1, 0.3, 0.6]]),
        GaussianDistribution().train(data),
        DiagonalGaussianDistribution().train(data),
        GammaDistribution().train(data),
        LaplaceDistribution().train(data),
        RegressionDistribution(data[1:], data[0]),
    ]


@pytest.mark.parametrize("fmt", FORMATS)
def test_distribution_round_trip(rng, fmt):
    """분포 저장 후 로드 시 로그 확률 동일"""
    print("=" * 50)
    print(f"Test: Distribution Round Trip ({fmt.value})")
    print("=" * 50)

    points = {
        'DiscreteDistribution': np.array([[0, 1, 1], [2, 0, 1]]),
    }

    for dist in _distributions(rng):
        name = type(dist).__name__
        restored = loads(dumps(dist, fmt), fmt)

        assert type(restored) is type(dist), f"{name} 타입 불일치"
        assert restored.dimensionality == dist.dimensionality

        x = points.get(name, rng.gamma(3.0, 2.0, size=(dist.dimensionality, 5)))
        assert np.array_equal(dist.log_probability(x), restored.log_probability(x)), \
            f"{name} 로그 확률 불일치"
        print(f"  ✓ {name}")

    print("  ✓ 모든 테스트 통과!")


@pytest.mark.parametrize("fmt", FORMATS)
def test_network_round_trip(rng, fmt):
    """레이어 / 네트워크 저장 후 로드 시 출력 동일"""
    print("\n" + "=" * 50)
    print(f"Test: Network Round Trip ({fmt.value})")
    print("=" * 50)

    mask = np.zeros((2, 3))
    mask[0, 2] = -1e9
    model = FFN(input_dimensions=[4, 2 + 2 * 3])
    model.add(MultiheadAttention(2, 2, attn_mask=mask))
    model.add(Linear(3, regularizer=L2Regularizer(0.01)))
    model.add(LogSoftMax())
    model.reset(rng)

    x = rng.standard_normal((4 * 8, 3))
    restored = loads(dumps(model, fmt), fmt)

    assert np.array_equal(model.forward(x), restored.forward(x)), "네트워크 출력 불일치"
    assert isinstance(restored.layers[1].regularizer, L2Regularizer)
    assert restored.layers[1].regularizer.factor == 0.01

    # 복원된 레이어도 하나의 버퍼를 공유
    restored.parameters[:] = 0.0
    assert np.all(restored.layers[0].query_weight == 0.0)

    layer = model.layers[1]
    restored_layer = loads(dumps(layer, fmt), fmt)
    hidden = model.layers[0].forward(x)
    assert np.array_equal(layer.forward(hidden), restored_layer.forward(hidden))

    print("  ✓ 모든 테스트 통과!")


@pytest.mark.parametrize("suffix", [".json", ".joblib", ".pkl"])
def test_adaboost_file_round_trip(tmp_path, iris, suffix):
    """확장자로 형식을 판단해 파일 저장/로드"""
    print("\n" + "=" * 50)
    print(f"Test: AdaBoost File Round Trip ({suffix})")
    print("=" * 50)

    X, y = iris
    model = AdaBoostModel(n_iterations=10).train(X, np.array(['a', 'b', 'c'])[y])

    path = save(model, tmp_path / f"model{suffix}")
    restored = load(path)

    labels, probabilities = model.classify(X)
    restored_labels, restored_probabilities = restored.classify(X)

    assert np.array_equal(labels, restored_labels)
    assert np.array_equal(probabilities, restored_probabilities)
    assert restored.dimensionality == model.dimensionality

    print(f"  ✓ {path.name}")
    print("  ✓ 모든 테스트 통과!")


def test_json_payload_is_structured(rng):
    """JSON 페이로드 구조"""
    print("\n" + "=" * 50)
    print("Test: JSON Payload Structure")
    print("=" * 50)

    X = rng.standard_normal((2, 20))
    model = LinearRegression(lambda_=0.5).fit(X, X[0] - X[1])
    payload = json.loads(dumps(model))

    assert payload['class'] == 'LinearRegression'
    assert 'version' in payload
    assert payload['state']['lambda_'] == 0.5
    assert payload['state']['parameters']['shape'] == [3]

    print("  ✓ 모든 테스트 통과!")


def test_serialization_errors(tmp_path):
    """알 수 없는 클래스 / 형식"""
    print("\n" + "=" * 50)
    print("Test: Serialization Errors")
    print("=" * 50)

    unknown = json.dumps({'class': 'NoSuchModel', 'version': '1.0.0', 'state': {}})
    with pytest.raises(SerializationError):
        loads(unknown)
    with pytest.raises(SerializationError):
        loads("{not json")
    with pytest.raises(SerializationError):
        loads(json.dumps({'state': {}}))
    with pytest.raises(SerializationError):
        dumps(object())
    with pytest.raises(SerializationError):
        save(LaplaceDistribution([0.0]), tmp_path / "model.txt")
    with pytest.raises(FileNotFoundError):
        load(tmp_path / "missing.json")

    print("  ✓ 모든 테스트 통과!")
